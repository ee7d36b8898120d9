import unittest
from datetime import datetime, timezone
from itertools import product

from grocer.domain.PantryItem import PantryItem
from grocer.logic.pantry.refill import (
    IllegalTransition, TRANSITIONS, advance_refill, allowed_next, counts_as_spend,
    filter_refill_queue, is_legal, legal_actions, parse_pack_count, queue_counts,
    request_refill, restock
)
from grocer.utilities.constants import (
    CONFIRMED, CONSUMER, DELIVERED, OUT_FOR_DELIVERY, PANTRY_STATUSES, REFILL_REQUESTED,
    SHOPKEEPER, STOCKED
)


def _item(status=STOCKED, packs=2, **kw):
    return PantryItem(id="i1", product_name="Milk", status=status, packs_owned=packs, price=20, **kw)


class TestTransitions(unittest.TestCase):

    def test_exactly_five_legal_transitions(self):
        legal = {(a, b) for a, b in product(PANTRY_STATUSES, repeat=2) if is_legal(a, b)}
        self.assertEqual(legal, {
            (STOCKED, REFILL_REQUESTED),
            (DELIVERED, REFILL_REQUESTED),
            (REFILL_REQUESTED, CONFIRMED),
            (CONFIRMED, OUT_FOR_DELIVERY),
            (OUT_FOR_DELIVERY, DELIVERED),
        })
        self.assertEqual(len(TRANSITIONS), 5)

    def test_skipping_a_state_is_illegal(self):
        self.assertFalse(is_legal(CONFIRMED, DELIVERED))
        self.assertFalse(is_legal(REFILL_REQUESTED, OUT_FOR_DELIVERY))
        with self.assertRaises(IllegalTransition):
            advance_refill(_item(CONFIRMED), DELIVERED)

    def test_actions_depend_on_role(self):
        self.assertEqual(allowed_next(STOCKED, CONSUMER), [REFILL_REQUESTED])
        self.assertEqual(allowed_next(STOCKED, SHOPKEEPER), [])
        self.assertEqual(allowed_next(REFILL_REQUESTED, CONSUMER), [])
        self.assertEqual(allowed_next(REFILL_REQUESTED, SHOPKEEPER), [CONFIRMED])
        self.assertEqual(legal_actions(_item(DELIVERED), CONSUMER), [REFILL_REQUESTED])

    def test_consumer_cannot_confirm(self):
        self.assertFalse(is_legal(REFILL_REQUESTED, CONFIRMED, CONSUMER))


class TestRequestRefill(unittest.TestCase):

    def test_request_stores_current_packs(self):
        item = _item(STOCKED, packs=2)
        requested = request_refill(item, 0)
        self.assertEqual(requested.status, REFILL_REQUESTED)
        self.assertEqual(requested.packs_owned, 0)
        # original untouched
        self.assertEqual(item.status, STOCKED)
        self.assertEqual(item.packs_owned, 2)

    def test_request_again_after_delivery(self):
        self.assertEqual(request_refill(_item(DELIVERED), 1).status, REFILL_REQUESTED)

    def test_duplicate_request_in_flight_is_rejected(self):
        for status in (REFILL_REQUESTED, CONFIRMED, OUT_FOR_DELIVERY):
            with self.assertRaises(IllegalTransition):
                request_refill(_item(status), 1)

    def test_negative_count_is_clamped(self):
        self.assertEqual(request_refill(_item(), -3).packs_owned, 0)

    def test_malformed_counts_are_rejected(self):
        for bad in ("two", None, 1.5, True):
            with self.assertRaises(ValueError):
                parse_pack_count(bad)
        self.assertEqual(parse_pack_count("3"), 3)
        self.assertEqual(parse_pack_count(2.0), 2)


class TestShopProgress(unittest.TestCase):

    def test_full_cycle(self):
        item = request_refill(_item(), 1)
        for target in (CONFIRMED, OUT_FOR_DELIVERY, DELIVERED):
            item = advance_refill(item, target)
            self.assertEqual(item.status, target)

    def test_delivered_does_not_reset_on_its_own(self):
        item = advance_refill(_item(OUT_FOR_DELIVERY), DELIVERED)
        self.assertEqual(item.status, DELIVERED)
        self.assertIsNone(item.last_refilled)


class TestRestock(unittest.TestCase):

    def test_restock_after_delivery(self):
        now = datetime(2026, 3, 1, tzinfo=timezone.utc)
        item = restock(_item(DELIVERED, packs=0), 4, now=now)
        self.assertEqual(item.status, STOCKED)
        self.assertEqual(item.packs_owned, 4)
        self.assertEqual(item.last_refilled, now)

    def test_stocked_only_updates_count(self):
        item = restock(_item(STOCKED, packs=2), 1)
        self.assertEqual(item.status, STOCKED)
        self.assertEqual(item.packs_owned, 1)
        self.assertIsNone(item.last_refilled)

    def test_cannot_restock_mid_refill(self):
        with self.assertRaises(IllegalTransition):
            restock(_item(CONFIRMED), 3)


class TestDerivedViews(unittest.TestCase):

    def setUp(self):
        self.items = [_item(s) for s in (REFILL_REQUESTED, CONFIRMED, OUT_FOR_DELIVERY, DELIVERED, REFILL_REQUESTED)]

    def test_queue_views(self):
        self.assertEqual([i.status for i in filter_refill_queue(self.items, "pending")],
                         [REFILL_REQUESTED, REFILL_REQUESTED])
        self.assertEqual([i.status for i in filter_refill_queue(self.items, "active")],
                         [CONFIRMED, OUT_FOR_DELIVERY])
        self.assertEqual(len(filter_refill_queue(self.items, "all")), 5)
        self.assertEqual(queue_counts(self.items), {"pending": 2, "active": 2, "all": 5})

    def test_unknown_view(self):
        with self.assertRaises(ValueError):
            filter_refill_queue(self.items, "done")

    def test_spend_rule(self):
        self.assertTrue(counts_as_spend(_item(CONFIRMED)))
        self.assertTrue(counts_as_spend(_item(OUT_FOR_DELIVERY)))
        self.assertTrue(counts_as_spend(_item(DELIVERED)))
        self.assertFalse(counts_as_spend(_item(REFILL_REQUESTED)))
        self.assertFalse(counts_as_spend(_item(STOCKED)))
        self.assertTrue(counts_as_spend(_item(STOCKED, last_refilled=datetime(2026, 1, 1, tzinfo=timezone.utc))))


class TestPantryItemFromDict(unittest.TestCase):

    def test_embedded_references_are_normalized(self):
        item = PantryItem.from_dict({
            "_id": "i9", "userId": {"_id": "u1", "name": "Asha"}, "shopId": {"_id": "s1", "name": "Fresh Mart"},
            "productName": "Milk", "packsOwned": "3", "price": "20", "status": "CONFIRMED",
        })
        self.assertEqual(item.user_id, "u1")
        self.assertEqual(item.shop_id, "s1")
        self.assertEqual(item.shop_name, "Fresh Mart")
        self.assertEqual(item.packs_owned, 3)
        self.assertEqual(item.refill_cost, 60)
        self.assertEqual(item.customer["name"], "Asha")

    def test_unknown_status_falls_back_to_stocked(self):
        self.assertEqual(PantryItem.from_dict({"status": "LOST"}).status, STOCKED)

    def test_constructor_rejects_bad_values(self):
        with self.assertRaises(ValueError):
            PantryItem(status="LOST")
        with self.assertRaises(ValueError):
            PantryItem(packs_owned=-1)
