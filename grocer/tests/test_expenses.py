import unittest
from datetime import datetime, timedelta, timezone

from grocer.domain.Order import Order, OrderLine
from grocer.domain.PantryItem import PantryItem
from grocer.logic.reporting.expenses import (
    aggregate_expenses, month_key, month_label, refill_transactions
)
from grocer.utilities.constants import (
    CONFIRMED, DELIVERED, OUT_FOR_DELIVERY, REFILL_REQUESTED, STOCKED
)

NOW = datetime(2026, 10, 15, 12, 0, tzinfo=timezone.utc)


def _order(days_ago, total=None, shop="s1", shop_name="Fresh Mart", lines=None):
    return Order(id=f"o{days_ago}", shop_id=shop, shop_name=shop_name, total_amount=total,
                 items=lines or [OrderLine("p1", 1, 10)], order_date=NOW - timedelta(days=days_ago))


def _refill(status, price=20, packs=3, days_ago=1, shop="s2", shop_name="Corner Store", **kw):
    return PantryItem(id=f"r-{status}", shop_id=shop, shop_name=shop_name, product_name="Rice",
                      price=price, packs_owned=packs, status=status,
                      updated_at=NOW - timedelta(days=days_ago), **kw)


class TestRefillAmounts(unittest.TestCase):

    def test_confirmed_counts_requested_does_not(self):
        confirmed = refill_transactions([_refill(CONFIRMED)], NOW)
        requested = refill_transactions([_refill(REFILL_REQUESTED)], NOW)
        self.assertEqual(confirmed[0].amount, 60)
        self.assertEqual(requested[0].amount, 0)

    def test_plain_stocked_item_is_not_a_transaction(self):
        self.assertEqual(refill_transactions([_refill(STOCKED)], NOW), [])

    def test_stocked_after_a_cycle_counts(self):
        item = _refill(STOCKED, last_refilled=NOW - timedelta(days=2))
        self.assertEqual(refill_transactions([item], NOW)[0].amount, 60)


class TestAggregateExpenses(unittest.TestCase):

    def setUp(self):
        self.orders = [
            _order(3, total=100),
            _order(8, lines=[OrderLine("a", 2, 10), OrderLine("b", 1, 5)]),
            _order(40, total=50, shop="s3", shop_name="Far Away"),
            _order(400, total=70),
        ]
        self.refills = [_refill(CONFIRMED, days_ago=1), _refill(REFILL_REQUESTED, days_ago=2),
                        _refill(DELIVERED, price=10, packs=1, days_ago=6),
                        _refill(OUT_FOR_DELIVERY, price=5, packs=2, days_ago=20, shop=None, shop_name="")]

    def test_all_returns_everything(self):
        summary = aggregate_expenses(self.orders, self.refills, "all", NOW)
        self.assertEqual(summary["totalSpent"], 100 + 25 + 50 + 70 + 60 + 0 + 10 + 10)
        self.assertEqual(len(summary["recentTransactions"]), 8)

    def test_week_excludes_older_than_seven_days(self):
        summary = aggregate_expenses(self.orders, self.refills, "week", NOW)
        self.assertEqual(summary["totalSpent"], 100 + 60 + 0 + 10)
        for t in summary["recentTransactions"]:
            moment = datetime.fromisoformat(t["date"])
            self.assertLessEqual(NOW - moment, timedelta(days=7))

    def test_window_boundary_is_inclusive(self):
        summary = aggregate_expenses([_order(7, total=1)], [], "week", NOW)
        self.assertEqual(summary["totalSpent"], 1)

    def test_shop_totals_add_up(self):
        for timeframe in ("all", "week", "month", "year"):
            summary = aggregate_expenses(self.orders, self.refills, timeframe, NOW)
            shop_sum = sum(s["total"] for s in summary["shopWiseSpending"])
            self.assertAlmostEqual(shop_sum, summary["totalSpent"])
            month_sum = sum(m["total"] for m in summary["monthlySpending"])
            self.assertAlmostEqual(month_sum, summary["totalSpent"])

    def test_shop_breakdown(self):
        summary = aggregate_expenses(self.orders, self.refills, "all", NOW)
        by_id = {s["shopId"]: s for s in summary["shopWiseSpending"]}
        self.assertEqual(by_id["s1"]["orders"], 3)
        self.assertEqual(by_id["s1"]["total"], 195)
        self.assertEqual(by_id["s1"]["shopName"], "Fresh Mart")
        self.assertEqual(by_id["s2"]["refills"], 3)
        self.assertEqual(by_id[None]["shopName"], "Unknown Shop")
        totals = [s["total"] for s in summary["shopWiseSpending"]]
        self.assertEqual(totals, sorted(totals, reverse=True))

    def test_recent_transactions_newest_first_and_capped(self):
        orders = [_order(d, total=1) for d in range(15)]
        recent = aggregate_expenses(orders, [], "all", NOW)["recentTransactions"]
        self.assertEqual(len(recent), 10)
        self.assertEqual([t["id"] for t in recent[:3]], ["o0", "o1", "o2"])

    def test_monthly_keys_sorted_newest_first(self):
        monthly = aggregate_expenses(self.orders, self.refills, "all", NOW)["monthlySpending"]
        keys = [m["key"] for m in monthly]
        self.assertEqual(keys, sorted(keys, reverse=True))
        self.assertEqual(monthly[0]["label"], "October 2026")

    def test_unknown_timeframe(self):
        with self.assertRaises(ValueError):
            aggregate_expenses([], [], "decade", NOW)

    def test_empty_input(self):
        summary = aggregate_expenses([], [], "month", NOW)
        self.assertEqual(summary["totalSpent"], 0)
        self.assertEqual(summary["shopWiseSpending"], [])
        self.assertEqual(summary["monthlySpending"], [])


class TestMonthKey(unittest.TestCase):

    def test_key_and_label(self):
        key = month_key(datetime(2026, 1, 31, tzinfo=timezone.utc))
        self.assertEqual(key, 2026 * 12)
        self.assertEqual(month_label(key), "January 2026")
        self.assertGreater(month_key(datetime(2026, 2, 1)), key)
        self.assertEqual(month_label(month_key(datetime(2025, 12, 1))), "December 2025")
