"""Pantry refill lifecycle.

A tracked item moves STOCKED -> REFILL_REQUESTED -> CONFIRMED -> OUT_FOR_DELIVERY
-> DELIVERED, and a delivered item may be requested again. The consumer owns
the request; the shop owns every later step. No step can be skipped.

Returning an item to STOCKED after receipt is a separate consumer action
(``restock``) and never happens on its own.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from grocer.domain.PantryItem import PantryItem
from grocer.utilities.constants import (
    CONFIRMED, CONSUMER, DELIVERED, OUT_FOR_DELIVERY, QUEUE_ACTIVE, QUEUE_ALL,
    QUEUE_PENDING, REFILL_REQUESTED, SHOPKEEPER, STOCKED
)

__all__ = [
    "IllegalTransition", "TRANSITIONS", "is_legal", "allowed_next", "legal_actions", "check_transition",
    "parse_pack_count", "request_refill", "advance_refill", "restock",
    "counts_as_spend", "filter_refill_queue", "queue_counts",
]

# (from, to) -> actor allowed to make the move
TRANSITIONS: Dict[Tuple[str, str], str] = {
    (STOCKED, REFILL_REQUESTED): CONSUMER,
    (DELIVERED, REFILL_REQUESTED): CONSUMER,
    (REFILL_REQUESTED, CONFIRMED): SHOPKEEPER,
    (CONFIRMED, OUT_FOR_DELIVERY): SHOPKEEPER,
    (OUT_FOR_DELIVERY, DELIVERED): SHOPKEEPER,
}

_QUEUE_STATUSES = {
    QUEUE_PENDING: (REFILL_REQUESTED,),
    QUEUE_ACTIVE: (CONFIRMED, OUT_FOR_DELIVERY),
}

_SPEND_STATUSES = (CONFIRMED, OUT_FOR_DELIVERY, DELIVERED)


class IllegalTransition(ValueError):
    def __init__(self, current: str, target: str, role: Optional[str] = None):
        who = f" by {role}" if role else ""
        super().__init__(f"Cannot move from {current} to {target}{who}")
        self.current = current
        self.target = target
        self.role = role


def is_legal(current: str, target: str, role: Optional[str] = None) -> bool:
    actor = TRANSITIONS.get((current, target))
    if actor is None:
        return False
    return role is None or actor == role


def allowed_next(current: str, role: str) -> List[str]:
    '''Next statuses the given role may choose from current.'''
    return [to for (frm, to), actor in TRANSITIONS.items() if frm == current and actor == role]


def legal_actions(item: PantryItem, role: str) -> List[str]:
    return allowed_next(item.status, role)


def check_transition(current: str, target: str, role: str) -> None:
    if not is_legal(current, target, role):
        raise IllegalTransition(current, target, role)


def parse_pack_count(value: Any) -> int:
    '''Validate a pack count typed by the consumer; negatives clamp to zero.'''
    if isinstance(value, bool):
        raise ValueError(f"Invalid pack count: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Pack count must be a whole number: {value!r}")
        value = int(value)
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid pack count: {value!r}")
    return max(0, count)


def request_refill(item: PantryItem, current_packs: Any) -> PantryItem:
    '''Consumer asks the shop for a refill, declaring what is still on hand.

    The declared count becomes the item's packs_owned.
    '''
    packs = parse_pack_count(current_packs)
    check_transition(item.status, REFILL_REQUESTED, CONSUMER)
    return item.evolve(status=REFILL_REQUESTED, packs_owned=packs)


def advance_refill(item: PantryItem, target: str) -> PantryItem:
    '''Shop moves a refill one step forward.'''
    check_transition(item.status, target, SHOPKEEPER)
    return item.evolve(status=target)


def restock(item: PantryItem, current_packs: Any, now: Optional[datetime] = None) -> PantryItem:
    '''Consumer updates the on-hand count.

    A DELIVERED item goes back to STOCKED and gets lastRefilled stamped; a
    STOCKED item only changes its count. Items mid-refill cannot be edited.
    '''
    packs = parse_pack_count(current_packs)
    if item.status == DELIVERED:
        now = now or datetime.now(timezone.utc)
        return item.evolve(status=STOCKED, packs_owned=packs, last_refilled=now)
    if item.status == STOCKED:
        return item.evolve(packs_owned=packs)
    raise IllegalTransition(item.status, STOCKED, CONSUMER)


def counts_as_spend(item: PantryItem) -> bool:
    '''A refill is committed spend once the shop confirmed it, or after a completed cycle.'''
    if item.status in _SPEND_STATUSES:
        return True
    return item.status == STOCKED and item.last_refilled is not None


def filter_refill_queue(items: Iterable[PantryItem], view: str = QUEUE_PENDING) -> List[PantryItem]:
    if view == QUEUE_ALL:
        return list(items)
    if view not in _QUEUE_STATUSES:
        raise ValueError(f"Unknown refill queue view: {view}")
    wanted = _QUEUE_STATUSES[view]
    return [i for i in items if i.status in wanted]


def queue_counts(items: Iterable[PantryItem]) -> Dict[str, int]:
    items = list(items)
    return {
        QUEUE_PENDING: len(filter_refill_queue(items, QUEUE_PENDING)),
        QUEUE_ACTIVE: len(filter_refill_queue(items, QUEUE_ACTIVE)),
        QUEUE_ALL: len(items),
    }
