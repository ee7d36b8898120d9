"""Order status lifecycle; only the owning shop moves an order."""
from __future__ import annotations
from typing import Dict, List, Tuple

from grocer.utilities.constants import (
    CANCELLED, CONFIRMED, DELIVERED, PENDING, SHIPPED, SHOPKEEPER
)
from grocer.logic.pantry.refill import IllegalTransition

ORDER_TRANSITIONS: Dict[str, Tuple[str, ...]] = {
    PENDING: (CONFIRMED, CANCELLED),
    CONFIRMED: (SHIPPED,),
    SHIPPED: (DELIVERED,),
    DELIVERED: (),
    CANCELLED: (),
}


def next_order_statuses(current: str, role: str = SHOPKEEPER) -> List[str]:
    if role != SHOPKEEPER:
        return []
    return list(ORDER_TRANSITIONS.get(current, ()))


def check_order_transition(current: str, target: str, role: str) -> None:
    if target not in next_order_statuses(current, role):
        raise IllegalTransition(current, target, role)
