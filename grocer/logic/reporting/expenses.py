"""Expense aggregation over a consumer's orders and pantry refills.

Provides aggregate_expenses(orders, refills, timeframe, now).
"""
from __future__ import annotations
import calendar
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from grocer.domain.Order import Order
from grocer.domain.PantryItem import PantryItem
from grocer.logic.pantry.refill import counts_as_spend
from grocer.utilities.constants import (
    CONFIRMED, DELIVERED, OUT_FOR_DELIVERY, RECENT_TRANSACTIONS_LIMIT, REFILL_REQUESTED,
    STOCKED, TIMEFRAME_DAYS, UNKNOWN_PRODUCT_NAME, UNKNOWN_SHOP_NAME
)

__all__ = [
    "Transaction", "order_transactions", "refill_transactions", "month_key",
    "month_label", "aggregate_expenses",
]

ORDER = "order"
REFILL = "refill"
UNKNOWN_SHOP_KEY = "unknown"

_REFILL_CYCLE = (REFILL_REQUESTED, CONFIRMED, OUT_FOR_DELIVERY, DELIVERED)


class Transaction:
    def __init__(self, type: str, amount: float, date: datetime, shop_id: Optional[str],
                 shop_name: str = "", items: Optional[List[dict]] = None, source_id: Optional[str] = None):
        self.type = type
        self.amount = amount
        self.date = date
        self.shop_id = shop_id
        self.shop_name = shop_name
        self.items = items or []
        self.source_id = source_id

    def to_dict(self):
        return {
            "id": self.source_id,
            "type": self.type,
            "amount": round(self.amount, 2),
            "date": self.date.isoformat(),
            "shopId": self.shop_id,
            "shopName": self.shop_name or UNKNOWN_SHOP_NAME,
            "items": self.items,
        }

    def __repr__(self) -> str:
        return f"Transaction({self.type}, {self.amount}, {self.date:%Y-%m-%d})"


def order_transactions(orders: Iterable[Order], now: datetime) -> List[Transaction]:
    return [
        Transaction(
            type=ORDER,
            amount=o.amount,
            date=o.order_date or now,
            shop_id=o.shop_id,
            shop_name=o.shop_name,
            items=[{"productId": l.product_id, "productName": l.name, "quantity": l.quantity, "price": l.price}
                   for l in o.items],
            source_id=o.id,
        )
        for o in orders
    ]


def refill_transactions(items: Iterable[PantryItem], now: datetime) -> List[Transaction]:
    '''Refills that belong in the history; uncommitted ones carry amount 0.'''
    result = []
    for item in items:
        in_history = item.status in _REFILL_CYCLE or (item.status == STOCKED and item.last_refilled)
        if not in_history:
            continue
        result.append(Transaction(
            type=REFILL,
            amount=item.refill_cost if counts_as_spend(item) else 0.0,
            date=item.updated_at or item.last_refilled or now,
            shop_id=item.shop_id,
            shop_name=item.shop_name,
            items=[{
                "productName": item.product_name or UNKNOWN_PRODUCT_NAME,
                "quantity": item.packs_owned,
                "price": item.price,
            }],
            source_id=item.id,
        ))
    return result


def month_key(moment: datetime) -> int:
    '''Sortable month number: year * 12 + zero-based month.'''
    return moment.year * 12 + (moment.month - 1)


def month_label(key: int) -> str:
    year, month_index = divmod(key, 12)
    return f"{calendar.month_name[month_index + 1]} {year}"


def _within(transaction: Transaction, now: datetime, window_days: Optional[int]) -> bool:
    if window_days is None:
        return True
    return now - transaction.date <= timedelta(days=window_days)


def aggregate_expenses(orders: Iterable[Order], refills: Iterable[PantryItem],
                       timeframe: str = "all", now: Optional[datetime] = None) -> Dict[str, Any]:
    """Summarise spending for the selected timeframe.

    Args:
        orders: the consumer's orders.
        refills: the consumer's pantry items.
        timeframe: one of all, week, month, year (7/30/365 day windows).
        now: reference instant (aware); defaults to the current UTC time.

    Returns:
        dict with totalSpent, shopWiseSpending (list, highest total first),
        monthlySpending (list, newest month first) and recentTransactions.
    """
    if timeframe not in TIMEFRAME_DAYS:
        raise ValueError(f"Unknown timeframe: {timeframe}")
    now = now or datetime.now(timezone.utc)

    transactions = order_transactions(orders, now) + refill_transactions(refills, now)
    transactions.sort(key=lambda t: t.date, reverse=True)
    window = TIMEFRAME_DAYS[timeframe]
    selected = [t for t in transactions if _within(t, now, window)]

    total_spent = sum(t.amount for t in selected)

    by_shop: Dict[str, Dict[str, Any]] = {}
    for t in selected:
        key = t.shop_id or UNKNOWN_SHOP_KEY
        entry = by_shop.setdefault(key, {
            "shopId": t.shop_id, "shopName": "", "total": 0.0, "orders": 0, "refills": 0,
        })
        entry["total"] += t.amount
        entry["orders" if t.type == ORDER else "refills"] += 1
        if t.shop_name:
            entry["shopName"] = t.shop_name
    shop_wise = sorted(by_shop.values(), key=lambda e: e["total"], reverse=True)
    for entry in shop_wise:
        entry["shopName"] = entry["shopName"] or UNKNOWN_SHOP_NAME

    by_month: Dict[int, float] = {}
    for t in selected:
        key = month_key(t.date)
        by_month[key] = by_month.get(key, 0.0) + t.amount
    monthly = [{"key": k, "label": month_label(k), "total": by_month[k]}
               for k in sorted(by_month, reverse=True)]

    return {
        "timeframe": timeframe,
        "totalSpent": total_spent,
        "shopWiseSpending": shop_wise,
        "monthlySpending": monthly,
        "recentTransactions": [t.to_dict() for t in selected[:RECENT_TRANSACTIONS_LIMIT]],
    }
