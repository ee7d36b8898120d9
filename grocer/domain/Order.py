"""Order domain entity: one shop's share of a consumer checkout."""
from datetime import datetime
from typing import List, Optional

from grocer.domain.wire import (
    embedded_name, format_timestamp, normalize_id, parse_timestamp, to_count, to_number
)
from grocer.utilities.constants import ORDER_STATUSES, PENDING


class OrderLine:
    def __init__(self, product_id: Optional[str], quantity: int, price: float, name: str = ""):
        if quantity <= 0:
            raise ValueError(f"Quantity must be positive: {quantity}")
        if price < 0:
            raise ValueError(f"Price cannot be negative: {price}")
        self.product_id = product_id
        self.quantity = quantity
        self.price = price
        self.name = name

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity

    @staticmethod
    def from_dict(data) -> "OrderLine":
        d = data if isinstance(data, dict) else {}
        raw_product = d.get("productId")
        return OrderLine(
            product_id=normalize_id(raw_product),
            quantity=max(1, to_count(d.get("quantity"), 1)),
            price=max(0.0, to_number(d.get("price"))),
            name=str(d.get("productName") or embedded_name(raw_product) or d.get("name") or ""),
        )

    def to_dict(self):
        return {"productId": self.product_id, "quantity": self.quantity, "price": self.price}


def lines_total(lines: List[OrderLine]) -> float:
    '''Sum of price x quantity over the lines.'''
    return sum(line.subtotal for line in lines)


class Order:
    def __init__(self, id: Optional[str] = None, customer_id: Optional[str] = None,
                 shop_id: Optional[str] = None, items: Optional[List[OrderLine]] = None,
                 total_amount: Optional[float] = None, status: str = PENDING,
                 delivery_address: Optional[dict] = None, customer_contact: Optional[dict] = None,
                 order_date: Optional[datetime] = None, delivery_date: Optional[datetime] = None,
                 shop_name: str = ""):
        if status not in ORDER_STATUSES:
            raise ValueError(f"Unknown order status: {status}")
        self.id = id
        self.customer_id = customer_id
        self.shop_id = shop_id
        self.items = items[:] if items else []
        self.total_amount = total_amount
        self.status = status
        self.delivery_address = delivery_address or {}
        self.customer_contact = customer_contact or {}
        self.order_date = order_date
        self.delivery_date = delivery_date
        self.shop_name = shop_name

    @property
    def amount(self) -> float:
        '''Stored total when present, otherwise recomputed from the lines.'''
        if self.total_amount is not None:
            return self.total_amount
        return lines_total(self.items)

    def __str__(self) -> str:
        return f"Order {self.id} - {self.status} - {self.amount:.2f}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data) -> "Order":
        d = data if isinstance(data, dict) else {}
        raw_shop = d.get("shopId")
        total = d.get("totalAmount")
        status = d.get("status") or PENDING
        return Order(
            id=normalize_id(d.get("_id", d.get("id"))),
            customer_id=normalize_id(d.get("customerId")),
            shop_id=normalize_id(raw_shop),
            items=[OrderLine.from_dict(i) for i in d.get("items") or [] if isinstance(i, dict)],
            total_amount=to_number(total) if total is not None else None,
            status=status if status in ORDER_STATUSES else PENDING,
            delivery_address=d.get("deliveryAddress") or {},
            customer_contact=d.get("customerContact") or {},
            order_date=parse_timestamp(d.get("orderDate") or d.get("createdAt")),
            delivery_date=parse_timestamp(d.get("deliveryDate")),
            shop_name=str(d.get("shopName") or embedded_name(raw_shop)),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "shopId": self.shop_id,
            "shopName": self.shop_name,
            "items": [line.to_dict() for line in self.items],
            "totalAmount": self.amount,
            "status": self.status,
            "deliveryAddress": self.delivery_address,
            "customerContact": self.customer_contact,
            "orderDate": format_timestamp(self.order_date),
            "deliveryDate": format_timestamp(self.delivery_date),
        }
