"""Cart handling and checkout splitting.

The cart is a plain list of dicts persisted on the device:
{ id (product id), shopId, name, price, unit, category, image, quantity }.
Functions here return new lists and never mutate their input.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Tuple

from grocer.domain.DeliveryAddress import DeliveryAddress
from grocer.domain.Order import Order, OrderLine, lines_total
from grocer.domain.Product import Product
from grocer.domain.Session import Session
from grocer.domain.wire import normalize_id, to_count, to_number
from grocer.utilities.constants import PENDING

__all__ = [
    "add_to_cart", "set_quantity", "remove_from_cart", "cart_total",
    "split_by_shop", "build_order_payloads", "reorder_into_cart",
]


def _line_from_product(product: Product, quantity: int) -> dict:
    return {**product.to_dict(), "quantity": quantity}


def add_to_cart(cart: List[dict], product: Product, quantity: int = 1) -> List[dict]:
    '''Adds quantity of product, merging with an existing line for the same product.'''
    if quantity <= 0:
        raise ValueError(f"Quantity must be positive: {quantity}")
    updated, merged = [], False
    for line in cart:
        if line.get("id") == product.id:
            line = {**line, "quantity": to_count(line.get("quantity")) + quantity}
            merged = True
        updated.append(line)
    if not merged:
        updated.append(_line_from_product(product, quantity))
    return updated


def set_quantity(cart: List[dict], product_id: str, quantity: int) -> List[dict]:
    '''Sets a line's quantity; zero or less removes the line.'''
    if quantity <= 0:
        return remove_from_cart(cart, product_id)
    if not any(line.get("id") == product_id for line in cart):
        raise ValueError(f"Product '{product_id}' is not in the cart")
    return [{**line, "quantity": quantity} if line.get("id") == product_id else line for line in cart]


def remove_from_cart(cart: List[dict], product_id: str) -> List[dict]:
    return [line for line in cart if line.get("id") != product_id]


def cart_total(cart: Iterable[dict]) -> float:
    return sum(to_number(line.get("price")) * to_count(line.get("quantity")) for line in cart)


def split_by_shop(cart: Iterable[dict]) -> Dict[str, List[OrderLine]]:
    '''Groups cart lines per shop, keeping first-seen shop order.'''
    by_shop: Dict[str, List[OrderLine]] = {}
    for line in cart:
        shop_id = normalize_id(line.get("shopId"))
        if shop_id is None:
            raise ValueError(f"Cart item '{line.get('name', '')}' has no shop")
        by_shop.setdefault(shop_id, []).append(OrderLine(
            product_id=normalize_id(line.get("id")),
            quantity=to_count(line.get("quantity")),
            price=to_number(line.get("price")),
            name=str(line.get("name") or ""),
        ))
    return by_shop


def build_order_payloads(cart: List[dict], session: Session,
                         address: DeliveryAddress) -> List[Tuple[str, dict]]:
    """One PENDING order payload per shop.

    Validation happens before anything is returned, so a bad cart or address
    never produces a partial set of orders.

    Returns:
        List of (shop_id, payload) in first-seen shop order.
    """
    if not cart:
        raise ValueError("Cart is empty")
    if address is None:
        raise ValueError("Please set your delivery address first")
    address.validate_for_checkout()

    payloads = []
    for shop_id, lines in split_by_shop(cart).items():
        order = Order(
            customer_id=session.user_id,
            shop_id=shop_id,
            items=lines,
            total_amount=lines_total(lines),
            status=PENDING,
            delivery_address=address.snapshot(),
            customer_contact=session.contact(),
        )
        payloads.append((shop_id, {
            "customerId": order.customer_id,
            "shopId": order.shop_id,
            "items": [line.to_dict() for line in order.items],
            "totalAmount": order.total_amount,
            "status": order.status,
            "deliveryAddress": order.delivery_address,
            "customerContact": order.customer_contact,
        }))
    return payloads


def reorder_into_cart(cart: List[dict], order: Order, products: Iterable[Product]):
    '''Adds a past order's lines back into the cart.

    Lines already in the cart get their quantity increased; other lines are
    added only when the product still exists and is in stock.

    Returns:
        (new_cart, added_product_ids, skipped_product_ids)
    '''
    catalogue = {p.id: p for p in products}
    in_cart = {line.get("id") for line in cart}
    added, skipped = [], []
    for line in order.items:
        product = catalogue.get(line.product_id)
        if line.product_id in in_cart:
            cart = [{**c, "quantity": to_count(c.get("quantity")) + line.quantity}
                    if c.get("id") == line.product_id else c for c in cart]
            added.append(line.product_id)
        elif product is not None and product.in_stock:
            cart = add_to_cart(cart, product, line.quantity)
            in_cart.add(product.id)
            added.append(line.product_id)
        else:
            skipped.append(line.product_id)
    return cart, added, skipped
