"""Cart, checkout, order history and shop-side fulfilment."""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from grocer.api.deps import consumer_session, get_api_client, get_storage, shopkeeper_session
from grocer.api.routes.shops import load_owned_shop
from grocer.domain.Order import Order
from grocer.domain.Product import Product
from grocer.domain.Session import Session
from grocer.domain.wire import normalize_id, to_count
from grocer.events.Event_Bus import ORDER_PLACED, ORDER_STATUS_CHANGED, publish
from grocer.infra.Api_Client import ApiClient, RemoteError
from grocer.infra.Local_Storage import LocalStorage
from grocer.logic.orders.cart import (
    add_to_cart, build_order_payloads, cart_total, remove_from_cart, reorder_into_cart, set_quantity
)
from grocer.logic.orders.lifecycle import check_order_transition, next_order_statuses
from grocer.utilities.constants import ORDER_STATUSES, SHOPKEEPER
from grocer.utilities.validators import CartItemInput, CartQuantityInput, OrderStatusInput

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _cart_view(cart: List[dict]) -> dict:
    return {
        "items": cart,
        "total": round(cart_total(cart), 2),
        "count": sum(to_count(line.get("quantity")) for line in cart),
    }


def _newest_first(orders: List[Order], status: Optional[str]) -> List[Order]:
    if status is not None:
        if status not in ORDER_STATUSES:
            raise HTTPException(status_code=400, detail=f"Unknown order status: {status}")
        orders = [o for o in orders if o.status == status]
    return sorted(orders, key=lambda o: o.order_date or _EPOCH, reverse=True)


def _find_order(orders: List[Order], order_id: str) -> Order:
    for order in orders:
        if order.id == order_id:
            return order
    raise HTTPException(status_code=404, detail="Order not found")


def _customer_orders(client: ApiClient, session: Session) -> List[Order]:
    orders = [Order.from_dict(r) for r in client.list_orders(session.user_id)]
    return [o for o in orders if o.customer_id == session.user_id]


# === Cart ===
@router.get("/cart")
def get_cart(session: Session = Depends(consumer_session),
             storage: LocalStorage = Depends(get_storage)):
    return _cart_view(storage.load_cart(session.user_id))


@router.post("/cart")
def add_cart_item(body: CartItemInput, session: Session = Depends(consumer_session),
                  client: ApiClient = Depends(get_api_client),
                  storage: LocalStorage = Depends(get_storage)):
    product = next((p for p in map(Product.from_dict, client.list_products()) if p.id == body.product_id), None)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if not product.in_stock:
        raise HTTPException(status_code=400, detail=f"{product.name} is out of stock")
    cart = add_to_cart(storage.load_cart(session.user_id), product, body.quantity)
    storage.save_cart(session.user_id, cart)
    return _cart_view(cart)


@router.put("/cart/{product_id}")
def update_cart_item(product_id: str, body: CartQuantityInput, session: Session = Depends(consumer_session),
                     storage: LocalStorage = Depends(get_storage)):
    try:
        cart = set_quantity(storage.load_cart(session.user_id), product_id, body.quantity)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    storage.save_cart(session.user_id, cart)
    return _cart_view(cart)


@router.delete("/cart/{product_id}")
def remove_cart_item(product_id: str, session: Session = Depends(consumer_session),
                     storage: LocalStorage = Depends(get_storage)):
    cart = remove_from_cart(storage.load_cart(session.user_id), product_id)
    storage.save_cart(session.user_id, cart)
    return _cart_view(cart)


@router.delete("/cart")
def clear_cart(session: Session = Depends(consumer_session),
               storage: LocalStorage = Depends(get_storage)):
    storage.clear_cart(session.user_id)
    return _cart_view([])


@router.post("/cart/checkout")
def checkout(session: Session = Depends(consumer_session),
             client: ApiClient = Depends(get_api_client),
             storage: LocalStorage = Depends(get_storage)):
    """Place one order per shop in the cart.

    Nothing is sent unless the cart and delivery address are valid. Orders are
    created shop by shop; when one fails, the shops already placed leave the
    cart and the failure is returned.
    """
    cart = storage.load_cart(session.user_id)
    try:
        payloads = build_order_payloads(cart, session, storage.load_address(session.user_id))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    placed: List[Order] = []
    try:
        for shop_id, payload in payloads:
            created = client.create_order(payload)
            order = Order.from_dict(created if isinstance(created, dict) and created else payload)
            placed.append(order)
            publish(ORDER_PLACED, {"order": payload, "shop_id": shop_id, "customer_id": session.user_id})
    except RemoteError:
        placed_shops = {shop_id for shop_id, _ in payloads[:len(placed)]}
        remaining = [line for line in cart if normalize_id(line.get("shopId")) not in placed_shops]
        storage.save_cart(session.user_id, remaining)
        logger.error("Checkout for %s stopped after %d of %d orders", session, len(placed), len(payloads))
        raise

    storage.clear_cart(session.user_id)
    logger.info("%s placed %d order(s)", session, len(placed))
    return {"status": "success", "orders": [o.to_dict() for o in placed], "count": len(placed)}


# === Consumer history ===
@router.get("/orders/history")
def order_history(status: Optional[str] = None, session: Session = Depends(consumer_session),
                  client: ApiClient = Depends(get_api_client)):
    orders = _newest_first(_customer_orders(client, session), status)
    return {"orders": [o.to_dict() for o in orders], "count": len(orders)}


@router.post("/orders/{order_id}/reorder")
def reorder(order_id: str, session: Session = Depends(consumer_session),
            client: ApiClient = Depends(get_api_client),
            storage: LocalStorage = Depends(get_storage)):
    order = _find_order(_customer_orders(client, session), order_id)
    products = [Product.from_dict(p) for p in client.list_products()]
    cart, added, skipped = reorder_into_cart(storage.load_cart(session.user_id), order, products)
    storage.save_cart(session.user_id, cart)
    return {**_cart_view(cart), "added": added, "skipped": skipped}


# === Shop fulfilment ===
def _shop_orders(client: ApiClient, shop_id: str) -> List[Order]:
    return [o for o in map(Order.from_dict, client.list_orders()) if o.shop_id == shop_id]


@router.get("/shop/orders")
def shop_orders(status: Optional[str] = None, session: Session = Depends(shopkeeper_session),
                client: ApiClient = Depends(get_api_client)):
    shop = load_owned_shop(client, session)
    orders = _newest_first(_shop_orders(client, shop.id), status)
    return {
        "shop": shop.to_dict(),
        "orders": [{**o.to_dict(), "actions": next_order_statuses(o.status, SHOPKEEPER)} for o in orders],
        "count": len(orders),
    }


@router.put("/shop/orders/{order_id}/status")
def update_order_status(order_id: str, body: OrderStatusInput, session: Session = Depends(shopkeeper_session),
                        client: ApiClient = Depends(get_api_client)):
    shop = load_owned_shop(client, session)
    order = _find_order(_shop_orders(client, shop.id), order_id)
    try:
        check_order_transition(order.status, body.status, SHOPKEEPER)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    updated = client.update_order(order.id, {"status": body.status})
    if isinstance(updated, dict) and updated.get("status") == body.status:
        order = Order.from_dict(updated)
    else:
        order.status = body.status
    publish(ORDER_STATUS_CHANGED, {"order_id": order.id, "status": body.status, "actor": SHOPKEEPER})
    logger.info("Order %s moved to %s by shop %s", order.id, body.status, shop.id)
    return {**order.to_dict(), "actions": next_order_statuses(order.status, SHOPKEEPER)}
