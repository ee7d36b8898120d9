"""Pantry routes: consumer tracking and refills, shopkeeper refill queue."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from grocer.api.deps import consumer_session, get_api_client, get_storage, shopkeeper_session
from grocer.api.routes.shops import load_owned_shop
from grocer.domain.PantryItem import PantryItem
from grocer.domain.Product import Product
from grocer.domain.Session import Session
from grocer.domain.wire import format_timestamp
from grocer.events.Event_Bus import (
    PANTRY_ITEM_REMOVED, REFILL_ADVANCED_EVENT, REFILL_REQUESTED_EVENT, publish
)
from grocer.infra.Api_Client import ApiClient
from grocer.infra.Local_Storage import LocalStorage
from grocer.logic.pantry.refill import (
    advance_refill, filter_refill_queue, legal_actions, queue_counts, request_refill, restock
)
from grocer.utilities.constants import CONSUMER, PANTRY_STATUSES, QUEUE_PENDING, SHOPKEEPER, STOCKED
from grocer.utilities.validators import PackCountInput, RefillStatusInput, TrackProductInput

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


def _user_items(client: ApiClient, session: Session) -> List[PantryItem]:
    return [PantryItem.from_dict(r) for r in client.user_pantry(session.user_id)]


def _find(items: List[PantryItem], item_id: str) -> PantryItem:
    for item in items:
        if item.id == item_id:
            return item
    raise HTTPException(status_code=404, detail="Pantry item not found")


def _stored(response, fallback: PantryItem) -> PantryItem:
    '''Remote echo of an update when it sent one back, else the local result.'''
    if isinstance(response, dict) and response.get("status") in PANTRY_STATUSES:
        return PantryItem.from_dict(response)
    return fallback


def _row(item: PantryItem, role: str) -> dict:
    return {
        **item.to_dict(),
        "actions": legal_actions(item, role),
        "needsRefill": item.status == STOCKED and item.packs_owned <= item.refill_threshold,
    }


# === Consumer pantry ===
@router.get("/pantry")
def list_pantry(session: Session = Depends(consumer_session),
                client: ApiClient = Depends(get_api_client)):
    items = _user_items(client, session)
    return {"items": [_row(i, CONSUMER) for i in items], "count": len(items)}


@router.post("/pantry")
def track_product(body: TrackProductInput, session: Session = Depends(consumer_session),
                  client: ApiClient = Depends(get_api_client),
                  storage: LocalStorage = Depends(get_storage)):
    product = next((p for p in map(Product.from_dict, client.list_products()) if p.id == body.product_id), None)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    address = storage.load_address(session.user_id)
    payload = {
        "userId": session.user_id,
        "shopId": product.shop_id,
        "productId": product.id,
        "productName": product.name,
        "brandName": body.brand_name,
        "quantityPerPack": body.quantity_per_pack,
        "unit": product.unit,
        "packsOwned": body.packs_owned,
        "price": product.price,
        "status": STOCKED,
        "refillThreshold": body.refill_threshold,
        "deliveryAddress": address.snapshot() if address else None,
    }
    created = PantryItem.from_dict(client.create_pantry_item(payload) or payload)
    logger.info("%s now tracking %s", session, product.name)
    return _row(created, CONSUMER)


@router.post("/pantry/{item_id}/refill")
def request_item_refill(item_id: str, body: PackCountInput, session: Session = Depends(consumer_session),
                        client: ApiClient = Depends(get_api_client)):
    item = _find(_user_items(client, session), item_id)
    try:
        requested = request_refill(item, body.current_packs)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response = client.update_pantry_item(item.id, {
        "status": requested.status,
        "currentPacks": requested.packs_owned,
        "packsOwned": requested.packs_owned,
    })
    stored = _stored(response, requested)
    publish(REFILL_REQUESTED_EVENT, {"item": stored, "actor": CONSUMER})
    logger.info("Refill requested for %s by %s", item.id, session)
    return _row(stored, CONSUMER)


@router.put("/pantry/{item_id}/stock")
def update_item_stock(item_id: str, body: PackCountInput, session: Session = Depends(consumer_session),
                      client: ApiClient = Depends(get_api_client)):
    item = _find(_user_items(client, session), item_id)
    try:
        updated = restock(item, body.current_packs)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    changes = {"currentPacks": updated.packs_owned, "packsOwned": updated.packs_owned}
    if updated.status != item.status:
        changes["status"] = updated.status
        changes["lastRefilled"] = format_timestamp(updated.last_refilled)
    stored = _stored(client.update_pantry_item(item.id, changes), updated)
    return _row(stored, CONSUMER)


@router.delete("/pantry/{item_id}")
def remove_item(item_id: str, session: Session = Depends(consumer_session),
                client: ApiClient = Depends(get_api_client)):
    item = _find(_user_items(client, session), item_id)
    client.delete_pantry_item(item.id)
    publish(PANTRY_ITEM_REMOVED, {"item_id": item.id, "actor": CONSUMER})
    return {"status": "success"}


# === Shopkeeper refill queue ===
@router.get("/shop/refills")
def refill_queue(view: str = Query(QUEUE_PENDING), session: Session = Depends(shopkeeper_session),
                 client: ApiClient = Depends(get_api_client)):
    shop = load_owned_shop(client, session)
    items = [PantryItem.from_dict(r) for r in client.shop_refill_requests(shop.id)]
    try:
        selected = filter_refill_queue(items, view)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "view": view,
        "counts": queue_counts(items),
        "requests": [{**_row(i, SHOPKEEPER), "customer": i.customer} for i in selected],
    }


@router.post("/shop/refills/{item_id}/status")
def advance_refill_status(item_id: str, body: RefillStatusInput, session: Session = Depends(shopkeeper_session),
                          client: ApiClient = Depends(get_api_client)):
    shop = load_owned_shop(client, session)
    items = [PantryItem.from_dict(r) for r in client.shop_refill_requests(shop.id)]
    item = _find(items, item_id)
    try:
        advanced = advance_refill(item, body.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    stored = _stored(client.set_refill_status(item.id, advanced.status), advanced)
    publish(REFILL_ADVANCED_EVENT, {"item": stored, "actor": SHOPKEEPER})
    logger.info("Refill %s moved to %s by shop %s", item.id, advanced.status, shop.id)
    return _row(stored, SHOPKEEPER)
