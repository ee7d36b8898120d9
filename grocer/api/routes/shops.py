"""Shop discovery, subscriptions and payment-gated shop registration."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from grocer.api.deps import (
    consumer_session, get_api_client, get_geocoder, get_session, get_storage, shopkeeper_session
)
from grocer.domain.Product import Product
from grocer.domain.Session import Session
from grocer.domain.Shop import Shop, find_owned_shop, shops_from_records
from grocer.domain.wire import normalize_id
from grocer.infra.Api_Client import ApiClient
from grocer.infra.Geocoding_Client import GeocodingClient, GeocodingError
from grocer.infra.Local_Storage import LocalStorage
from grocer.logic.geo.matching import MatchedShop, match_shops, partition_subscribed
from grocer.utilities.config import SHOP_REGISTRATION_FEE
from grocer.utilities.validators import PaymentVerificationInput, ShopRegistrationInput

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


# === Helpers shared by the shopkeeper routes ===
def load_owned_shop(client: ApiClient, session: Session) -> Shop:
    shop = find_owned_shop(shops_from_records(client.list_shops()), session.user_id)
    if shop is None:
        raise HTTPException(status_code=404, detail="You need to create a shop first")
    return shop


def shop_catalogue(client: ApiClient, shop_id: str) -> List[Product]:
    products = [Product.from_dict(p) for p in client.list_products()]
    return [p for p in products if p.shop_id == shop_id]


def _subscriptions(client: ApiClient, user_id: str) -> List[str]:
    user = client.get_user(user_id)
    ids = [normalize_id(s) for s in user.get("subscriptions") or []]
    return [s for s in ids if s]


def _unfiltered_row(shop: Shop) -> dict:
    return {**shop.to_dict(), "distance": None, "canDeliver": None}


# === Consumer side ===
@router.get("/shops/nearby")
def nearby_shops(lng: Optional[float] = None, lat: Optional[float] = None,
                 session: Session = Depends(consumer_session),
                 client: ApiClient = Depends(get_api_client),
                 storage: LocalStorage = Depends(get_storage)):
    """Shops that deliver to the consumer, nearest first, split by subscription.

    Uses lng/lat when given, otherwise the saved delivery address. Without any
    coordinates every shop is listed, unfiltered and without distance.
    """
    if (lng is None) != (lat is None):
        raise HTTPException(status_code=400, detail="Both lng and lat are required")
    if lng is not None:
        coordinates = (lng, lat)
    else:
        address = storage.load_address(session.user_id)
        coordinates = address.coordinates if address else None

    shops = shops_from_records(client.list_shops())
    subscriptions = _subscriptions(client, session.user_id)

    if coordinates is None:
        subscribed, available = partition_subscribed(shops, subscriptions)
        render = _unfiltered_row
    else:
        try:
            matches = match_shops(coordinates, shops)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        subscribed, available = partition_subscribed(matches, subscriptions)
        render = MatchedShop.to_dict

    return {
        "coordinates": list(coordinates) if coordinates else None,
        "filtered": coordinates is not None,
        "subscribed": [render(s) for s in subscribed],
        "available": [render(s) for s in available],
        "count": len(subscribed) + len(available),
    }


@router.post("/shops/{shop_id}/subscription")
def toggle_subscription(shop_id: str, session: Session = Depends(consumer_session),
                        client: ApiClient = Depends(get_api_client)):
    current = _subscriptions(client, session.user_id)
    if shop_id in current:
        updated = [s for s in current if s != shop_id]
    else:
        updated = current + [shop_id]
    client.update_user(session.user_id, {"subscriptions": updated})
    subscribed = shop_id in updated
    logger.info("%s %s shop %s", session, "subscribed to" if subscribed else "unsubscribed from", shop_id)
    return {"shopId": shop_id, "subscribed": subscribed, "subscriptions": updated}


@router.get("/shops/{shop_id}/products")
def list_shop_products(shop_id: str, session: Session = Depends(get_session),
                       client: ApiClient = Depends(get_api_client)):
    return [p.to_dict() for p in shop_catalogue(client, shop_id)]


# === Shop registration (paid) ===
@router.post("/shop/registration")
async def start_registration(body: ShopRegistrationInput, session: Session = Depends(shopkeeper_session),
                             client: ApiClient = Depends(get_api_client),
                             storage: LocalStorage = Depends(get_storage),
                             geocoder: GeocodingClient = Depends(get_geocoder)):
    # remote and file calls are blocking; keep them off the event loop
    records = await run_in_threadpool(client.list_shops)
    if find_owned_shop(shops_from_records(records), session.user_id) is not None:
        raise HTTPException(status_code=400, detail="You already have a shop")

    location = {"address": body.address}
    if geocoder.enabled:
        try:
            found = await geocoder.geocode_address(body.address)
        except GeocodingError as e:
            raise HTTPException(status_code=400, detail=str(e))
        location = {
            "address": found["formattedAddress"] or body.address,
            "coordinates": found["coordinates"],
            "city": found["city"],
            "pincode": found["pincode"],
        }

    pending = {
        "ownerId": session.user_id,
        "ownerName": session.name,
        "ownerEmail": session.email,
        "name": body.name,
        "address": body.address,
        "phone": body.phone,
        "deliveryRadius": body.delivery_radius,
        "homeDelivery": body.home_delivery,
        "location": location,
        "registrationFee": SHOP_REGISTRATION_FEE,
    }
    await run_in_threadpool(storage.save_pending_shop, session.user_id, pending)
    payment = await run_in_threadpool(client.create_payment_order, SHOP_REGISTRATION_FEE)
    logger.info("Shop registration started for %s (%s)", session, body.name)
    return {"pendingShop": pending, "payment": payment}


@router.post("/shop/registration/verify")
def verify_registration(body: PaymentVerificationInput, session: Session = Depends(shopkeeper_session),
                        client: ApiClient = Depends(get_api_client),
                        storage: LocalStorage = Depends(get_storage)):
    pending = storage.load_pending_shop(session.user_id)
    if pending is None:
        raise HTTPException(status_code=404, detail="No pending shop registration")

    result = client.verify_payment({**body.model_dump(), "metadata": {"pendingShop": pending}}) or {}
    if not result.get("success"):
        raise HTTPException(status_code=402, detail="Payment verification failed")

    shop_record = result.get("shop")
    if not isinstance(shop_record, dict):
        payload = {k: pending[k] for k in ("ownerId", "name", "address", "phone", "deliveryRadius", "homeDelivery")}
        if pending.get("location", {}).get("coordinates"):
            payload["location"] = pending["location"]
        shop_record = client.create_shop(payload) or {}
    storage.clear_pending_shop(session.user_id)

    shop = Shop.from_dict(shop_record)
    logger.info("Shop %s registered for %s", shop.id, session)
    return {"status": "success", "shop": shop.to_dict()}
