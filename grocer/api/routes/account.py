"""Account passthrough, delivery address and push token routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

from grocer.api.deps import (
    consumer_session, get_api_client, get_geocoder, get_public_client, get_session, get_storage
)
from grocer.domain.DeliveryAddress import DeliveryAddress
from grocer.domain.Session import Session
from grocer.infra.Api_Client import ApiClient
from grocer.infra.Geocoding_Client import GeocodingClient, GeocodingError
from grocer.infra.Local_Storage import LocalStorage
from grocer.utilities.validators import AddressInput, LoginInput, PushTokenInput, RegisterInput

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


# === Auth (forwarded, no token issued here) ===
@router.post("/auth/register")
def register(body: RegisterInput, client: ApiClient = Depends(get_public_client)):
    return client.register(body.model_dump())


@router.post("/auth/login")
def login(body: LoginInput, client: ApiClient = Depends(get_public_client)):
    data = client.login(body.model_dump()) or {}
    user = data.get("user", data) if isinstance(data, dict) else {}
    try:
        session = Session.from_user(user, token=data.get("token") if isinstance(data, dict) else None)
    except ValueError as e:
        raise HTTPException(status_code=502, detail=f"Unexpected login response: {e}")
    logger.info("Login for %s", session)
    # headers the caller sends back on every request
    return {
        "user": user,
        "session": {
            "X-User-Id": session.user_id,
            "X-User-Role": session.role,
            "X-User-Name": session.name,
            "X-User-Email": session.email,
            "X-User-Phone": session.phone,
        },
        "token": session.token,
    }


# === Delivery address ===
@router.get("/address")
def get_address(session: Session = Depends(consumer_session),
                storage: LocalStorage = Depends(get_storage)):
    address = storage.load_address(session.user_id)
    return {"address": address.snapshot() if address else None}


@router.put("/address")
async def save_address(body: AddressInput, session: Session = Depends(consumer_session),
                       storage: LocalStorage = Depends(get_storage),
                       geocoder: GeocodingClient = Depends(get_geocoder)):
    address = DeliveryAddress(
        flat=body.flat, building=body.building, street=body.street, area=body.area,
        landmark=body.landmark, city=body.city, pincode=body.pincode,
        coordinates=tuple(body.coordinates) if body.coordinates else None,
        formatted_address=body.formatted_address,
    )
    try:
        address.validate()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if address.coordinates is None and geocoder.enabled:
        query = ", ".join(p for p in (address.street, address.area, address.city, address.pincode) if p)
        try:
            found = await geocoder.geocode_address(query)
            address.coordinates = tuple(found["coordinates"])
            if not address.formatted_address:
                address.formatted_address = found.get("formattedAddress", "")
        except GeocodingError as e:
            logger.info("Saving address without coordinates: %s", e)

    await run_in_threadpool(storage.save_address, session.user_id, address)
    return {"status": "success", "address": address.snapshot()}


@router.delete("/address")
def clear_address(session: Session = Depends(consumer_session),
                  storage: LocalStorage = Depends(get_storage)):
    storage.clear_address(session.user_id)
    return {"status": "success"}


@router.get("/address/reverse")
async def reverse_address(lat: float = Query(..., ge=-90, le=90), lng: float = Query(..., ge=-180, le=180),
                          session: Session = Depends(get_session),
                          geocoder: GeocodingClient = Depends(get_geocoder)):
    if not geocoder.enabled:
        raise HTTPException(status_code=503, detail="Geocoding is not configured")
    result = await geocoder.reverse_geocode(lat, lng)
    if result is None:
        raise HTTPException(status_code=404, detail="No address found for these coordinates")
    return result


# === Push notifications ===
@router.post("/push-token")
def register_push_token(body: PushTokenInput, session: Session = Depends(get_session),
                        client: ApiClient = Depends(get_api_client)):
    client.register_push_token(session.user_id, body.token)
    return {"status": "success"}
