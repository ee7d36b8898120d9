"""Request-scoped dependencies: session, remote client, local storage, geocoder."""
from typing import Iterator, Optional

from fastapi import Depends, Header, HTTPException

from grocer.domain.Session import Session
from grocer.infra.Api_Client import ApiClient
from grocer.infra.Geocoding_Client import GeocodingClient
from grocer.infra.Local_Storage import LocalStorage
from grocer.utilities.constants import CONSUMER, SHOPKEEPER


def get_session(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: str = Header(default=CONSUMER),
    x_user_name: str = Header(default=""),
    x_user_email: str = Header(default=""),
    x_user_phone: str = Header(default=""),
    authorization: Optional[str] = Header(default=None),
) -> Session:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Login required")
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip() or None
    try:
        return Session(x_user_id, x_user_role, x_user_name, x_user_email, x_user_phone, token)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))


def consumer_session(session: Session = Depends(get_session)) -> Session:
    if session.role != CONSUMER:
        raise HTTPException(status_code=403, detail="Consumer account required")
    return session


def shopkeeper_session(session: Session = Depends(get_session)) -> Session:
    if session.role != SHOPKEEPER:
        raise HTTPException(status_code=403, detail="Shopkeeper account required")
    return session


def build_client(session: Optional[Session] = None) -> ApiClient:
    """Single construction point for remote clients (request handlers and pollers)."""
    return ApiClient(session=session)


def get_api_client(session: Session = Depends(get_session)) -> Iterator[ApiClient]:
    client = build_client(session)
    try:
        yield client
    finally:
        client.close()


def get_public_client() -> Iterator[ApiClient]:
    """Client for calls made before a session exists (register, login)."""
    client = build_client()
    try:
        yield client
    finally:
        client.close()


_storage = LocalStorage()


def get_storage() -> LocalStorage:
    return _storage


def get_geocoder() -> GeocodingClient:
    return GeocodingClient()
