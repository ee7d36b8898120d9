"""REST client for the remote grocery data store.

One instance per acting session: the session's bearer token is attached to
every request. Any network failure or non-2xx response is raised as
RemoteError carrying the server's message when it sent one.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from grocer.domain.Session import Session
from grocer.utilities.config import API_BASE_URL, API_TIMEOUT_SECONDS
from grocer.utilities.constants import GENERIC_ERROR_MESSAGE

logger = logging.getLogger(__name__)


class RemoteError(Exception):
    def __init__(self, message: str = GENERIC_ERROR_MESSAGE, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return GENERIC_ERROR_MESSAGE


class ApiClient:
    def __init__(self, session: Optional[Session] = None, base_url: str = API_BASE_URL,
                 transport: Optional[httpx.BaseTransport] = None,
                 timeout: Optional[float] = API_TIMEOUT_SECONDS):
        self.session = session
        headers = {"Content-Type": "application/json"}
        if session is not None and session.token:
            headers["Authorization"] = f"Bearer {session.token}"
        self._http = httpx.Client(base_url=base_url, headers=headers,
                                  transport=transport, timeout=timeout)

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # --- transport ------------------------------------------------------------
    def request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise RemoteError(GENERIC_ERROR_MESSAGE) from e
        if response.is_error:
            message = _error_message(response)
            logger.error("%s %s -> %s: %s", method, path, response.status_code, message)
            raise RemoteError(message, response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def get(self, path: str, **kwargs):
        return self.request("GET", path, **kwargs)

    def post(self, path: str, json: Any = None):
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None):
        return self.request("PUT", path, json=json)

    def delete(self, path: str):
        return self.request("DELETE", path)

    # --- auth -----------------------------------------------------------------
    def register(self, payload: Dict[str, Any]):
        return self.post("/auth/register", payload)

    def login(self, credentials: Dict[str, Any]):
        return self.post("/auth/login", credentials)

    # --- users ----------------------------------------------------------------
    def get_user(self, user_id: str) -> Dict[str, Any]:
        return self.get(f"/users/{user_id}") or {}

    def update_user(self, user_id: str, changes: Dict[str, Any]):
        return self.put(f"/users/{user_id}", changes)

    def register_push_token(self, user_id: str, token: str):
        return self.post("/users/fcm-token", {"userId": user_id, "token": token})

    # --- shops & products -----------------------------------------------------
    def list_shops(self) -> List[dict]:
        return self.get("/shops") or []

    def create_shop(self, payload: Dict[str, Any]):
        return self.post("/shops", payload)

    def list_products(self) -> List[dict]:
        return self.get("/products") or []

    def create_product(self, payload: Dict[str, Any]):
        return self.post("/products", payload)

    def update_product(self, product_id: str, changes: Dict[str, Any]):
        return self.put(f"/products/{product_id}", changes)

    def delete_product(self, product_id: str):
        return self.delete(f"/products/{product_id}")

    # --- pantry ---------------------------------------------------------------
    def user_pantry(self, user_id: str) -> List[dict]:
        return self.get(f"/pantry/user/{user_id}") or []

    def create_pantry_item(self, payload: Dict[str, Any]):
        return self.post("/pantry", payload)

    def update_pantry_item(self, item_id: str, changes: Dict[str, Any]):
        return self.put(f"/pantry/{item_id}", changes)

    def delete_pantry_item(self, item_id: str):
        return self.delete(f"/pantry/user/{item_id}")

    def shop_refill_requests(self, shop_id: str) -> List[dict]:
        return self.get(f"/pantry/shop/{shop_id}/requests") or []

    def set_refill_status(self, item_id: str, status: str):
        return self.put(f"/pantry/request/{item_id}/confirm", {"status": status})

    # --- orders ---------------------------------------------------------------
    def list_orders(self, customer_id: Optional[str] = None) -> List[dict]:
        params = {"customerId": customer_id} if customer_id else None
        return self.get("/orders", params=params) or []

    def create_order(self, payload: Dict[str, Any]):
        return self.post("/orders", payload)

    def update_order(self, order_id: str, changes: Dict[str, Any]):
        return self.put(f"/orders/{order_id}", changes)

    # --- notifications --------------------------------------------------------
    def user_notifications(self, user_id: str) -> List[dict]:
        return self.get(f"/notifications/user/{user_id}") or []

    def mark_notification_read(self, notification_id: str):
        return self.put(f"/notifications/{notification_id}/read")

    def delete_notification(self, notification_id: str):
        return self.delete(f"/notifications/{notification_id}")

    # --- payments -------------------------------------------------------------
    def create_payment_order(self, amount: int):
        return self.post("/payments/create-order", {"amount": amount})

    def verify_payment(self, payload: Dict[str, Any]):
        return self.post("/payments/verify", payload)
