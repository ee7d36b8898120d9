"""Device-local persisted state (cart, delivery address, pending shop registration).

One JSON file per key under the storage directory. Writes are atomic
(temp file + move); concurrent writers follow last-write-wins.
"""
import json
import logging
import os
import re
import shutil
import tempfile
from pathlib import Path
from threading import Lock
from typing import Any, List, Optional

from grocer.domain.DeliveryAddress import DeliveryAddress
from grocer.infra.paths import STORAGE_DIR

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r'[^A-Za-z0-9_.-]')


def cart_key(user_id: str) -> str:
    return f"cart_{user_id}"


def address_key(user_id: str) -> str:
    return f"deliveryAddress_{user_id}"


def pending_shop_key(user_id: str) -> str:
    return f"pendingShop_{user_id}"


class LocalStorage:
    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory or STORAGE_DIR)
        self._lock = Lock()

    def _path(self, key: str) -> Path:
        return self.directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Corrupt local value for %s, ignoring: %s", key, e)
            return default

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".store_", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    json.dump(value, tmp, indent=2, ensure_ascii=False)
                shutil.move(tmp_path, self._path(key))
            finally:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)

    def remove(self, key: str) -> None:
        with self._lock:
            try:
                self._path(key).unlink()
            except FileNotFoundError:
                pass

    # --- typed helpers --------------------------------------------------------
    def load_cart(self, user_id: str) -> List[dict]:
        cart = self.get(cart_key(user_id), [])
        return cart if isinstance(cart, list) else []

    def save_cart(self, user_id: str, cart: List[dict]) -> None:
        self.set(cart_key(user_id), cart)

    def clear_cart(self, user_id: str) -> None:
        self.remove(cart_key(user_id))

    def load_address(self, user_id: str) -> Optional[DeliveryAddress]:
        data = self.get(address_key(user_id))
        return DeliveryAddress.from_dict(data) if isinstance(data, dict) else None

    def save_address(self, user_id: str, address: DeliveryAddress) -> None:
        self.set(address_key(user_id), address.snapshot())

    def clear_address(self, user_id: str) -> None:
        self.remove(address_key(user_id))

    def load_pending_shop(self, user_id: str) -> Optional[dict]:
        data = self.get(pending_shop_key(user_id))
        return data if isinstance(data, dict) else None

    def save_pending_shop(self, user_id: str, snapshot: dict) -> None:
        self.set(pending_shop_key(user_id), snapshot)

    def clear_pending_shop(self, user_id: str) -> None:
        self.remove(pending_shop_key(user_id))
