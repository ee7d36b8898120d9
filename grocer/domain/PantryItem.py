"""PantryItem domain entity: a consumer-tracked product with stock level and refill status."""
import copy
from datetime import datetime
from typing import Optional

from grocer.domain.wire import (
    embedded_name, format_timestamp, normalize_id, parse_timestamp, to_count, to_number
)
from grocer.utilities.constants import (
    DEFAULT_PACKS_OWNED, DEFAULT_QUANTITY_PER_PACK, DEFAULT_REFILL_THRESHOLD,
    PANTRY_STATUSES, STOCKED
)


class PantryItem:
    def __init__(self, id: Optional[str] = None, user_id: Optional[str] = None,
                 shop_id: Optional[str] = None, product_id: Optional[str] = None,
                 product_name: str = "", brand_name: str = "",
                 quantity_per_pack: float = DEFAULT_QUANTITY_PER_PACK, unit: str = "",
                 packs_owned: int = DEFAULT_PACKS_OWNED, price: float = 0.0,
                 status: str = STOCKED, last_refilled: Optional[datetime] = None,
                 updated_at: Optional[datetime] = None,
                 refill_threshold: int = DEFAULT_REFILL_THRESHOLD,
                 shop_name: str = "", customer: Optional[dict] = None):
        if status not in PANTRY_STATUSES:
            raise ValueError(f"Unknown pantry status: {status}")
        if packs_owned < 0:
            raise ValueError(f"Packs owned cannot be negative: {packs_owned}")
        self.id = id
        self.user_id = user_id
        self.shop_id = shop_id
        self.product_id = product_id
        self.product_name = product_name
        self.brand_name = brand_name
        self.quantity_per_pack = quantity_per_pack
        self.unit = unit
        self.packs_owned = packs_owned
        self.price = price
        self.status = status
        self.last_refilled = last_refilled
        self.updated_at = updated_at
        self.refill_threshold = refill_threshold
        self.shop_name = shop_name
        # Populated userId record (name/email/location) seen by the shop side
        self.customer = customer or {}

    @property
    def refill_cost(self) -> float:
        return self.price * self.packs_owned

    def evolve(self, **changes) -> "PantryItem":
        '''Returns a copy with the given attributes replaced.'''
        clone = copy.copy(self)
        clone.customer = dict(self.customer)
        for key, value in changes.items():
            if not hasattr(clone, key):
                raise AttributeError(key)
            setattr(clone, key, value)
        return clone

    def __str__(self) -> str:
        return f"{self.product_name} - {self.packs_owned} packs - {self.status}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data) -> "PantryItem":
        '''Creates a PantryItem from a remote record; reference fields are normalized here.'''
        d = data if isinstance(data, dict) else {}
        status = d.get("status") or STOCKED
        if status not in PANTRY_STATUSES:
            status = STOCKED
        raw_shop = d.get("shop") or d.get("shopId")
        raw_user = d.get("userId")
        product = d.get("product") if isinstance(d.get("product"), dict) else {}
        return PantryItem(
            id=normalize_id(d.get("_id", d.get("id"))),
            user_id=normalize_id(raw_user),
            shop_id=normalize_id(raw_shop),
            product_id=normalize_id(d.get("productId")),
            product_name=str(d.get("productName") or product.get("name") or ""),
            brand_name=str(d.get("brandName") or ""),
            quantity_per_pack=to_number(d.get("quantityPerPack"), DEFAULT_QUANTITY_PER_PACK),
            unit=str(d.get("unit") or ""),
            packs_owned=max(0, to_count(d.get("packsOwned"))),
            price=to_number(d.get("price")),
            status=status,
            last_refilled=parse_timestamp(d.get("lastRefilled")),
            updated_at=parse_timestamp(d.get("updatedAt")),
            refill_threshold=to_count(d.get("refillThreshold"), DEFAULT_REFILL_THRESHOLD),
            shop_name=embedded_name(raw_shop),
            customer=raw_user if isinstance(raw_user, dict) else {},
        )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "shopId": self.shop_id,
            "shopName": self.shop_name,
            "productId": self.product_id,
            "productName": self.product_name,
            "brandName": self.brand_name,
            "quantityPerPack": self.quantity_per_pack,
            "unit": self.unit,
            "packsOwned": self.packs_owned,
            "price": self.price,
            "status": self.status,
            "lastRefilled": format_timestamp(self.last_refilled),
            "updatedAt": format_timestamp(self.updated_at),
            "refillThreshold": self.refill_threshold,
        }
