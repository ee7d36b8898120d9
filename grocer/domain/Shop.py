"""Shop domain entity: owner, contact, location and delivery radius."""
from typing import Iterable, List, Optional

from grocer.domain.Location import Location
from grocer.domain.wire import normalize_id, to_number
from grocer.utilities.config import DEFAULT_DELIVERY_RADIUS_KM


def _radius(value) -> float:
    radius = to_number(value, 0.0)
    return radius if radius > 0 else DEFAULT_DELIVERY_RADIUS_KM


class Shop:
    def __init__(self, id: Optional[str] = None, owner_id: Optional[str] = None, name: str = "",
                 phone: str = "", location: Optional[Location] = None,
                 delivery_radius: float = DEFAULT_DELIVERY_RADIUS_KM, home_delivery: bool = False):
        self.id = id
        self.owner_id = owner_id
        self.name = name
        self.phone = phone
        self.location = location or Location()
        self.delivery_radius = _radius(delivery_radius)
        self.home_delivery = home_delivery

    @property
    def coordinates(self):
        return self.location.coordinates

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return user_id is not None and self.owner_id == user_id

    def __str__(self) -> str:
        return f"{self.name} ({self.delivery_radius:g} km) - {self.location}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data) -> "Shop":
        '''Creates a Shop from a remote record. Ignores unknown keys.'''
        d = data if isinstance(data, dict) else {}
        raw_location = d.get("location")
        if isinstance(raw_location, dict):
            location = Location.from_dict(raw_location)
        else:
            location = Location(address=str(d.get("address") or ""))
        return Shop(
            id=normalize_id(d.get("_id", d.get("id"))),
            owner_id=normalize_id(d.get("ownerId")),
            name=str(d.get("name") or ""),
            phone=str(d.get("phone") or ""),
            location=location,
            delivery_radius=d.get("deliveryRadius"),
            home_delivery=bool(d.get("homeDelivery", False)),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "name": self.name,
            "phone": self.phone,
            "location": self.location.to_dict(),
            "deliveryRadius": self.delivery_radius,
            "homeDelivery": self.home_delivery,
        }


def shops_from_records(records: Iterable[dict]) -> List[Shop]:
    return [Shop.from_dict(r) for r in records or [] if isinstance(r, dict)]


def find_owned_shop(shops: Iterable[Shop], user_id: Optional[str]) -> Optional[Shop]:
    '''Returns the first shop owned by user_id, or None.'''
    for shop in shops:
        if shop.is_owned_by(user_id):
            return shop
    return None
