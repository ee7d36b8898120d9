"""Location value object: postal address plus optional [longitude, latitude] pair."""
import math
from typing import Any, Optional, Tuple

Coordinates = Tuple[float, float]


def parse_coordinates(value: Any) -> Optional[Coordinates]:
    '''
    Returns (longitude, latitude) when value is a valid pair, otherwise None.
    '''
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    try:
        lng, lat = float(value[0]), float(value[1])
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lng) and math.isfinite(lat)):
        return None
    if not (-180 <= lng <= 180 and -90 <= lat <= 90):
        return None
    return lng, lat


class Location:
    def __init__(self, address: str = "", coordinates: Optional[Coordinates] = None,
                 city: str = "", pincode: str = ""):
        self.address = address
        self.coordinates = coordinates
        self.city = city
        self.pincode = pincode

    @staticmethod
    def from_dict(data) -> "Location":
        d = data if isinstance(data, dict) else {}
        return Location(
            address=str(d.get("address") or ""),
            coordinates=parse_coordinates(d.get("coordinates")),
            city=str(d.get("city") or ""),
            pincode=str(d.get("pincode") or ""),
        )

    def to_dict(self):
        return {
            "address": self.address,
            "coordinates": list(self.coordinates) if self.coordinates else None,
            "city": self.city,
            "pincode": self.pincode,
        }

    def __str__(self) -> str:
        return ", ".join(p for p in (self.address, self.city, self.pincode) if p)

    __repr__ = __str__
