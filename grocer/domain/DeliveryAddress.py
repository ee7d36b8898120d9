"""DeliveryAddress value object, persisted per consumer on the local device."""
from typing import Optional

from grocer.domain.Location import Coordinates, parse_coordinates


class DeliveryAddress:
    def __init__(self, flat: str = "", building: str = "", street: str = "", area: str = "",
                 landmark: str = "", city: str = "", pincode: str = "",
                 coordinates: Optional[Coordinates] = None, formatted_address: str = ""):
        self.flat = flat
        self.building = building
        self.street = street
        self.area = area
        self.landmark = landmark
        self.city = city
        self.pincode = pincode
        self.coordinates = coordinates
        self.formatted_address = formatted_address

    def validate(self):
        '''Raises ValueError when the fields every address needs are blank.'''
        missing = [name for name in ("city", "pincode") if not getattr(self, name)]
        if missing:
            raise ValueError(f"Delivery address is missing: {', '.join(missing)}")
        return self

    def validate_for_checkout(self):
        '''Orders additionally need the area so the shop can find the customer.'''
        missing = [name for name in ("area", "city", "pincode") if not getattr(self, name)]
        if missing:
            raise ValueError("Please provide complete delivery address (area, city, pincode)")
        return self

    @property
    def display(self) -> str:
        if self.formatted_address:
            return self.formatted_address
        return f"{self.area}, {self.city} - {self.pincode}"

    def snapshot(self):
        '''Copy embedded into orders and pantry items; never a live reference.'''
        return {
            "flat": self.flat,
            "building": self.building,
            "street": self.street,
            "area": self.area,
            "landmark": self.landmark,
            "city": self.city,
            "pincode": self.pincode,
            "coordinates": list(self.coordinates) if self.coordinates else [],
            "formattedAddress": self.display,
        }

    to_dict = snapshot

    @staticmethod
    def from_dict(data) -> "DeliveryAddress":
        d = data if isinstance(data, dict) else {}

        def text(key, alt=None):
            value = d.get(key)
            if value is None and alt:
                value = d.get(alt)
            return str(value or "").strip()

        return DeliveryAddress(
            flat=text("flat"),
            building=text("building"),
            street=text("street"),
            area=text("area"),
            landmark=text("landmark"),
            city=text("city"),
            pincode=text("pincode"),
            coordinates=parse_coordinates(d.get("coordinates")),
            formatted_address=text("formattedAddress", "formatted_address"),
        )

    def __str__(self) -> str:
        return self.display

    __repr__ = __str__
