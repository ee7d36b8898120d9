"""Product domain entity: an item in a shop's catalogue."""
from typing import Optional

from grocer.domain.wire import normalize_id, to_count, to_number


class Product:
    def __init__(self, id: Optional[str] = None, shop_id: Optional[str] = None, name: str = "",
                 category: str = "", price: float = 0.0, stock: int = 0, unit: str = "",
                 image: str = ""):
        self.id = id
        self.shop_id = shop_id
        self.name = name
        self.category = category
        self.price = price
        self.stock = stock
        self.unit = unit
        self.image = image

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    def __str__(self) -> str:
        return f"{self.name} - {self.price:.2f}/{self.unit or 'unit'} - stock {self.stock}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data) -> "Product":
        d = data if isinstance(data, dict) else {}
        return Product(
            id=normalize_id(d.get("_id", d.get("id"))),
            shop_id=normalize_id(d.get("shopId")),
            name=str(d.get("name") or ""),
            category=str(d.get("category") or ""),
            price=max(0.0, to_number(d.get("price"))),
            stock=max(0, to_count(d.get("stock"))),
            unit=str(d.get("unit") or ""),
            image=str(d.get("image") or ""),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "shopId": self.shop_id,
            "name": self.name,
            "category": self.category,
            "price": self.price,
            "stock": self.stock,
            "unit": self.unit,
            "image": self.image,
        }
