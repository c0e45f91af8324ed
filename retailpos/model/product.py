# retailpos/model/product.py
from dataclasses import dataclass
from decimal import Decimal

from ..utils.money import to_float_money

CATEGORIES = ("Coffee", "Tea", "Pastries", "Sandwiches")


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    category: str
    price: Decimal
    stock: int = 0
    image_url: str = ""

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    def as_api(self):
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": to_float_money(self.price),
            "stock": self.stock,
            "in_stock": self.in_stock,
            "image_url": self.image_url,
        }
