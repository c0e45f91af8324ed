# retailpos/model/customer.py
from dataclasses import dataclass
from decimal import Decimal

from ..utils.money import to_float_money

# The default party for orders without a selected customer.
WALK_IN_CUSTOMER_ID = 1


@dataclass(frozen=True)
class Customer:
    id: int
    name: str
    email: str = ""
    total_spent: Decimal = Decimal("0")
    reward_available: bool = False

    @property
    def is_walk_in(self) -> bool:
        return self.id == WALK_IN_CUSTOMER_ID

    def as_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "total_spent": to_float_money(self.total_spent),
            "reward_available": self.reward_available,
        }
