# --- retailpos/model/user.py ---
from dataclasses import dataclass

# roles: admin manages the catalog, customers and operators; cashier and salesman sell
ROLES = ("admin", "cashier", "salesman")


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    password_hash: str
    role: str = "cashier"

    def as_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
        }
