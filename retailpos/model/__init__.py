# ------ retailpos/model/__init__.py ------

from .product import Product, CATEGORIES
from .customer import Customer, WALK_IN_CUSTOMER_ID
from .user import User, ROLES
from .discount import (
    Discount,
    DiscountKind,
    DiscountState,
    LoyaltyReward,
    ManualDiscount,
    parse_discount_kind,
)
from .order import CompletedOrder, HeldOrder, LineItem, OrderTotals, PAYMENT_METHODS
from .settings import (
    AiSettings,
    Currency,
    CURRENCIES,
    DEFAULT_CURRENCY,
    FbrSettings,
    LoyaltySettings,
    find_currency,
)

__all__ = [
    "Product",
    "CATEGORIES",
    "Customer",
    "WALK_IN_CUSTOMER_ID",
    "User",
    "ROLES",
    "Discount",
    "DiscountKind",
    "DiscountState",
    "LoyaltyReward",
    "ManualDiscount",
    "parse_discount_kind",
    "CompletedOrder",
    "HeldOrder",
    "LineItem",
    "OrderTotals",
    "PAYMENT_METHODS",
    "AiSettings",
    "Currency",
    "CURRENCIES",
    "DEFAULT_CURRENCY",
    "FbrSettings",
    "LoyaltySettings",
    "find_currency",
]
