# retailpos/model/discount.py
"""Discount variants for a working order.

At most one discount is active on an order. A manual discount is entered by
the operator (percentage or fixed amount); a loyalty reward is a percentage
discount granted to a customer whose spend crossed the loyalty threshold.
Settlement treats the two differently, so they are separate types rather than
one record with a flag.
"""
import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from ..utils.money import to_float_money


class DiscountKind(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountState(str, enum.Enum):
    NO_DISCOUNT = "no_discount"
    MANUAL_PENDING = "manual_pending"
    APPLIED = "applied"


_KIND_ALIASES = {
    "percentage": DiscountKind.PERCENTAGE,
    "percent": DiscountKind.PERCENTAGE,
    "%": DiscountKind.PERCENTAGE,
    "fixed": DiscountKind.FIXED,
    "amount": DiscountKind.FIXED,
}


def parse_discount_kind(raw) -> DiscountKind | None:
    if isinstance(raw, DiscountKind):
        return raw
    return _KIND_ALIASES.get(str(raw or "").strip().lower())


@dataclass(frozen=True)
class ManualDiscount:
    kind: DiscountKind
    value: Decimal

    source = "manual"

    def as_api(self):
        return {"source": self.source, "kind": self.kind.value, "value": float(self.value)}


@dataclass(frozen=True)
class LoyaltyReward:
    percentage: Decimal

    source = "loyalty"

    @property
    def kind(self) -> DiscountKind:
        return DiscountKind.PERCENTAGE

    @property
    def value(self) -> Decimal:
        return self.percentage

    def as_api(self):
        return {"source": self.source, "kind": self.kind.value, "value": to_float_money(self.percentage)}


Discount = Optional[Union[ManualDiscount, LoyaltyReward]]
