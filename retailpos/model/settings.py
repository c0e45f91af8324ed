# retailpos/model/settings.py
from dataclasses import dataclass
from decimal import Decimal

from ..utils.money import to_float_money


@dataclass(frozen=True)
class Currency:
    code: str
    name: str
    symbol: str

    def as_dict(self):
        return {"code": self.code, "name": self.name, "symbol": self.symbol}


CURRENCIES = (
    Currency("PKR", "Pakistani Rupee", "Rs"),
    Currency("USD", "United States Dollar", "$"),
    Currency("EUR", "Euro", "€"),
    Currency("GBP", "British Pound", "£"),
)
DEFAULT_CURRENCY = CURRENCIES[0]


def find_currency(code: str | None) -> Currency | None:
    code = (code or "").strip().upper()
    return next((c for c in CURRENCIES if c.code == code), None)


@dataclass(frozen=True)
class LoyaltySettings:
    enabled: bool = True
    spend_threshold: Decimal = Decimal("50000")
    reward_percentage: Decimal = Decimal("10")

    def as_dict(self):
        return {
            "enabled": self.enabled,
            "spend_threshold": to_float_money(self.spend_threshold),
            "reward_percentage": float(self.reward_percentage),
        }


@dataclass(frozen=True)
class FbrSettings:
    enabled: bool = False
    api_key: str = ""
    ntn: str = ""
    pos_id: str = ""
    manual_tax_rate: Decimal = Decimal("0.08")
    timeout: float = 5.0

    def as_dict(self):
        return {
            "enabled": self.enabled,
            # never echo the key back
            "api_key_set": bool(self.api_key),
            "ntn": self.ntn,
            "pos_id": self.pos_id,
            "manual_tax_rate": float(self.manual_tax_rate),
            "timeout": self.timeout,
        }


@dataclass(frozen=True)
class AiSettings:
    enabled: bool = False
    model: str = "gemini-2.5-flash"

    def as_dict(self):
        return {"enabled": self.enabled, "model": self.model}
