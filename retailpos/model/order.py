# retailpos/model/order.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ..utils.money import to_float_money
from .customer import Customer
from .discount import Discount
from .settings import Currency

PAYMENT_METHODS = ("card", "cash")


@dataclass(frozen=True)
class LineItem:
    product_id: int
    name: str
    category: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def as_api(self):
        return {
            "product_id": self.product_id,
            "name": self.name,
            "category": self.category,
            "unit_price": to_float_money(self.unit_price),
            "quantity": self.quantity,
            "line_total": to_float_money(self.line_total),
        }


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_amount: Decimal
    tax: Decimal
    total: Decimal
    tax_rate: Decimal

    def as_api(self):
        return {
            "subtotal": to_float_money(self.subtotal),
            "discount_amount": to_float_money(self.discount_amount),
            "tax_rate": float(self.tax_rate),
            "tax": to_float_money(self.tax),
            "total": to_float_money(self.total),
        }


@dataclass(frozen=True)
class HeldOrder:
    id: int
    line_items: tuple[LineItem, ...]
    customer_id: int | None
    held_at: datetime

    def as_api(self):
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "item_count": len(self.line_items),
            "items": [i.as_api() for i in self.line_items],
            "held_at": self.held_at.isoformat(),
        }


@dataclass(frozen=True)
class CompletedOrder:
    """Snapshot of a sale at checkout; never changed once recorded."""
    id: int
    line_items: tuple[LineItem, ...]
    customer: Customer | None
    subtotal: Decimal
    discount_amount: Decimal
    discount: Discount
    loyalty_discount_applied: bool
    tax: Decimal
    total: Decimal
    payment_method: str
    timestamp: datetime
    currency: Currency
    tax_rate: Decimal
    amount_tendered: Decimal | None = None
    change_due: Decimal | None = None
    is_fbr_invoice: bool = False
    fbr_invoice_number: str | None = None
    cashier_id: int | None = None

    @property
    def total_quantity(self) -> int:
        return sum(i.quantity for i in self.line_items)

    def as_api(self):
        return {
            "id": self.id,
            "customer": self.customer.as_dict() if self.customer else None,
            "items": [i.as_api() for i in self.line_items],
            "money": {
                "subtotal": to_float_money(self.subtotal),
                "discount_amount": to_float_money(self.discount_amount),
                "tax_rate": float(self.tax_rate),
                "tax": to_float_money(self.tax),
                "total": to_float_money(self.total),
            },
            "discount": self.discount.as_api() if self.discount else None,
            "loyalty_discount_applied": self.loyalty_discount_applied,
            "payment": {
                "method": self.payment_method,
                "amount_tendered": to_float_money(self.amount_tendered) if self.amount_tendered is not None else None,
                "change_due": to_float_money(self.change_due) if self.change_due is not None else None,
            },
            "currency": self.currency.as_dict(),
            "is_fbr_invoice": self.is_fbr_invoice,
            "fbr_invoice_number": self.fbr_invoice_number,
            "cashier_id": self.cashier_id,
            "created_at": self.timestamp.isoformat(),
        }
