# retailpos/services/pricing.py
"""Order pricing: pure functions over line items, a discount and a tax rate.

Order of application:
  1) subtotal = sum(unit_price * quantity)
  2) discount amount, clamped to [0, subtotal]
  3) tax on the post-discount base
  4) total = subtotal - discount + tax

Nothing is rounded here; callers round at presentation (see utils.money).
"""
from typing import Iterable

from ..model import Discount, DiscountKind, LineItem, OrderTotals
from ..utils.money import D, Money


def compute_subtotal(line_items: Iterable[LineItem]) -> Money:
    return sum((D(it.unit_price) * it.quantity for it in line_items), D(0))


def compute_discount_amount(subtotal: Money, discount: Discount) -> Money:
    subtotal = D(subtotal)
    if discount is None or subtotal <= 0:
        return D(0)
    value = D(discount.value)
    if value <= 0:
        return D(0)
    if discount.kind == DiscountKind.PERCENTAGE:
        amount = subtotal * value / D(100)
    elif discount.kind == DiscountKind.FIXED:
        amount = value
    else:
        return D(0)
    return min(amount, subtotal)


def compute_tax(subtotal: Money, discount_amount: Money, tax_rate) -> Money:
    return (D(subtotal) - D(discount_amount)) * D(tax_rate)


def compute_total(subtotal: Money, discount_amount: Money, tax: Money) -> Money:
    return D(subtotal) - D(discount_amount) + D(tax)


def price_order(line_items: Iterable[LineItem], discount: Discount, tax_rate) -> OrderTotals:
    subtotal = compute_subtotal(line_items)
    discount_amount = compute_discount_amount(subtotal, discount)
    tax = compute_tax(subtotal, discount_amount, tax_rate)
    return OrderTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax=tax,
        total=compute_total(subtotal, discount_amount, tax),
        tax_rate=D(tax_rate),
    )


def discount_apportion_factor(subtotal: Money, discount_amount: Money) -> Money:
    """Share of each line that survives the order discount: 1 - discount/subtotal.

    An empty order (subtotal 0) has nothing to apportion, so the factor is 0.
    """
    subtotal = D(subtotal)
    if subtotal <= 0:
        return D(0)
    return D(1) - D(discount_amount) / subtotal
