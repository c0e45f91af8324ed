from decimal import Decimal

import pytest

from retailpos.model import DiscountKind, LineItem, LoyaltyReward, ManualDiscount
from retailpos.services.pricing import (
    compute_discount_amount,
    compute_subtotal,
    compute_tax,
    compute_total,
    discount_apportion_factor,
    price_order,
)
from retailpos.utils.money import round_money


def _line(price, qty, pid=1):
    return LineItem(product_id=pid, name=f"P{pid}", category="Coffee", unit_price=Decimal(price), quantity=qty)


def test_two_espressos_at_eight_percent():
    t = price_order([_line(700, 2)], None, Decimal("0.08"))
    assert t.subtotal == Decimal("1400")
    assert t.discount_amount == 0
    assert round_money(t.tax) == Decimal("112.00")
    assert round_money(t.total) == Decimal("1512.00")


def test_percentage_discount_applies_before_tax():
    t = price_order([_line(1000, 1)], ManualDiscount(DiscountKind.PERCENTAGE, Decimal("10")), Decimal("0.08"))
    assert t.discount_amount == Decimal("100")
    assert t.tax == Decimal("72")
    assert t.total == Decimal("972")


def test_fixed_discount_clamps_to_subtotal():
    t = price_order([_line(500, 1)], ManualDiscount(DiscountKind.FIXED, Decimal("600")), Decimal("0.08"))
    assert t.discount_amount == Decimal("500")
    assert t.tax == 0
    assert t.total == 0


def test_loyalty_reward_prices_like_a_percentage_discount():
    t = price_order([_line(950, 2)], LoyaltyReward(Decimal("10")), Decimal("0"))
    assert t.discount_amount == Decimal("190")
    assert t.total == Decimal("1710")


def test_empty_order_is_zero():
    t = price_order([], ManualDiscount(DiscountKind.FIXED, Decimal("50")), Decimal("0.08"))
    assert (t.subtotal, t.discount_amount, t.tax, t.total) == (0, 0, 0, 0)


@pytest.mark.parametrize(
    "subtotal, discount",
    [
        (Decimal("0"), ManualDiscount(DiscountKind.PERCENTAGE, Decimal("50"))),
        (Decimal("250"), ManualDiscount(DiscountKind.PERCENTAGE, Decimal("150"))),
        (Decimal("250"), ManualDiscount(DiscountKind.FIXED, Decimal("0.01"))),
        (Decimal("250"), ManualDiscount(DiscountKind.FIXED, Decimal("-30"))),
        (Decimal("99.99"), LoyaltyReward(Decimal("10"))),
        (Decimal("10"), None),
    ],
)
def test_discount_amount_stays_within_subtotal(subtotal, discount):
    amount = compute_discount_amount(subtotal, discount)
    assert 0 <= amount <= subtotal


def test_tax_is_monotonic_in_taxable_base():
    rate = Decimal("0.08")
    taxes = [compute_tax(Decimal(s), Decimal("0"), rate) for s in (0, 1, 10, 100, 1000)]
    assert taxes == sorted(taxes)


def test_total_never_below_tax_when_fully_discounted():
    subtotal = Decimal("300")
    tax = compute_tax(subtotal, subtotal, Decimal("0.08"))
    assert compute_total(subtotal, subtotal, tax) == tax


def test_subtotal_is_pure():
    items = [_line(700, 2), _line(950, 1, pid=2)]
    assert compute_subtotal(items) == compute_subtotal(items) == Decimal("2350")


def test_apportion_factor_handles_empty_order():
    assert discount_apportion_factor(Decimal("0"), Decimal("0")) == 0
    assert discount_apportion_factor(Decimal("1000"), Decimal("100")) == Decimal("0.9")
