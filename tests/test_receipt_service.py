from dataclasses import replace
from decimal import Decimal

from retailpos.services.cart_service import WorkingOrder
from retailpos.services.checkout_service import checkout
from retailpos.services.receipt_service import render_receipt


def _sale(state, *product_ids, **kwargs):
    order = WorkingOrder()
    for pid in product_ids:
        order.add_item(state.catalog.require(pid))
    return checkout(state, order, **kwargs)


def test_fractional_tax_rate_is_printed_exactly(seeded_state):
    seeded_state.fbr = replace(seeded_state.fbr, manual_tax_rate=Decimal("0.175"))
    text = render_receipt(_sale(seeded_state, 1))
    assert "Tax (17.5%)" in text
    assert "Rs 122.50" in text


def test_whole_tax_rate_has_no_decimals(seeded_state):
    text = render_receipt(_sale(seeded_state, 1, 1, payment_method="cash", amount_tendered=2000))
    assert "Tax (8%)" in text
    assert "Change Due" in text
    assert "Rs 488.00" in text
