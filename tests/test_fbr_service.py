from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from retailpos.model import (
    DEFAULT_CURRENCY,
    CompletedOrder,
    Customer,
    DiscountKind,
    FbrSettings,
    LineItem,
    ManualDiscount,
)
from retailpos.services.fbr_service import (
    PCT_CODE_PLACEHOLDER,
    FbrReporter,
    SimulatedFbrGateway,
    build_invoice_payload,
    make_invoice_number,
)
from retailpos.services.gateway import OutcomeStatus
from retailpos.services.pricing import price_order

SETTINGS = FbrSettings(enabled=True, ntn="1234567", pos_id="POS1", timeout=0.2)
WHEN = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def _completed(lines, discount=None, payment_method="card", rate=Decimal("0.17")):
    t = price_order(lines, discount, rate)
    return CompletedOrder(
        id=7,
        line_items=tuple(lines),
        customer=Customer(id=2, name="John Doe"),
        subtotal=t.subtotal,
        discount_amount=t.discount_amount,
        discount=discount,
        loyalty_discount_applied=False,
        tax=t.tax,
        total=t.total,
        payment_method=payment_method,
        timestamp=WHEN,
        currency=DEFAULT_CURRENCY,
        tax_rate=rate,
        is_fbr_invoice=True,
        fbr_invoice_number=make_invoice_number("POS1", 7, WHEN),
    )


@pytest.fixture
def executor():
    ex = ThreadPoolExecutor(max_workers=2)
    yield ex
    ex.shutdown(wait=True)


def test_payload_apportions_discount_across_items():
    lines = [
        LineItem(1, "Espresso", "Coffee", Decimal("700"), 2),
        LineItem(9, "Croissant", "Pastries", Decimal("600"), 1),
    ]
    order = _completed(lines, ManualDiscount(DiscountKind.PERCENTAGE, Decimal("10")), payment_method="cash")
    p = build_invoice_payload(order, SETTINGS)

    assert p["SellerNTN"] == "1234567"
    assert p["POSID"] == "POS1"
    assert p["InvoiceNumber"] == "POS1-20240501093000-000007"
    assert p["BuyerName"] == "John Doe"
    assert p["PaymentMode"] == 1
    assert p["TotalQuantity"] == 3
    assert p["TotalSaleValue"] == 2000.0
    # 1400 * 0.9 * 0.17
    assert p["Items"][0]["TaxCharged"] == 214.2
    assert p["Items"][0]["PCTCode"] == PCT_CODE_PLACEHOLDER
    assert sum(i["TaxCharged"] for i in p["Items"]) == pytest.approx(p["TotalTaxCharged"])


def test_payload_for_zero_value_order_has_no_tax():
    order = _completed([LineItem(1, "Sample", "Coffee", Decimal("0"), 1)])
    p = build_invoice_payload(order, SETTINGS)
    assert p["Items"][0]["TaxCharged"] == 0.0
    assert p["PaymentMode"] == 2


def test_reporter_records_success(executor):
    gateway = SimulatedFbrGateway()
    reporter = FbrReporter(gateway, executor, lambda: SETTINGS)
    order = _completed([LineItem(1, "Espresso", "Coffee", Decimal("700"), 1)])

    outcome = reporter.submit(order).result(timeout=5)
    assert outcome.ok
    assert gateway.submitted[0]["InvoiceNumber"] == order.fbr_invoice_number
    assert reporter.submission_log()[order.fbr_invoice_number]["status"] == "success"


def test_reporter_failure_is_captured_not_raised(executor):
    reporter = FbrReporter(SimulatedFbrGateway(fail=True), executor, lambda: SETTINGS)
    outcome = reporter.submit(_completed([LineItem(1, "Espresso", "Coffee", Decimal("700"), 1)])).result(timeout=5)
    assert outcome.status == OutcomeStatus.FAILURE
    assert "simulated" in outcome.error


def test_reporter_timeout_is_captured(executor):
    reporter = FbrReporter(SimulatedFbrGateway(delay=1.0), executor, lambda: SETTINGS)
    outcome = reporter.submit(_completed([LineItem(1, "Espresso", "Coffee", Decimal("700"), 1)])).result(timeout=5)
    assert outcome.status == OutcomeStatus.TIMEOUT
