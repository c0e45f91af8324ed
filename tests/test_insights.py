from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from retailpos.errors import InsightsUnavailableError, ValidationError
from retailpos.model import DEFAULT_CURRENCY, AiSettings, CompletedOrder, LineItem, Product
from retailpos.services.insights_service import build_report_prompt, generate_ai_report, period_start, sales_summary

# a Wednesday
NOW = datetime(2024, 5, 15, 15, 0, tzinfo=timezone.utc)


def _sale(oid, when, *lines):
    total = sum((it.line_total for it in lines), Decimal(0))
    return CompletedOrder(
        id=oid, line_items=tuple(lines), customer=None, subtotal=total, discount_amount=Decimal(0),
        discount=None, loyalty_discount_applied=False, tax=Decimal(0), total=total, payment_method="card",
        timestamp=when, currency=DEFAULT_CURRENCY, tax_rate=Decimal(0),
    )


ESPRESSO = lambda q: LineItem(1, "Espresso", "Coffee", Decimal("700"), q)  # noqa: E731
SCONE = lambda q: LineItem(11, "Scone", "Pastries", Decimal("850"), q)  # noqa: E731

ORDERS = [
    _sale(1, NOW - timedelta(hours=2), ESPRESSO(2), SCONE(1)),
    _sale(2, NOW - timedelta(days=2), ESPRESSO(1)),
    _sale(3, NOW - timedelta(days=10), SCONE(4)),
    _sale(4, NOW - timedelta(days=40), SCONE(9)),
]


def test_period_boundaries():
    assert period_start("day", NOW) == datetime(2024, 5, 15, tzinfo=timezone.utc)
    assert period_start("week", NOW) == datetime(2024, 5, 12, tzinfo=timezone.utc)
    assert period_start("month", NOW) == datetime(2024, 5, 1, tzinfo=timezone.utc)
    with pytest.raises(ValidationError):
        period_start("year", NOW)


def test_daily_summary():
    s = sales_summary(ORDERS, "day", NOW)
    assert s["total_orders"] == 1
    assert s["total_revenue"] == 2250.0
    assert s["top_products"][0] == {"name": "Espresso", "quantity": 2}
    assert s["top_categories"][0] == {"name": "Coffee", "value": 1400.0}


def test_monthly_summary():
    s = sales_summary(ORDERS, "month", NOW)
    assert s["total_orders"] == 3
    assert s["average_order_value"] == round((2250 + 700 + 3400) / 3, 2)
    assert s["top_products"][0]["name"] == "Scone"


def test_empty_summary():
    s = sales_summary([], "week", NOW)
    assert s["total_orders"] == 0
    assert s["average_order_value"] == 0.0
    assert s["top_products"] == []


class FakeGateway:
    configured = True

    def __init__(self, text="Top sellers: Espresso", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate(self, prompt, model, timeout):
        self.prompts.append((prompt, model))
        if self.error:
            raise self.error
        return self.text


PRODUCTS = [Product(id=1, name="Espresso", category="Coffee", price=Decimal("700"), stock=98)]


def test_ai_report_uses_gateway(seeded_state):
    gateway = FakeGateway()
    report = generate_ai_report(gateway, seeded_state.executor, AiSettings(enabled=True), ORDERS, PRODUCTS)
    assert report == "Top sellers: Espresso"
    prompt, model = gateway.prompts[0]
    assert model == "gemini-2.5-flash"
    assert '"name": "Espresso"' in prompt


def test_ai_report_disabled_or_unconfigured(seeded_state):
    with pytest.raises(InsightsUnavailableError) as e:
        generate_ai_report(FakeGateway(), seeded_state.executor, AiSettings(enabled=False), ORDERS, PRODUCTS)
    assert e.value.status_code == 400

    unconfigured = FakeGateway()
    unconfigured.configured = False
    with pytest.raises(InsightsUnavailableError) as e:
        generate_ai_report(unconfigured, seeded_state.executor, AiSettings(enabled=True), ORDERS, PRODUCTS)
    assert e.value.status_code == 503


def test_ai_report_gateway_failure_maps_to_bad_gateway(seeded_state):
    gateway = FakeGateway(error=RuntimeError("HTTP 500"))
    with pytest.raises(InsightsUnavailableError) as e:
        generate_ai_report(gateway, seeded_state.executor, AiSettings(enabled=True), ORDERS, PRODUCTS)
    assert e.value.status_code == 502


def test_prompt_lists_sales_and_catalog():
    prompt = build_report_prompt(ORDERS[:1], PRODUCTS)
    assert "Sales Data" in prompt and "Product Catalog" in prompt
    assert '"total": 2250.0' in prompt
