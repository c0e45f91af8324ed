# retailpos/services/insights_service.py
import json
import logging
from collections import defaultdict
from concurrent.futures import Executor
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Protocol

from ..errors import InsightsUnavailableError, ValidationError
from ..model import AiSettings, CompletedOrder, Product
from ..utils.money import D, to_float_money
from .gateway import OutcomeStatus, call_with_timeout, http_json

log = logging.getLogger(__name__)

PERIODS = ("day", "week", "month")
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def period_start(period: str, now: datetime) -> datetime:
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "day":
        return start_of_day
    if period == "week":
        # weeks start on Sunday
        return start_of_day - timedelta(days=(now.weekday() + 1) % 7)
    if period == "month":
        return start_of_day.replace(day=1)
    raise ValidationError(f"period must be one of {', '.join(PERIODS)}")


def sales_summary(orders: Iterable[CompletedOrder], period: str = "day", now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    start = period_start(period, now)
    selected = [o for o in orders if o.timestamp >= start]

    revenue = sum((D(o.total) for o in selected), D(0))
    count = len(selected)
    average = revenue / count if count else D(0)

    quantities: dict[int, dict] = {}
    categories: dict[str, Decimal] = defaultdict(lambda: D(0))
    for o in selected:
        for it in o.line_items:
            row = quantities.setdefault(it.product_id, {"name": it.name, "quantity": 0})
            row["quantity"] += it.quantity
            categories[it.category] += it.line_total

    top_products = sorted(quantities.values(), key=lambda r: r["quantity"], reverse=True)[:5]
    top_categories = sorted(
        ({"name": name, "value": to_float_money(v)} for name, v in categories.items()),
        key=lambda r: r["value"],
        reverse=True,
    )
    return {
        "period": period,
        "since": start.isoformat(),
        "total_revenue": to_float_money(revenue),
        "total_orders": count,
        "average_order_value": to_float_money(average),
        "top_products": top_products,
        "top_categories": top_categories,
    }


def build_report_prompt(orders: Iterable[CompletedOrder], products: Iterable[Product]) -> str:
    sales = [
        {
            "date": o.timestamp.date().isoformat(),
            "total": to_float_money(o.total),
            "items": [
                {"name": it.name, "quantity": it.quantity, "price": to_float_money(it.unit_price), "category": it.category}
                for it in o.line_items
            ],
        }
        for o in orders
    ]
    catalog = [
        {"name": p.name, "category": p.category, "price": to_float_money(p.price), "stock": p.stock}
        for p in products
    ]
    return f"""
Analyze the following POS sales data for a small cafe and provide business insights.
The data includes a list of all completed orders and a list of all available products.

**Sales Data:**
{json.dumps(sales, indent=2)}

**Product Catalog:**
{json.dumps(catalog, indent=2)}

**Analysis Request:**
Based on the data provided, please generate a report with the following sections:
1.  **Top 3 Best-Selling Products:** List the top 3 products by total quantity sold.
2.  **Top 3 Most Profitable Products:** List the top 3 products by total revenue (quantity * price).
3.  **Actionable Suggestions:** Provide 3-4 specific, actionable suggestions to improve sales or profitability. For example, suggest product bundles, promotions for underperforming items, or stock management alerts.
4.  **Brief Sales Forecast:** Provide a short, high-level sales trend prediction for the next period (e.g., week or month).

Format the entire response as plain text or simple markdown. Do not use complex formatting.
""".strip()


class ReportGateway(Protocol):
    def generate(self, prompt: str, model: str, timeout: float) -> str: ...


class GeminiReportGateway:
    def __init__(self, api_key: str, base_url: str = GEMINI_BASE_URL):
        self.api_key = (api_key or "").strip()
        self.base_url = base_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def generate(self, prompt: str, model: str, timeout: float) -> str:
        url = f"{self.base_url}/models/{model}:generateContent"
        res = http_json(
            url,
            payload={"contents": [{"parts": [{"text": prompt}]}]},
            headers={"x-goog-api-key": self.api_key},
            timeout=timeout,
        )
        for cand in res.get("candidates") or []:
            parts = (cand.get("content") or {}).get("parts") or []
            text = "".join(p.get("text", "") for p in parts if isinstance(p.get("text"), str))
            if text:
                return text
        raise RuntimeError("generateContent response did not contain text")


def generate_ai_report(
    gateway,
    executor: Executor,
    settings: AiSettings,
    orders: list[CompletedOrder],
    products: list[Product],
    *,
    timeout: float = 60.0,
) -> str:
    if not settings.enabled:
        raise InsightsUnavailableError("AI insights are disabled", status_code=400)
    if not getattr(gateway, "configured", True):
        raise InsightsUnavailableError("API key is not configured. Please set the AI_API_KEY environment variable.")

    prompt = build_report_prompt(orders, products)
    log.info("requesting AI sales report (%d orders, model %s)", len(orders), settings.model)
    outcome = call_with_timeout(executor, timeout, gateway.generate, prompt, settings.model, timeout)
    if not outcome.ok:
        log.error("AI report %s: %s", outcome.status.value, outcome.error)
        raise InsightsUnavailableError(
            "Failed to generate the report.",
            status_code=504 if outcome.status == OutcomeStatus.TIMEOUT else 502,
            data=outcome.as_dict(),
        )
    return outcome.value
