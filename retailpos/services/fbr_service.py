# retailpos/services/fbr_service.py
"""FBR (Federal Board of Revenue) point-of-sale invoice reporting.

A finalized sale is reported after it is committed locally. The report is
fire-and-forget: its outcome is logged and kept for inspection, and it can
never undo the sale.
"""
import json
import logging
import threading
import time
from concurrent.futures import Executor, Future
from decimal import Decimal
from typing import Callable, Protocol

from ..model import CompletedOrder, FbrSettings, WALK_IN_CUSTOMER_ID
from ..utils.money import D, round_money
from .gateway import GatewayOutcome, capture, http_json
from .pricing import discount_apportion_factor

log = logging.getLogger(__name__)

INVOICE_ENDPOINT = "https://iris.fbr.gov.pk/api/pos/v1/invoice"
PCT_CODE_PLACEHOLDER = "1101.0010"
PAYMENT_MODES = {"cash": 1, "card": 2}


def _num(x: Decimal) -> float:
    return float(round_money(x))


def build_invoice_payload(order: CompletedOrder, settings: FbrSettings) -> dict:
    factor = discount_apportion_factor(order.subtotal, order.discount_amount)
    rate = D(order.tax_rate)
    buyer = order.customer.name if order.customer and order.customer.id != WALK_IN_CUSTOMER_ID else "Walk-in Customer"
    items = []
    for it in order.line_items:
        sale_value = it.line_total
        items.append({
            "ItemCode": str(it.product_id),
            "ItemName": it.name,
            "Quantity": it.quantity,
            "PCTCode": PCT_CODE_PLACEHOLDER,
            "TaxRate": float(rate),
            "SaleValue": _num(sale_value),
            "TaxCharged": _num(sale_value * factor * rate),
            "Discount": 0,
        })
    return {
        "SellerNTN": settings.ntn,
        "POSID": settings.pos_id,
        "InvoiceNumber": order.fbr_invoice_number,
        "DateTime": order.timestamp.isoformat(),
        "BuyerNTN": "",
        "BuyerName": buyer,
        "BuyerPhoneNumber": "",
        "TotalBillAmount": _num(order.total),
        "TotalQuantity": order.total_quantity,
        "TotalSaleValue": _num(order.subtotal),
        "TotalTaxCharged": _num(order.tax),
        "PaymentMode": PAYMENT_MODES.get(order.payment_method, 1),
        "Items": items,
    }


def make_invoice_number(pos_id: str, order_id: int, when) -> str:
    return f"{pos_id or 'POS'}-{when:%Y%m%d%H%M%S}-{order_id:06d}"


class FbrGateway(Protocol):
    def fetch_tax_rate(self, settings: FbrSettings, timeout: float) -> Decimal: ...

    def submit_invoice(self, payload: dict, settings: FbrSettings, timeout: float) -> dict: ...


class SimulatedFbrGateway:
    """Stand-in for the FBR endpoint: logs payloads and serves a fixed tax rate.

    `delay` emulates network latency; a delay longer than the caller's timeout
    surfaces as a timeout.
    """

    def __init__(self, tax_rate="0.17", delay: float = 0.0, fail: bool = False):
        self.tax_rate = D(tax_rate)
        self.delay = delay
        self.fail = fail
        self.submitted: list[dict] = []

    def _wait(self, timeout: float):
        if self.delay > timeout:
            time.sleep(timeout)
            raise TimeoutError(f"simulated FBR call exceeded {timeout:g}s")
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise RuntimeError("simulated FBR failure")

    def fetch_tax_rate(self, settings: FbrSettings, timeout: float) -> Decimal:
        self._wait(timeout)
        return self.tax_rate

    def submit_invoice(self, payload: dict, settings: FbrSettings, timeout: float) -> dict:
        log.info("--- Sending Invoice to FBR (Simulation) ---")
        log.info("Endpoint: %s", INVOICE_ENDPOINT)
        log.info("Payload: %s", json.dumps(payload, indent=2))
        self._wait(timeout)
        self.submitted.append(payload)
        return {"InvoiceNumber": payload.get("InvoiceNumber"), "Code": "100", "Response": "Simulated"}


class HttpFbrGateway:
    def __init__(self, invoice_url: str = INVOICE_ENDPOINT, tax_rate_url: str = ""):
        self.invoice_url = invoice_url
        self.tax_rate_url = tax_rate_url

    def _headers(self, settings: FbrSettings):
        return {"Authorization": f"Bearer {settings.api_key}"}

    def fetch_tax_rate(self, settings: FbrSettings, timeout: float) -> Decimal:
        if not self.tax_rate_url:
            raise RuntimeError("FBR tax-rate endpoint is not configured")
        res = http_json(self.tax_rate_url, headers=self._headers(settings), timeout=timeout)
        rate = res.get("taxRate", res.get("tax_rate"))
        if rate is None:
            raise RuntimeError("FBR tax-rate response did not contain taxRate")
        return D(rate)

    def submit_invoice(self, payload: dict, settings: FbrSettings, timeout: float) -> dict:
        if not settings.api_key:
            raise RuntimeError("FBR API key is not configured")
        return http_json(self.invoice_url, payload=payload, headers=self._headers(settings), timeout=timeout)


class FbrReporter:
    def __init__(self, gateway: FbrGateway, executor: Executor, settings: Callable[[], FbrSettings]):
        self.gateway = gateway
        self.executor = executor
        self._settings = settings
        self._lock = threading.Lock()
        self.submissions: dict[str, GatewayOutcome] = {}

    def submit(self, order: CompletedOrder) -> Future:
        """Queue the invoice for reporting and return at once."""
        settings = self._settings()
        payload = build_invoice_payload(order, settings)
        log.info("queueing FBR invoice %s for order %s", order.fbr_invoice_number, order.id)
        return self.executor.submit(self._send, payload, settings)

    def _send(self, payload: dict, settings: FbrSettings) -> GatewayOutcome:
        invoice = payload.get("InvoiceNumber") or "?"
        outcome = capture(self.gateway.submit_invoice, payload, settings, settings.timeout)
        if outcome.ok:
            log.info("FBR accepted invoice %s", invoice)
        else:
            log.warning("FBR submission of invoice %s ended with %s: %s", invoice, outcome.status.value, outcome.error)
        with self._lock:
            self.submissions[invoice] = outcome
        return outcome

    def submission_log(self) -> dict:
        with self._lock:
            return {k: v.as_dict() for k, v in self.submissions.items()}
