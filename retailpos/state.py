# retailpos/state.py
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from .model import (
    AiSettings,
    Currency,
    Customer,
    DEFAULT_CURRENCY,
    FbrSettings,
    LoyaltySettings,
    WALK_IN_CUSTOMER_ID,
    find_currency,
)
from .services.cart_service import WorkingOrder
from .services.fbr_service import FbrReporter, HttpFbrGateway, SimulatedFbrGateway
from .services.insights_service import GeminiReportGateway
from .services.tax_rate_service import TaxRateService
from .store import CatalogStore, CustomerStore, HeldOrderStore, OrderHistory, UserStore
from .utils.money import D

log = logging.getLogger(__name__)


class PosState:
    """Everything one register holds in memory, plus its background workers."""

    def __init__(self, *, currency: Currency = DEFAULT_CURRENCY,
                 loyalty: LoyaltySettings | None = None,
                 fbr: FbrSettings | None = None,
                 ai: AiSettings | None = None,
                 fbr_gateway=None, report_gateway=None, workers: int = 4):
        self.lock = threading.RLock()
        self.catalog = CatalogStore(self.lock)
        self.customers = CustomerStore(self.lock)
        self.users = UserStore(self.lock)
        self.held_orders = HeldOrderStore(self.lock)
        self.history = OrderHistory(self.lock)
        self.customers.load([Customer(id=WALK_IN_CUSTOMER_ID, name="Walk-in Customer")])

        self.currency = currency
        self.loyalty = loyalty or LoyaltySettings()
        self.fbr = fbr or FbrSettings()
        self.ai = ai or AiSettings()

        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="retailpos")
        self.fbr_gateway = fbr_gateway or SimulatedFbrGateway()
        self.report_gateway = report_gateway or GeminiReportGateway("")
        self.tax_rates = TaxRateService(self.fbr_gateway, self.executor, lambda: self.fbr)
        self.fbr_reporter = FbrReporter(self.fbr_gateway, self.executor, lambda: self.fbr)

        self._working: dict[int, WorkingOrder] = {}

    @classmethod
    def from_config(cls, config) -> "PosState":
        if (config.get("FBR_MODE") or "simulated").lower() == "http":
            gateway = HttpFbrGateway(config.get("FBR_INVOICE_URL"), config.get("FBR_TAX_RATE_URL") or "")
        else:
            gateway = SimulatedFbrGateway(
                tax_rate=config.get("FBR_SIMULATED_TAX_RATE", "0.17"),
                delay=float(config.get("FBR_SIMULATED_DELAY", 0)),
            )
        currency = find_currency(config.get("POS_CURRENCY"))
        if currency is None:
            log.warning("unknown POS_CURRENCY %r, using %s", config.get("POS_CURRENCY"), DEFAULT_CURRENCY.code)
            currency = DEFAULT_CURRENCY
        return cls(
            currency=currency,
            loyalty=LoyaltySettings(
                enabled=bool(config.get("POS_LOYALTY_ENABLED", True)),
                spend_threshold=D(config.get("POS_LOYALTY_THRESHOLD", "50000")),
                reward_percentage=D(config.get("POS_LOYALTY_REWARD_PERCENT", "10")),
            ),
            fbr=FbrSettings(
                enabled=bool(config.get("FBR_ENABLED", False)),
                api_key=config.get("FBR_API_KEY") or "",
                ntn=config.get("FBR_NTN") or "",
                pos_id=config.get("FBR_POS_ID") or "",
                manual_tax_rate=D(config.get("POS_TAX_RATE", "0.08")),
                timeout=float(config.get("FBR_TIMEOUT", 5)),
            ),
            ai=AiSettings(
                enabled=bool(config.get("AI_ENABLED", False)),
                model=config.get("AI_MODEL") or AiSettings.model,
            ),
            fbr_gateway=gateway,
            report_gateway=GeminiReportGateway(config.get("AI_API_KEY") or ""),
            workers=int(config.get("POS_WORKERS", 4)),
        )

    def working_order(self, operator_id: int) -> WorkingOrder:
        with self.lock:
            order = self._working.get(operator_id)
            if order is None:
                order = self._working[operator_id] = WorkingOrder()
            return order

    def discard_working_order(self, operator_id: int) -> None:
        with self.lock:
            self._working.pop(operator_id, None)

    def detach_customer(self, customer_id: int) -> None:
        """Working orders of a deleted customer fall back to the walk-in party."""
        with self.lock:
            for order in self._working.values():
                if order.customer_id == customer_id:
                    order.select_customer(None)

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
