# retailpos/services/tax_rate_service.py
import enum
import logging
import threading
from concurrent.futures import Executor, Future
from decimal import Decimal
from typing import Callable

from ..model import FbrSettings
from ..utils.money import D
from .gateway import GatewayOutcome, capture

log = logging.getLogger(__name__)


class LookupStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class TaxRateService:
    """Tax rate for pricing: the FBR rate once fetched, else the manual rate.

    While a lookup is pending, failed, timed out, or FBR is disabled, the
    manually configured rate applies.
    """

    def __init__(self, gateway, executor: Executor, settings: Callable[[], FbrSettings]):
        self.gateway = gateway
        self.executor = executor
        self._settings = settings
        self._lock = threading.Lock()
        self._status = LookupStatus.IDLE
        self._fetched: Decimal | None = None
        self._generation = 0
        self.last_error: str | None = None

    @property
    def status(self) -> LookupStatus:
        s = self._settings()
        return self._status if s.enabled else LookupStatus.IDLE

    def current_rate(self) -> Decimal:
        s = self._settings()
        with self._lock:
            if s.enabled and self._status == LookupStatus.SUCCESS and self._fetched is not None:
                return self._fetched
        return D(s.manual_tax_rate)

    def refresh(self) -> Future | None:
        s = self._settings()
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._fetched = None
            self.last_error = None
            if not s.enabled:
                self._status = LookupStatus.IDLE
                return None
            self._status = LookupStatus.LOADING
        log.info("fetching tax rate from FBR (timeout %ss)", s.timeout)
        return self.executor.submit(self._lookup, s, generation)

    def _lookup(self, s: FbrSettings, generation: int) -> GatewayOutcome:
        outcome = capture(self.gateway.fetch_tax_rate, s, s.timeout)
        with self._lock:
            if generation != self._generation:
                # superseded by a newer refresh
                return outcome
            if outcome.ok:
                self._fetched = D(outcome.value)
                self._status = LookupStatus.SUCCESS
            else:
                self._status = LookupStatus.ERROR
                self.last_error = outcome.error
        if outcome.ok:
            log.info("FBR tax rate is %s", outcome.value)
        else:
            log.warning("FBR tax rate lookup %s (%s); using manual rate %s",
                        outcome.status.value, outcome.error, s.manual_tax_rate)
        return outcome

    def as_dict(self):
        return {
            "status": self.status.value,
            "current_rate": float(self.current_rate()),
            "fetched_rate": float(self._fetched) if self._fetched is not None else None,
            "error": self.last_error,
        }
