# retailpos/services/gateway.py
"""Outcome type and plumbing shared by the external gateways (FBR, AI)."""
import enum
import json
import logging
import urllib.error
import urllib.request
from concurrent.futures import Executor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Any, Callable

log = logging.getLogger(__name__)


class OutcomeStatus(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class GatewayOutcome:
    status: OutcomeStatus
    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @classmethod
    def success(cls, value=None):
        return cls(OutcomeStatus.SUCCESS, value=value)

    @classmethod
    def failure(cls, error: str):
        return cls(OutcomeStatus.FAILURE, error=error)

    @classmethod
    def timeout(cls, error: str = "timed out"):
        return cls(OutcomeStatus.TIMEOUT, error=error)

    def as_dict(self):
        return {"status": self.status.value, "error": self.error}


def capture(fn: Callable, *args, **kwargs) -> GatewayOutcome:
    """Run a gateway call and fold its result or exception into an outcome."""
    try:
        value = fn(*args, **kwargs)
    except TimeoutError as e:
        return GatewayOutcome.timeout(str(e) or "timed out")
    except Exception as e:
        log.exception("gateway call %s failed", getattr(fn, "__qualname__", fn))
        return GatewayOutcome.failure(str(e) or e.__class__.__name__)
    return GatewayOutcome.success(value)


def call_with_timeout(executor: Executor, timeout: float, fn: Callable, *args, **kwargs) -> GatewayOutcome:
    """Run `fn` on the executor and wait at most `timeout` seconds for it."""
    future = executor.submit(capture, fn, *args, **kwargs)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        future.cancel()
        return GatewayOutcome.timeout(f"no response within {timeout:g}s")


def http_json(url: str, *, payload: dict | None = None, headers: dict | None = None,
              timeout: float = 10.0, method: str | None = None) -> dict:
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    req = urllib.request.Request(
        url,
        data=data,
        headers={"Content-Type": "application/json", **(headers or {})},
        method=method or ("POST" if data is not None else "GET"),
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            body = resp.read().decode("utf-8")
    except urllib.error.HTTPError as e:
        detail = e.read().decode("utf-8", errors="replace") if hasattr(e, "read") else str(e)
        raise RuntimeError(f"HTTP {getattr(e, 'code', '?')} from {url}: {detail}") from e
    except urllib.error.URLError as e:
        if isinstance(e.reason, TimeoutError):
            raise TimeoutError(f"{url} timed out after {timeout:g}s") from e
        raise RuntimeError(f"{url} unreachable: {e.reason}") from e
    return json.loads(body) if body else {}
