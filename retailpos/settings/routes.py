from dataclasses import replace

from flask import request

from . import bp
from ..errors import ValidationError
from ..extensions import pos
from ..model import CURRENCIES, find_currency
from ..utils.api import ok
from ..utils.decorators import login_required, role_required
from ..utils.money import parse_money

ADMIN_ONLY = "Only admins can change settings"


def _rate(value, name: str):
    rate = parse_money(value)
    if rate is None or rate < 0 or rate > 1:
        raise ValidationError(f"{name} must be a fraction between 0 and 1")
    return rate


def _bool(data: dict, key: str, current: bool) -> bool:
    if key not in data:
        return current
    v = data[key]
    if not isinstance(v, bool):
        raise ValidationError(f"{key} must be true or false")
    return v


def _settings_payload():
    state = pos.state
    return {
        "currency": state.currency.as_dict(),
        "currencies": [c.as_dict() for c in CURRENCIES],
        "tax": state.tax_rates.as_dict(),
        "loyalty": state.loyalty.as_dict(),
        "fbr": state.fbr.as_dict(),
        "ai": {**state.ai.as_dict(), "api_key_set": bool(getattr(state.report_gateway, "configured", False))},
    }


@bp.get("")
@login_required
def get_settings():
    return ok("settings", _settings_payload())


@bp.put("/tax")
@role_required("admin", message=ADMIN_ONLY)
def update_tax():
    data = request.get_json(silent=True) or {}
    state = pos.state
    with state.lock:
        state.fbr = replace(state.fbr, manual_tax_rate=_rate(data.get("rate"), "rate"))
    return ok("tax rate updated", state.tax_rates.as_dict())


@bp.put("/currency")
@login_required
def update_currency():
    data = request.get_json(silent=True) or {}
    currency = find_currency(data.get("code"))
    if currency is None:
        raise ValidationError(f"currency must be one of {', '.join(c.code for c in CURRENCIES)}")
    pos.state.currency = currency
    return ok("currency updated", currency.as_dict())


@bp.put("/loyalty")
@role_required("admin", message=ADMIN_ONLY)
def update_loyalty():
    data = request.get_json(silent=True) or {}
    state = pos.state
    with state.lock:
        cur = state.loyalty
        threshold = cur.spend_threshold
        if "spend_threshold" in data:
            threshold = parse_money(data.get("spend_threshold"))
            if threshold is None or threshold <= 0:
                raise ValidationError("spend_threshold must be > 0")
        percent = cur.reward_percentage
        if "reward_percentage" in data:
            percent = parse_money(data.get("reward_percentage"))
            if percent is None or percent < 0 or percent > 100:
                raise ValidationError("reward_percentage must be between 0 and 100")
        state.loyalty = replace(
            cur,
            enabled=_bool(data, "enabled", cur.enabled),
            spend_threshold=threshold,
            reward_percentage=percent,
        )
    return ok("loyalty settings updated", state.loyalty.as_dict())


@bp.put("/fbr")
@role_required("admin", message=ADMIN_ONLY)
def update_fbr():
    data = request.get_json(silent=True) or {}
    state = pos.state
    with state.lock:
        cur = state.fbr
        fields = {"enabled": _bool(data, "enabled", cur.enabled)}
        for key in ("api_key", "ntn", "pos_id"):
            if key in data:
                fields[key] = (data.get(key) or "").strip()
        if "manual_tax_rate" in data:
            fields["manual_tax_rate"] = _rate(data.get("manual_tax_rate"), "manual_tax_rate")
        if "timeout" in data:
            timeout = parse_money(data.get("timeout"))
            if timeout is None or timeout <= 0:
                raise ValidationError("timeout must be > 0")
            fields["timeout"] = float(timeout)
        state.fbr = replace(cur, **fields)
    state.tax_rates.refresh()
    return ok("FBR settings updated", {"fbr": state.fbr.as_dict(), "tax": state.tax_rates.as_dict()})


@bp.post("/fbr/refresh")
@role_required("admin", message=ADMIN_ONLY)
def refresh_tax_rate():
    if not pos.fbr.enabled:
        raise ValidationError("FBR integration is disabled")
    pos.tax_rates.refresh()
    return ok("tax rate lookup started", pos.tax_rates.as_dict(), status=202)


@bp.get("/fbr/status")
@login_required
def fbr_status():
    return ok("FBR status", {
        "fbr": pos.fbr.as_dict(),
        "tax": pos.tax_rates.as_dict(),
        "submissions": pos.fbr_reporter.submission_log(),
    })


@bp.put("/ai")
@role_required("admin", message=ADMIN_ONLY)
def update_ai():
    data = request.get_json(silent=True) or {}
    state = pos.state
    with state.lock:
        cur = state.ai
        model = cur.model
        if "model" in data:
            model = (data.get("model") or "").strip()
            if not model:
                raise ValidationError("model is required")
        state.ai = replace(cur, enabled=_bool(data, "enabled", cur.enabled), model=model)
    return ok("AI settings updated", state.ai.as_dict())
