from flask import current_app, request

from . import bp
from ..extensions import pos
from ..services.insights_service import generate_ai_report, sales_summary
from ..utils.api import ok
from ..utils.decorators import login_required


@bp.get("/dashboard")
@login_required
def dashboard():
    """Query params: period=day|week|month (default day)."""
    period = (request.args.get("period") or "day").strip().lower()
    summary = sales_summary(pos.history.all(), period)
    summary["currency"] = pos.currency.as_dict()
    return ok("dashboard", summary)


@bp.post("/ai-report")
@login_required
def ai_report():
    report = generate_ai_report(
        pos.report_gateway,
        pos.executor,
        pos.ai,
        pos.history.all(),
        pos.catalog.all(),
        timeout=float(current_app.config.get("AI_TIMEOUT", 60)),
    )
    return ok("report generated", {"report": report, "model": pos.ai.model})
