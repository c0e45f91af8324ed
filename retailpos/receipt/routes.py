from datetime import datetime, timezone

from flask import Response, request

from . import bp
from ..errors import ValidationError
from ..extensions import pos
from ..services.receipt_service import render_receipt
from ..utils.api import ok
from ..utils.decorators import login_required


def _parse_when(raw: str | None, name: str) -> datetime | None:
    if not raw:
        return None
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO date or datetime")
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


@bp.get("")
@login_required
def list_receipts():
    """
    Query params:
      - customer_id=<int>
      - start / end = ISO date or datetime (inclusive)
    """
    customer_id = request.args.get("customer_id", type=int)
    start = _parse_when(request.args.get("start"), "start")
    end = _parse_when(request.args.get("end"), "end")
    if end is not None and len(request.args.get("end", "")) == 10:
        # a bare date means the whole day
        end = end.replace(hour=23, minute=59, second=59, microsecond=999999)

    items = []
    for o in reversed(pos.history.all()):
        if customer_id is not None and (o.customer is None or o.customer.id != customer_id):
            continue
        if start and o.timestamp < start:
            continue
        if end and o.timestamp > end:
            continue
        items.append(o.as_api())
    return ok("receipts", {"total": len(items), "items": items})


@bp.get("/<int:order_id>")
@login_required
def get_receipt(order_id: int):
    return ok("receipt", pos.history.require(order_id).as_api())


@bp.get("/<int:order_id>/text")
@login_required
def receipt_text(order_id: int):
    text = render_receipt(pos.history.require(order_id))
    return Response(text, mimetype="text/plain")
