from flask import request

from . import bp
from ..errors import ValidationError
from ..extensions import pos
from ..services.loyalty import loyalty_progress
from ..utils.api import ok
from ..utils.decorators import login_required, role_required


def _customer_fields(data: dict, *, partial: bool) -> dict:
    fields = {}
    if "name" in data or not partial:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("name is required")
        fields["name"] = name
    if "email" in data or not partial:
        email = (data.get("email") or "").strip().lower()
        if email and "@" not in email:
            raise ValidationError("email is invalid")
        fields["email"] = email
    return fields


@bp.get("")
@login_required
def list_customers():
    q = (request.args.get("q") or "").strip().lower()
    items = [c for c in pos.customers.all() if not q or q in c.name.lower() or q in c.email]
    return ok("customers", {"total": len(items), "items": [c.as_dict() for c in items]})


@bp.get("/<int:customer_id>")
@login_required
def get_customer(customer_id: int):
    """Customer profile: loyalty status and order history, newest first."""
    c = pos.customers.require(customer_id)
    orders = sorted(pos.history.for_customer(customer_id), key=lambda o: o.timestamp, reverse=True)
    return ok("customer", {
        "customer": c.as_dict(),
        "loyalty": loyalty_progress(c, pos.loyalty),
        "orders": [
            {"id": o.id, "created_at": o.timestamp.isoformat(), "item_count": o.total_quantity,
             "total": o.as_api()["money"]["total"]}
            for o in orders
        ],
    })


@bp.post("")
@role_required("admin", message="Only admins can manage customers")
def create_customer():
    data = request.get_json(silent=True) or {}
    c = pos.customers.add(**_customer_fields(data, partial=False))
    return ok("customer created", c.as_dict(), status=201)


@bp.patch("/<int:customer_id>")
@bp.put("/<int:customer_id>")
@role_required("admin", message="Only admins can manage customers")
def update_customer(customer_id: int):
    data = request.get_json(silent=True) or {}
    c = pos.customers.update(customer_id, **_customer_fields(data, partial=request.method == "PATCH"))
    return ok("customer updated", c.as_dict())


@bp.delete("/<int:customer_id>")
@role_required("admin", message="Only admins can manage customers")
def delete_customer(customer_id: int):
    pos.customers.delete(customer_id)
    pos.detach_customer(customer_id)
    return ok("customer deleted", {"id": customer_id})
