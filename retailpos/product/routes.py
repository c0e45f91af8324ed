from flask import request

from . import bp
from ..errors import ValidationError
from ..extensions import pos
from ..model import CATEGORIES
from ..utils.api import ok
from ..utils.decorators import login_required, role_required
from ..utils.money import parse_money

# ---------- helpers ----------
def _parse_int(v, default=None):
    if isinstance(v, bool):
        return default
    try:
        return int(v)
    except (TypeError, ValueError):
        return default

def _product_fields(data: dict, *, partial: bool) -> dict:
    """Validate a product payload; prices and stock are rejected here, not in pricing."""
    fields = {}
    if "name" in data or not partial:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("name is required")
        fields["name"] = name
    if "category" in data or not partial:
        category = (data.get("category") or "").strip()
        if not category:
            raise ValidationError("category is required")
        fields["category"] = category
    if "price" in data or not partial:
        price = parse_money(data.get("price"))
        if price is None or price < 0:
            raise ValidationError("price must be a number >= 0")
        fields["price"] = price
    if "stock" in data or not partial:
        stock = _parse_int(data.get("stock", 0))
        if stock is None or stock < 0:
            raise ValidationError("stock must be an integer >= 0")
        fields["stock"] = stock
    if "image_url" in data:
        fields["image_url"] = (data.get("image_url") or "").strip()
    return fields

# ---------- endpoints ----------
@bp.get("")
@login_required
def list_products():
    """
    Query params:
      - category=Coffee|Tea|...|All
      - q=search term (matches name or category)
    """
    items = pos.catalog.filter(request.args.get("category"), request.args.get("q"))
    return ok("products", {"total": len(items), "items": [p.as_api() for p in items]})

@bp.get("/categories")
@login_required
def list_categories():
    names = list(CATEGORIES)
    for p in pos.catalog.all():
        if p.category not in names:
            names.append(p.category)
    return ok("categories", {"items": ["All", *names]})

@bp.get("/<int:product_id>")
@login_required
def get_product(product_id: int):
    return ok("product", pos.catalog.require(product_id).as_api())

@bp.post("")
@role_required("admin", message="Only admins can manage products")
def create_product():
    data = request.get_json(silent=True) or {}
    fields = _product_fields(data, partial=False)
    fields.setdefault("image_url", "")
    p = pos.catalog.add(**fields)
    return ok("product created", p.as_api(), status=201)

@bp.patch("/<int:product_id>")
@bp.put("/<int:product_id>")
@role_required("admin", message="Only admins can manage products")
def update_product(product_id: int):
    data = request.get_json(silent=True) or {}
    p = pos.catalog.update(product_id, **_product_fields(data, partial=request.method == "PATCH"))
    return ok("product updated", p.as_api())

@bp.delete("/<int:product_id>")
@role_required("admin", message="Only admins can manage products")
def delete_product(product_id: int):
    pos.catalog.delete(product_id)
    return ok("product deleted", {"id": product_id})
