from dataclasses import replace

from flask import request

from . import bp
from ..errors import ValidationError
from ..extensions import pos
from ..services.checkout_service import checkout as run_checkout
from ..services.receipt_service import render_receipt
from ..utils.api import ok
from ..utils.decorators import current_user, login_required


# ---------- helpers ----------
def _order():
    return pos.working_order(current_user().id)

def _cart_payload(order):
    return order.as_api(pos.tax_rates.current_rate())

def _int_field(data: dict, key: str) -> int:
    v = data.get(key)
    if isinstance(v, bool):
        raise ValidationError(f"{key} must be an integer")
    try:
        return int(v)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")

def _in_stock_lines(line_items):
    """Held lines capped at current stock; sold-out or deleted products are dropped."""
    lines = []
    for it in line_items:
        product = pos.catalog.get(it.product_id)
        if product is None or product.stock <= 0:
            continue
        lines.append(replace(it, quantity=min(it.quantity, product.stock)))
    return lines

# ---------- cart ----------
@bp.get("")
@login_required
def get_cart():
    return ok("cart", _cart_payload(_order()))

@bp.post("/items")
@login_required
def add_item():
    data = request.get_json(silent=True) or {}
    product = pos.catalog.require(_int_field(data, "product_id"))
    order = _order()
    line = order.add_item(product)
    msg = "item added" if line else f"{product.name} is out of stock"
    return ok(msg, _cart_payload(order))

@bp.patch("/items/<int:product_id>")
@login_required
def update_item(product_id: int):
    data = request.get_json(silent=True) or {}
    quantity = _int_field(data, "quantity")
    order = _order()
    product = pos.catalog.get(product_id)
    # a product deleted from the catalog can only leave the cart
    stock = product.stock if product else 0
    order.update_quantity(product_id, quantity, stock)
    return ok("cart updated", _cart_payload(order))

@bp.delete("/items/<int:product_id>")
@login_required
def remove_item(product_id: int):
    order = _order()
    order.remove_item(product_id)
    return ok("item removed", _cart_payload(order))

@bp.post("/clear")
@login_required
def clear_cart():
    order = _order()
    order.clear()
    return ok("cart cleared", _cart_payload(order))

@bp.put("/customer")
@login_required
def select_customer():
    data = request.get_json(silent=True) or {}
    customer_id = data.get("customer_id")
    if customer_id is not None:
        customer_id = pos.customers.require(_int_field(data, "customer_id")).id
    order = _order()
    order.select_customer(customer_id)
    return ok("customer selected", _cart_payload(order))


# ---------- discounts ----------
@bp.post("/discount")
@login_required
def stage_discount():
    data = request.get_json(silent=True) or {}
    order = _order()
    if not order.stage_manual_discount(data.get("type"), data.get("value")):
        return ok("a discount is already applied; remove it first", _cart_payload(order))
    return ok("discount pending confirmation", _cart_payload(order))

@bp.post("/discount/confirm")
@login_required
def confirm_discount():
    order = _order()
    msg = "discount applied" if order.confirm_manual_discount() else "no pending discount"
    return ok(msg, _cart_payload(order))

@bp.delete("/discount")
@login_required
def remove_discount():
    order = _order()
    order.remove_discount()
    return ok("discount removed", _cart_payload(order))

@bp.post("/loyalty-reward")
@login_required
def apply_loyalty_reward():
    order = _order()
    customer = pos.customers.walk_in() if order.customer_id is None else pos.customers.get(order.customer_id)
    if order.apply_loyalty_reward(customer, pos.loyalty):
        return ok("loyalty reward applied", _cart_payload(order))
    return ok("loyalty reward not available", _cart_payload(order))


# ---------- held orders ----------
@bp.get("/held")
@login_required
def list_held():
    items = pos.held_orders.all()
    return ok("held orders", {"total": len(items), "items": [h.as_api() for h in items]})

@bp.post("/hold")
@login_required
def hold_order():
    order = _order()
    if order.is_empty():
        return ok("cart is empty, nothing to hold", {"held": None, "cart": _cart_payload(order)})
    held = pos.held_orders.hold(order.line_items, order.customer_id)
    order.clear()
    return ok("order held", {"held": held.as_api(), "cart": _cart_payload(order)}, status=201)

@bp.post("/held/<int:held_id>/recall")
@login_required
def recall_order(held_id: int):
    order = _order()
    with pos.lock:
        held = pos.held_orders.require(held_id)
        parked = None
        if not order.is_empty():
            parked = pos.held_orders.hold(order.line_items, order.customer_id)
        pos.held_orders.delete(held_id)
    customer_id = held.customer_id
    if customer_id is not None and pos.customers.get(customer_id) is None:
        customer_id = None
    order.restore(_in_stock_lines(held.line_items), customer_id)
    return ok("order recalled", {
        "held": parked.as_api() if parked else None,
        "cart": _cart_payload(order),
    })

@bp.delete("/held/<int:held_id>")
@login_required
def delete_held(held_id: int):
    pos.held_orders.delete(held_id)
    return ok("held order deleted", {"id": held_id})


# ---------- checkout ----------
@bp.post("/checkout")
@login_required
def checkout():
    data = request.get_json(silent=True) or {}
    user = current_user()
    completed = run_checkout(
        pos.state,
        pos.working_order(user.id),
        payment_method=data.get("payment_method"),
        amount_tendered=data.get("amount_tendered"),
        cashier_id=user.id,
    )
    return ok("order completed", {
        "order": completed.as_api(),
        "receipt": render_receipt(completed),
    }, status=201)
