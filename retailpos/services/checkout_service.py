# retailpos/services/checkout_service.py
import logging
from datetime import datetime, timezone

from ..errors import CheckoutError, EmptyCartError, InsufficientTenderError, NotFoundError, ValidationError
from ..model import PAYMENT_METHODS, CompletedOrder
from ..utils.money import Money, parse_money, round_money
from .cart_service import WorkingOrder
from .fbr_service import make_invoice_number
from .loyalty import evaluate_loyalty_eligibility, settle_loyalty

log = logging.getLogger(__name__)


def _payment_method(raw) -> str:
    method = (raw or "card").strip().lower()
    if method not in PAYMENT_METHODS:
        raise ValidationError("payment method must be 'card' or 'cash'")
    return method


def validate_tender(method: str, total: Money, amount_tendered) -> tuple[Money | None, Money | None]:
    """Returns (tendered, change). Cash must cover the total shown to the customer."""
    if method != "cash":
        return None, None
    tendered = parse_money(amount_tendered)
    due = round_money(total)
    if tendered is None or tendered < due:
        raise InsufficientTenderError(
            "cash tendered must cover the total",
            data={"total": float(due), "amount_tendered": float(tendered) if tendered is not None else None},
        )
    return tendered, tendered - due


def checkout(state, order: WorkingOrder, *, payment_method="card", amount_tendered=None,
             cashier_id: int | None = None, now: datetime | None = None) -> CompletedOrder:
    """Turn the working order into a recorded sale.

    Stock decrements and the customer's loyalty update are one unit: if any
    write fails, every store is put back and nothing is recorded.
    """
    if order.is_empty():
        raise EmptyCartError("cart is empty")

    method = _payment_method(payment_method)
    tax_rate = state.tax_rates.current_rate()
    totals = order.totals(tax_rate)
    tendered, change = validate_tender(method, totals.total, amount_tendered)
    now = now or datetime.now(timezone.utc)
    fbr = state.fbr

    with state.lock:
        customer = state.customers.walk_in() if order.customer_id is None else state.customers.get(order.customer_id)
        if customer is None:
            raise CheckoutError(f"customer {order.customer_id} not found")
        if order.loyalty_discount_applied and not evaluate_loyalty_eligibility(customer, state.loyalty):
            # the reward was redeemed on another order since it was applied here
            raise CheckoutError(f"loyalty reward is no longer available for {customer.name}")

        catalog_snap = state.catalog.snapshot()
        customers_snap = state.customers.snapshot()
        try:
            for line in order.line_items:
                state.catalog.decrement_stock(line.product_id, line.quantity)
            settled = settle_loyalty(customer, totals.total, order.loyalty_discount_applied, state.loyalty)
            if settled is not None and settled is not customer:
                state.customers.put(settled)
        except Exception as e:
            state.catalog.restore(catalog_snap)
            state.customers.restore(customers_snap)
            log.warning("checkout rolled back for customer %s: %s", order.customer_id, e)
            if isinstance(e, CheckoutError):
                raise
            if isinstance(e, NotFoundError):
                raise CheckoutError(e.message) from e
            raise

        order_id = state.history.next_id()
        completed = state.history.record(CompletedOrder(
            id=order_id,
            line_items=tuple(order.line_items),
            customer=customer,
            subtotal=totals.subtotal,
            discount_amount=totals.discount_amount,
            discount=order.discount,
            loyalty_discount_applied=order.loyalty_discount_applied,
            tax=totals.tax,
            total=totals.total,
            payment_method=method,
            timestamp=now,
            currency=state.currency,
            tax_rate=totals.tax_rate,
            amount_tendered=tendered,
            change_due=change,
            is_fbr_invoice=fbr.enabled,
            fbr_invoice_number=make_invoice_number(fbr.pos_id, order_id, now) if fbr.enabled else None,
            cashier_id=cashier_id,
        ))

    order.clear()
    log.info("order %s completed: total %s %s (%s)", completed.id, round_money(completed.total),
             completed.currency.code, method)
    if completed.is_fbr_invoice:
        state.fbr_reporter.submit(completed)
    return completed
