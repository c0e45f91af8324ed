# retailpos/services/cart_service.py
from dataclasses import replace
from decimal import Decimal

from ..errors import InvalidDiscountError
from ..model import (
    Customer,
    Discount,
    DiscountState,
    LineItem,
    LoyaltyReward,
    LoyaltySettings,
    ManualDiscount,
    OrderTotals,
    Product,
    parse_discount_kind,
)
from ..utils.money import parse_money
from . import loyalty
from .pricing import price_order


def sanitize_manual_discount(kind, value) -> ManualDiscount:
    dk = parse_discount_kind(kind)
    if dk is None:
        raise InvalidDiscountError("discount type must be 'percentage' or 'fixed'")
    dv = parse_money(value)
    if dv is None or dv <= 0:
        raise InvalidDiscountError("discount value must be > 0")
    return ManualDiscount(kind=dk, value=dv)


class WorkingOrder:
    """The in-progress order of one operator, before checkout.

    Lines are keyed by product id. Quantities are clamped to the stock known
    when they are set. Discount lifecycle:
      NO_DISCOUNT -> MANUAL_PENDING -> APPLIED -> NO_DISCOUNT (remove / clear)
    A loyalty reward goes from NO_DISCOUNT straight to APPLIED.
    """

    def __init__(self, customer_id: int | None = None):
        self.lines: dict[int, LineItem] = {}
        self.customer_id = customer_id
        self.discount_state = DiscountState.NO_DISCOUNT
        self.pending_discount: ManualDiscount | None = None
        self.discount: Discount = None

    # ---- lines -------------------------------------------------------------

    @property
    def line_items(self) -> list[LineItem]:
        return list(self.lines.values())

    def is_empty(self) -> bool:
        return not self.lines

    def add_item(self, product: Product) -> LineItem | None:
        if product.stock <= 0:
            return None
        line = self.lines.get(product.id)
        if line is None:
            line = LineItem(
                product_id=product.id,
                name=product.name,
                category=product.category,
                unit_price=Decimal(product.price),
                quantity=1,
            )
        elif line.quantity >= product.stock:
            return line
        else:
            line = replace(line, quantity=line.quantity + 1)
        self.lines[product.id] = line
        return line

    def update_quantity(self, product_id: int, quantity: int, stock: int) -> LineItem | None:
        line = self.lines.get(product_id)
        if line is None:
            return None
        if quantity <= 0 or stock <= 0:
            del self.lines[product_id]
            return None
        line = replace(line, quantity=min(quantity, stock))
        self.lines[product_id] = line
        return line

    def remove_item(self, product_id: int) -> None:
        self.lines.pop(product_id, None)

    def clear(self) -> None:
        self.lines.clear()
        self.customer_id = None
        self.remove_discount()

    def select_customer(self, customer_id: int | None) -> None:
        if customer_id != self.customer_id and isinstance(self.discount, LoyaltyReward):
            # the reward belongs to the previous customer
            self.remove_discount()
        self.customer_id = customer_id

    # ---- discounts ---------------------------------------------------------

    @property
    def loyalty_discount_applied(self) -> bool:
        return isinstance(self.discount, LoyaltyReward)

    def stage_manual_discount(self, kind, value) -> bool:
        discount = sanitize_manual_discount(kind, value)
        if self.discount_state == DiscountState.APPLIED:
            return False
        self.pending_discount = discount
        self.discount_state = DiscountState.MANUAL_PENDING
        return True

    def confirm_manual_discount(self) -> bool:
        if self.discount_state != DiscountState.MANUAL_PENDING:
            return False
        self.discount = self.pending_discount
        self.pending_discount = None
        self.discount_state = DiscountState.APPLIED
        return True

    def remove_discount(self) -> None:
        self.discount = None
        self.pending_discount = None
        self.discount_state = DiscountState.NO_DISCOUNT

    def apply_loyalty_reward(self, customer: Customer | None, settings: LoyaltySettings) -> bool:
        if self.discount_state != DiscountState.NO_DISCOUNT:
            return False
        if not loyalty.evaluate_loyalty_eligibility(customer, settings, already_rewarded=self.loyalty_discount_applied):
            return False
        self.discount = loyalty.apply_loyalty_reward(self.discount, settings)
        self.discount_state = DiscountState.APPLIED
        return True

    # ---- pricing / snapshots -----------------------------------------------

    def totals(self, tax_rate) -> OrderTotals:
        return price_order(self.line_items, self.discount, tax_rate)

    def restore(self, line_items, customer_id: int | None) -> None:
        self.clear()
        self.lines = {it.product_id: it for it in line_items}
        self.customer_id = customer_id

    def as_api(self, tax_rate) -> dict:
        return {
            "items": [it.as_api() for it in self.line_items],
            "customer_id": self.customer_id,
            "discount_state": self.discount_state.value,
            "pending_discount": self.pending_discount.as_api() if self.pending_discount else None,
            "discount": self.discount.as_api() if self.discount else None,
            "totals": self.totals(tax_rate).as_api(),
        }
