# retailpos/services/receipt_service.py
from ..model import CompletedOrder
from ..utils.money import format_currency

WIDTH = 40


def _row(left: str, right: str) -> str:
    gap = max(1, WIDTH - len(left) - len(right))
    return f"{left}{' ' * gap}{right}"


def render_receipt(order: CompletedOrder, store_name: str = "RetailPOS") -> str:
    sym = order.currency.symbol
    money = lambda x: format_currency(x, sym)  # noqa: E731
    lines = [
        store_name.center(WIDTH),
        f"Order #{order.id}".center(WIDTH),
        order.timestamp.strftime("%Y-%m-%d %H:%M:%S").center(WIDTH),
        "-" * WIDTH,
        f"Customer: {order.customer.name if order.customer else 'Walk-in Customer'}",
        "-" * WIDTH,
    ]
    for it in order.line_items:
        lines.append(_row(f"{it.quantity} x {it.name}", money(it.line_total)))
    lines.append("-" * WIDTH)
    lines.append(_row("Subtotal", money(order.subtotal)))
    if order.discount_amount > 0:
        label = "Loyalty Discount" if order.loyalty_discount_applied else "Discount"
        lines.append(_row(label, f"-{money(order.discount_amount)}"))
    tax_label = "FBR Tax" if order.is_fbr_invoice else "Tax"
    pct = f"{order.tax_rate * 100:.2f}".rstrip("0").rstrip(".")
    lines.append(_row(f"{tax_label} ({pct}%)", money(order.tax)))
    lines.append(_row("Total", money(order.total)))
    lines.append("-" * WIDTH)
    lines.append(_row("Payment Method", order.payment_method.title()))
    if order.payment_method == "cash" and order.amount_tendered is not None:
        lines.append(_row("Cash Tendered", money(order.amount_tendered)))
        lines.append(_row("Change Due", money(order.change_due)))
    if order.is_fbr_invoice and order.fbr_invoice_number:
        lines.append("-" * WIDTH)
        lines.append("FBR Invoice Number")
        lines.append(order.fbr_invoice_number)
    lines.append("Thank you for your purchase!".center(WIDTH))
    return "\n".join(lines)
