# retailpos/services/import_export.py
"""Spreadsheet import/export for the catalog and the sales history."""
import os
import pandas as pd

from ..model import CompletedOrder, Product
from ..utils.money import parse_money, to_float_money

PRODUCT_COLUMNS = {
    "ID": "id",
    "Name": "name",
    "Category": "category",
    "Price": "price",
    "Stock": "stock",
    "Image URL": "image_url",
}


def _read(path: str) -> pd.DataFrame:
    ext = os.path.splitext(path)[1].lower()
    if ext in {".xlsx", ".xls"}:
        return pd.read_excel(path)
    if ext == ".csv":
        return pd.read_csv(path)
    raise ValueError(f"unsupported file type {ext!r}; use .csv or .xlsx")


def _write(df: pd.DataFrame, path: str) -> None:
    ext = os.path.splitext(path)[1].lower()
    if ext in {".xlsx", ".xls"}:
        df.to_excel(path, index=False)
    elif ext == ".csv":
        df.to_csv(path, index=False)
    else:
        raise ValueError(f"unsupported file type {ext!r}; use .csv or .xlsx")


def read_products(path: str, first_id: int = 1) -> list[Product]:
    df = _read(path)
    # Clean column names (remove extra spaces)
    df.columns = df.columns.str.strip()
    missing = [c for c in ("Name", "Category", "Price") if c not in df.columns]
    if missing:
        raise ValueError(f"missing columns: {', '.join(missing)}")

    products = []
    next_id = first_id
    for _, row in df.iterrows():
        pid = row.get("ID")
        if pid is None or pd.isna(pid):
            pid = next_id
        pid = int(pid)
        next_id = max(next_id, pid) + 1
        price = parse_money(row["Price"])
        if price is None or price < 0:
            raise ValueError(f"row {pid}: price must be a finite number >= 0, got {row['Price']!r}")
        stock = row.get("Stock", 0)
        try:
            stock = 0 if stock is None or pd.isna(stock) else max(int(stock), 0)
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"row {pid}: stock must be a whole number, got {stock!r}")
        image = row.get("Image URL", "")
        products.append(Product(
            id=pid,
            name=str(row["Name"]).strip(),
            category=str(row["Category"]).strip(),
            price=price,
            stock=stock,
            image_url="" if image is None or pd.isna(image) else str(image),
        ))
    return products


def export_products(products: list[Product], path: str) -> int:
    df = pd.DataFrame([
        {"ID": p.id, "Name": p.name, "Category": p.category, "Price": to_float_money(p.price),
         "Stock": p.stock, "Image URL": p.image_url}
        for p in products
    ], columns=list(PRODUCT_COLUMNS))
    _write(df, path)
    return len(df)


def export_sales(orders: list[CompletedOrder], path: str) -> int:
    """One row per sold line, with the order's money columns repeated."""
    rows = [
        {
            "Order ID": o.id,
            "Date": o.timestamp.isoformat(),
            "Customer": o.customer.name if o.customer else "",
            "Product ID": it.product_id,
            "Product": it.name,
            "Category": it.category,
            "Quantity": it.quantity,
            "Unit Price": to_float_money(it.unit_price),
            "Line Total": to_float_money(it.line_total),
            "Order Subtotal": to_float_money(o.subtotal),
            "Order Discount": to_float_money(o.discount_amount),
            "Order Tax": to_float_money(o.tax),
            "Order Total": to_float_money(o.total),
            "Payment Method": o.payment_method,
            "Currency": o.currency.code,
            "FBR Invoice": o.fbr_invoice_number or "",
        }
        for o in orders
        for it in o.line_items
    ]
    _write(pd.DataFrame(rows), path)
    return len(rows)
