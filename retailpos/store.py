# retailpos/store.py
"""In-memory stores for catalog, customers, operators, held orders and sales.

Records are immutable dataclasses; writes replace them. All stores of one
PosState share a re-entrant lock so a checkout can change several stores as
one unit and put them back with restore() if any write fails.
"""
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Generic, Iterable, TypeVar

from .errors import ForbiddenError, NotFoundError, OutOfStockError
from .model import CompletedOrder, Customer, HeldOrder, LineItem, Product, User, WALK_IN_CUSTOMER_ID

T = TypeVar("T")


class Store(Generic[T]):
    label = "record"

    def __init__(self, lock: threading.RLock):
        self._lock = lock
        self._rows: dict[int, T] = {}
        # highest id ever issued or loaded; deleted ids are never handed out again
        self._last_id = 0

    def next_id(self) -> int:
        with self._lock:
            return self._last_id + 1

    def _claim(self, rid: int) -> None:
        self._last_id = max(self._last_id, rid)

    def all(self) -> list[T]:
        with self._lock:
            return sorted(self._rows.values(), key=lambda r: r.id)

    def get(self, rid: int) -> T | None:
        with self._lock:
            return self._rows.get(rid)

    def require(self, rid: int) -> T:
        row = self.get(rid)
        if row is None:
            raise NotFoundError(f"{self.label} {rid} not found")
        return row

    def add(self, **fields) -> T:
        with self._lock:
            row = self._build(id=self.next_id(), **fields)
            self._rows[row.id] = row
            self._claim(row.id)
            return row

    def put(self, row: T) -> T:
        with self._lock:
            if row.id not in self._rows:
                raise NotFoundError(f"{self.label} {row.id} not found")
            self._rows[row.id] = row
            return row

    def update(self, rid: int, **fields) -> T:
        with self._lock:
            return self.put(replace(self.require(rid), **fields))

    def delete(self, rid: int) -> T:
        with self._lock:
            row = self.require(rid)
            del self._rows[rid]
            return row

    def load(self, rows: Iterable[T]) -> None:
        with self._lock:
            for row in rows:
                self._rows[row.id] = row
                self._claim(row.id)

    def snapshot(self) -> dict[int, T]:
        with self._lock:
            return dict(self._rows)

    def restore(self, snap: dict[int, T]) -> None:
        with self._lock:
            self._rows = dict(snap)

    def _build(self, **fields) -> T:
        raise NotImplementedError


class CatalogStore(Store[Product]):
    label = "product"

    def _build(self, **fields):
        return Product(**fields)

    def filter(self, category: str | None = None, q: str | None = None) -> list[Product]:
        category = (category or "").strip()
        q = (q or "").strip().lower()
        out = []
        for p in self.all():
            if category and category.lower() != "all" and p.category.lower() != category.lower():
                continue
            if q and q not in p.name.lower() and q not in p.category.lower():
                continue
            out.append(p)
        return out

    def get_stock(self, product_id: int) -> int:
        return self.require(product_id).stock

    def decrement_stock(self, product_id: int, quantity: int) -> Product:
        with self._lock:
            p = self.require(product_id)
            if quantity > p.stock:
                raise OutOfStockError(f"{p.name} has only {p.stock} left")
            return self.put(replace(p, stock=p.stock - quantity))


class CustomerStore(Store[Customer]):
    label = "customer"

    def _build(self, **fields):
        return Customer(**fields)

    def walk_in(self) -> Customer | None:
        return self.get(WALK_IN_CUSTOMER_ID)

    def delete(self, rid: int) -> Customer:
        if rid == WALK_IN_CUSTOMER_ID:
            raise ForbiddenError("Cannot delete the default 'Walk-in Customer'.")
        return super().delete(rid)


class UserStore(Store[User]):
    label = "user"

    def _build(self, **fields):
        return User(**fields)

    def by_email(self, email: str) -> User | None:
        email = (email or "").strip().lower()
        with self._lock:
            return next((u for u in self._rows.values() if u.email.lower() == email), None)


class HeldOrderStore(Store[HeldOrder]):
    label = "held order"

    def _build(self, **fields):
        return HeldOrder(**fields)

    def hold(self, line_items: Iterable[LineItem], customer_id: int | None) -> HeldOrder:
        return self.add(
            line_items=tuple(line_items),
            customer_id=customer_id,
            held_at=datetime.now(timezone.utc),
        )


class OrderHistory(Store[CompletedOrder]):
    """Completed sales. Append-only."""
    label = "order"

    def _build(self, **fields):
        return CompletedOrder(**fields)

    def record(self, order: CompletedOrder) -> CompletedOrder:
        with self._lock:
            if order.id in self._rows:
                raise ValueError(f"order {order.id} already recorded")
            self._rows[order.id] = order
            self._claim(order.id)
            return order

    def put(self, row):
        raise TypeError("completed orders are immutable")

    def delete(self, rid):
        raise TypeError("completed orders cannot be deleted")

    def for_customer(self, customer_id: int) -> list[CompletedOrder]:
        return [o for o in self.all() if o.customer and o.customer.id == customer_id]
