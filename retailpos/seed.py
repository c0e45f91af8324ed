# retailpos/seed.py
"""Starting data for a fresh register: a small cafe menu, customers and operators."""
from decimal import Decimal

from werkzeug.security import generate_password_hash

from .model import Customer, Product, User

SAMPLE_PRODUCTS = [
    (1, "Espresso", "Coffee", 700, 100, 225),
    (2, "Latte", "Coffee", 950, 100, 305),
    (3, "Cappuccino", "Coffee", 950, 100, 365),
    (4, "Americano", "Coffee", 850, 100, 431),
    (5, "Mocha", "Coffee", 1100, 50, 488),
    (6, "Green Tea", "Tea", 600, 80, 42),
    (7, "Black Tea", "Tea", 600, 80, 75),
    (8, "Herbal Tea", "Tea", 650, 70, 111),
    (9, "Croissant", "Pastries", 750, 40, 211),
    (10, "Muffin", "Pastries", 700, 45, 177),
    (11, "Scone", "Pastries", 850, 30, 326),
    (12, "Danish", "Pastries", 900, 35, 368),
    (13, "Turkey Club", "Sandwiches", 2300, 20, 1080),
    (14, "Ham & Cheese", "Sandwiches", 2000, 25, 1078),
    (15, "Veggie Wrap", "Sandwiches", 1900, 30, 1060),
    (16, "Iced Coffee", "Coffee", 1000, 60, 569),
]

SAMPLE_CUSTOMERS = [
    (1, "Walk-in Customer", "", 0, False),
    (2, "John Doe", "john.d@example.com", 15000, False),
    (3, "Jane Smith", "jane.s@example.com", 52000, True),
]

SAMPLE_USERS = [
    (1, "Admin User", "admin@pos.com", "password", "admin"),
    (2, "Cashier User", "cashier@pos.com", "password", "cashier"),
    (3, "Salesman User", "salesman@pos.com", "password", "salesman"),
]


def sample_products():
    return [
        Product(id=i, name=n, category=c, price=Decimal(p), stock=s,
                image_url=f"https://picsum.photos/id/{img}/200/200")
        for i, n, c, p, s, img in SAMPLE_PRODUCTS
    ]


def sample_customers():
    return [
        Customer(id=i, name=n, email=e, total_spent=Decimal(t), reward_available=r)
        for i, n, e, t, r in SAMPLE_CUSTOMERS
    ]


def sample_users():
    return [
        User(id=i, name=n, email=e, password_hash=generate_password_hash(pw), role=role)
        for i, n, e, pw, role in SAMPLE_USERS
    ]


def seed_state(state) -> None:
    state.catalog.load(sample_products())
    state.customers.load(sample_customers())
    state.users.load(sample_users())
