# Overview: Demonstration dataset for first-time users; seeds each collection only when it is absent.

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from flask import current_app

from ..models import Product, Customer, Invoice, InvoiceItem
from shopdesk.time_utils import utcnow
from .collection_service import EntityRepository
from .pricing_service import compute_totals, line_total


SEED_TAX_RATE = Decimal("8.5")

# (id, name, description, category, price, cost, stock, min_stock, barcode)
SAMPLE_PRODUCTS = [
    ("1", "All-Purpose Cleaner", "Multi-surface cleaning solution", "Cleaners", "12.99", "8.50", 45, 10, "123456789"),
    ("2", "Microfiber Cloth Pack", "Pack of 5 microfiber cleaning cloths", "Supplies", "15.99", "10.00", 8, 15, "987654321"),
    ("3", "Glass Cleaner", "Streak-free glass and window cleaner", "Cleaners", "9.99", "6.25", 22, 10, "456789123"),
    ("4", "Disinfectant Spray", "Hospital-grade disinfectant spray", "Cleaners", "18.99", "12.50", 35, 20, "789123456"),
    ("5", "Vacuum Cleaner Bags", "Universal vacuum cleaner bags (pack of 10)", "Supplies", "24.99", "16.00", 12, 8, "321654987"),
]

# (id, name, email, phone, address)
SAMPLE_CUSTOMERS = [
    ("1", "John Smith", "john.smith@email.com", "(555) 123-4567", "123 Main St, Anytown, ST 12345"),
    ("2", "Sarah Johnson", "sarah.j@email.com", "(555) 987-6543", "456 Oak Ave, Somewhere, ST 67890"),
    ("3", "Mike Wilson", "mike.wilson@company.com", "(555) 456-7890", "789 Business Blvd, Corporate City, ST 54321"),
]

# (id, number, customer_id, status, days_ago, [(line_id, product_id, quantity), ...])
SAMPLE_INVOICES = [
    ("1", "INV-202501-0001", "1", "paid", 7, [("1", "1", 3), ("2", "3", 2)]),
    ("2", "INV-202501-0002", "2", "sent", 3, [("3", "4", 5), ("4", "2", 2)]),
    ("3", "INV-202501-0003", "3", "paid", 1, [("5", "1", 10), ("6", "4", 8), ("7", "5", 3)]),
    ("4", "INV-202501-0004", "1", "draft", 0, [("8", "2", 4)]),
]


def sample_products(user_id: str, now: datetime) -> list[Product]:
    return [
        Product(
            id=pid,
            name=name,
            description=description,
            category=category,
            price=Decimal(price),
            cost=Decimal(cost),
            stock=stock,
            min_stock=min_stock,
            barcode=barcode,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        for pid, name, description, category, price, cost, stock, min_stock, barcode in SAMPLE_PRODUCTS
    ]


def sample_customers(user_id: str, now: datetime) -> list[Customer]:
    return [
        Customer(
            id=cid,
            name=name,
            email=email,
            phone=phone,
            address=address,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        for cid, name, email, phone, address in SAMPLE_CUSTOMERS
    ]


def sample_invoices(user_id: str, now: datetime) -> list[Invoice]:
    products = {p.id: p for p in sample_products(user_id, now)}
    customers = {c.id: c for c in sample_customers(user_id, now)}

    invoices = []
    for inv_id, number, customer_id, status, days_ago, lines in SAMPLE_INVOICES:
        items = []
        for line_id, product_id, quantity in lines:
            product = products[product_id]
            items.append(InvoiceItem(
                id=line_id,
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                price=product.price,
                total=line_total(product.price, quantity),
            ))
        totals = compute_totals(items, SEED_TAX_RATE)
        customer = customers[customer_id]
        stamp = now - timedelta(days=days_ago)
        invoices.append(Invoice(
            id=inv_id,
            invoice_number=number,
            customer_id=customer.id,
            customer_name=customer.name,
            customer_email=customer.email,
            customer_phone=customer.phone,
            customer_address=customer.address,
            items=tuple(items),
            subtotal=totals.subtotal,
            tax=totals.tax_amount,
            total=totals.total,
            status=status,
            tax_rate=SEED_TAX_RATE,
            user_id=user_id,
            created_at=stamp,
            updated_at=stamp,
        ))
    return invoices


SAMPLE_BUILDERS = {
    "products": sample_products,
    "customers": sample_customers,
    "invoices": sample_invoices,
}


def seed_user_data(user_id: str, now: datetime | None = None) -> list[str]:
    """
    Populate the demo dataset for a user.

    Each collection is checked on its own: only collections whose key is
    absent are written, so existing data (even an empty list the user
    cleared on purpose) is never overwritten. Calling this twice is a no-op
    the second time.

    Returns the names of the collections that were seeded.
    """
    repo = EntityRepository(user_id)
    now = now or utcnow()

    seeded = []
    for collection, builder in SAMPLE_BUILDERS.items():
        if repo.exists(collection):
            continue
        repo.save(collection, builder(repo.user_id, now))
        seeded.append(collection)

    if seeded:
        current_app.logger.info("Seeded %s for user %s", ", ".join(seeded), repo.user_id)
    return seeded


def ensure_seeded(user_id: str) -> None:
    """Seed on first read when AUTO_SEED is enabled."""
    if current_app.config.get("AUTO_SEED", False):
        seed_user_data(user_id)


def user_repository(user_id: str) -> EntityRepository:
    """Repository for a user, seeded first when AUTO_SEED is on (mirrors first page load)."""
    repo = EntityRepository(user_id)
    ensure_seeded(repo.user_id)
    return repo
