# Overview: Dashboard aggregation over a user's products, customers and invoices.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from ..models import Product, Customer, Invoice
from shopdesk.time_utils import same_calendar_month, utcnow
from .seed_service import user_repository


@dataclass(frozen=True)
class DashboardStats:
    total_products: int
    low_stock_products: int
    total_customers: int
    total_invoices: int
    total_revenue: Decimal
    monthly_revenue: Decimal

    def to_dict(self) -> dict:
        return {
            "totalProducts": self.total_products,
            "lowStockProducts": self.low_stock_products,
            "totalCustomers": self.total_customers,
            "totalInvoices": self.total_invoices,
            "totalRevenue": float(self.total_revenue),
            "monthlyRevenue": float(self.monthly_revenue),
        }


def _paid(invoices: Iterable[Invoice]) -> list[Invoice]:
    return [inv for inv in invoices if inv.status == "paid"]


def compute_stats(
    products: list[Product],
    customers: list[Customer],
    invoices: list[Invoice],
    now: datetime,
) -> DashboardStats:
    """
    Full scan, no memoization.

    Revenue counts "paid" invoices only; monthly revenue further requires
    createdAt in now's calendar month (UTC).
    """
    paid = _paid(invoices)
    return DashboardStats(
        total_products=len(products),
        low_stock_products=sum(1 for p in products if p.is_low_stock),
        total_customers=len(customers),
        total_invoices=len(invoices),
        total_revenue=sum((inv.total for inv in paid), Decimal("0")),
        monthly_revenue=sum(
            (inv.total for inv in paid if same_calendar_month(inv.created_at, now)),
            Decimal("0"),
        ),
    )


def dashboard_for_user(user_id: str, now: datetime | None = None) -> dict:
    repo = user_repository(user_id)
    products = repo.load_products()
    stats = compute_stats(products, repo.load_customers(), repo.load_invoices(), now or utcnow())
    return {
        "stats": stats.to_dict(),
        "lowStock": [p.to_dict() for p in products if p.is_low_stock],
    }
