# Overview: Invoice arithmetic; line totals, subtotal, tax and grand total.

"""
Invoice Calculator

All amounts are Decimal and rounded to cents half-up:
- line total   = price x quantity            (exact for cent prices)
- subtotal     = sum of line totals
- tax amount   = round(subtotal x rate / 100)
- total        = subtotal + tax amount

Totals are always derived from the current cart and rate; nothing here
caches a previous result.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..models import InvoiceItem, Product
from ..validation import ValidationError, parse_count, parse_percent, round_money
from .document_service import new_entity_id


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "subtotal": float(self.subtotal),
            "taxAmount": float(self.tax_amount),
            "total": float(self.total),
        }


def line_total(price: Decimal, quantity: int) -> Decimal:
    return round_money(price * quantity)


def build_line_item(product: Product, quantity) -> InvoiceItem:
    """Snapshot a product's current name and price into a new line."""
    if product is None:
        raise ValidationError("Product not found")
    qty = parse_count("quantity", quantity, minimum=1)
    return InvoiceItem(
        id=new_entity_id(),
        product_id=product.id,
        product_name=product.name,
        quantity=qty,
        price=product.price,
        total=line_total(product.price, qty),
    )


def add_line_item(cart, product: Product, quantity) -> list[InvoiceItem]:
    """Return a new cart with one more line; the input cart is not modified."""
    return [*cart, build_line_item(product, quantity)]


def remove_line_item(cart, item_id: str) -> list[InvoiceItem]:
    """Return a new cart without item_id; unknown ids leave the cart as is."""
    return [item for item in cart if item.id != item_id]


def compute_totals(cart, tax_rate_percent) -> InvoiceTotals:
    rate = parse_percent("taxRate", tax_rate_percent)
    subtotal = round_money(sum((item.total for item in cart), Decimal("0")))
    tax_amount = round_money(subtotal * rate / 100)
    return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, total=subtotal + tax_amount)
