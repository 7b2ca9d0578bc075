# Overview: Service-layer operations for invoices; drafts, numbering, totals, status and deletion.

"""
Invoice Lifecycle Service

WHY: Invoices are the one place where products, customers and money meet.
This module owns the cross-entity rules:

1. Lines snapshot product name and price when they are added; later product
   edits or deletes never touch an existing invoice.
2. Customer contact details are copied onto the invoice. customer_id is a
   weak reference only.
3. subtotal / tax / total are recomputed from the lines and tax rate on every
   create and update; tax is then stored as an absolute amount.
4. An invoice must have at least one line.
5. Invoice numbers come from a persisted per-user sequence
   (document_service.next_invoice_number).

DRAFT PAYLOAD (camelCase, as sent by the client):
    {
        "customerId": "...",            optional; fills blank contact fields
        "customerName": "...",          required (directly or via customerId)
        "customerEmail" / "customerPhone" / "customerAddress": optional,
        "items": [
            {"productId": "...", "quantity": 2},                  new line
            {"id": "...", "productId": "...", "productName": "...",
             "price": 9.99, "quantity": 2},                       kept snapshot
        ],
        "taxRate": 8.5                  optional percent, stored on the invoice;
                                        see _resolve_tax_rate
    }
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from flask import current_app

from ..models import Invoice, InvoiceItem, Product, Customer
from ..validation import (
    NotFoundError,
    ValidationError,
    parse_count,
    parse_money,
    parse_percent,
)
from shopdesk.time_utils import utcnow
from .document_service import new_entity_id, next_invoice_number
from .lifecycle_service import require_transition, validate_status
from .pricing_service import build_line_item, compute_totals, line_total
from .seed_service import user_repository

CUSTOMER_SNAPSHOT_FIELDS = {
    "customerName": "name",
    "customerEmail": "email",
    "customerPhone": "phone",
    "customerAddress": "address",
}


def _find(invoices: list[Invoice], invoice_id: str) -> int:
    for index, invoice in enumerate(invoices):
        if invoice.id == invoice_id:
            return index
    raise NotFoundError(f"Invoice {invoice_id} not found")


def _text(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _snapshot_line(raw: dict) -> InvoiceItem:
    """A line that already carries its snapshot (kept when editing an invoice)."""
    name = _text(raw.get("productName"))
    if not name:
        raise ValidationError("productName cannot be blank")
    price = parse_money("price", raw.get("price"))
    quantity = parse_count("quantity", raw.get("quantity"), minimum=1)
    return InvoiceItem(
        id=_text(raw.get("id")) or new_entity_id(),
        product_id=_text(raw.get("productId")) or "",
        product_name=name,
        quantity=quantity,
        price=price,
        total=line_total(price, quantity),
    )


def build_items(raw_items, products: list[Product]) -> list[InvoiceItem]:
    """
    Turn draft lines into InvoiceItems.

    InvoiceItem instances and lines carrying productName + price are kept as
    snapshots (their total is recomputed). Lines with only productId and
    quantity are snapshotted from the current product list.
    """
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, (list, tuple)):
        raise ValidationError("items must be a list")

    by_id = {p.id: p for p in products}
    items: list[InvoiceItem] = []
    for raw in raw_items:
        if isinstance(raw, InvoiceItem):
            items.append(raw)
            continue
        if not isinstance(raw, dict):
            raise ValidationError("Each item must be an object")
        if "productName" in raw and "price" in raw:
            items.append(_snapshot_line(raw))
            continue
        product = by_id.get(_text(raw.get("productId")) or "")
        if product is None:
            raise ValidationError(f"Product {raw.get('productId')} not found")
        items.append(build_line_item(product, raw.get("quantity", 1)))
    return items


def _resolve_tax_rate(draft: dict, existing: Invoice | None) -> Decimal:
    """
    Tax rate precedence: draft "taxRate", then the rate of the invoice being
    edited, then DEFAULT_TAX_RATE.
    """
    if draft.get("taxRate") is not None:
        return parse_percent("taxRate", draft["taxRate"])
    if existing is not None and (existing.tax_rate is not None or existing.subtotal):
        return existing.implied_tax_rate
    return parse_percent("taxRate", current_app.config.get("DEFAULT_TAX_RATE", "8.5"))


def _resolve_customer(draft: dict, customers: list[Customer], existing: Invoice | None = None) -> dict:
    """
    Snapshot fields for the invoice, filled from customerId where blank.

    When editing, keys left out of the draft keep the invoice's current
    values as long as customerId is unchanged. The invoice's own customerId
    stays valid after that customer is deleted.
    """
    if existing is not None and "customerId" not in draft:
        customer_id = existing.customer_id
    else:
        customer_id = _text(draft.get("customerId"))
    same_customer = existing is not None and customer_id == existing.customer_id

    snapshot = {}
    for key, attr in CUSTOMER_SNAPSHOT_FIELDS.items():
        if same_customer and key not in draft:
            snapshot[key] = getattr(existing, f"customer_{attr}")
        else:
            snapshot[key] = _text(draft.get(key))

    if customer_id and any(value is None for value in snapshot.values()):
        customer = next((c for c in customers if c.id == customer_id), None)
        if customer is not None:
            for key, attr in CUSTOMER_SNAPSHOT_FIELDS.items():
                if snapshot[key] is None:
                    snapshot[key] = getattr(customer, attr)
        elif not same_customer:
            raise ValidationError(f"Customer {customer_id} not found")

    if not snapshot["customerName"]:
        raise ValidationError("customerName is required")

    return {
        "customer_id": customer_id,
        "customer_name": snapshot["customerName"],
        "customer_email": snapshot["customerEmail"],
        "customer_phone": snapshot["customerPhone"],
        "customer_address": snapshot["customerAddress"],
    }


def _check_draft(draft) -> dict:
    if draft is None:
        draft = {}
    if not isinstance(draft, dict):
        raise ValidationError("Invalid JSON payload")
    return draft


def preview_invoice(*, user_id: str, draft: dict) -> tuple[list[InvoiceItem], dict]:
    """Lines and totals for a cart, without saving anything."""
    draft = _check_draft(draft)
    repo = user_repository(user_id)
    items = build_items(draft.get("items"), repo.load_products())
    totals = compute_totals(items, _resolve_tax_rate(draft, None))
    return items, totals.to_dict()


def list_invoices(
    user_id: str,
    search: str | None = None,
    status: str | None = None,
) -> list[Invoice]:
    """
    Invoices in stored order.

    Args:
        search: case-insensitive match on invoice number or customer name
        status: a status, or None/"all"
    """
    if status not in (None, "", "all"):
        validate_status(status)
    term = (search or "").lower()

    return [
        inv for inv in user_repository(user_id).load_invoices()
        if (not term or term in inv.invoice_number.lower() or term in inv.customer_name.lower())
        and (status in (None, "", "all") or inv.status == status)
    ]


def get_invoice(*, user_id: str, invoice_id: str) -> Invoice:
    invoices = user_repository(user_id).load_invoices()
    return invoices[_find(invoices, invoice_id)]


def create_invoice(*, user_id: str, draft: dict, now: datetime | None = None) -> Invoice:
    """
    Create a draft invoice.

    Raises:
        ValidationError: no items, no customer name, unknown product/customer,
            bad quantity or tax rate

    The invoice number is taken from the sequence before the collection is
    saved, so a failed save leaves a gap in the numbering.
    """
    draft = _check_draft(draft)
    repo = user_repository(user_id)
    invoices = repo.load_invoices()

    items = build_items(draft.get("items"), repo.load_products())
    if not items:
        raise ValidationError("Please add at least one item to the invoice")
    customer = _resolve_customer(draft, repo.load_customers())
    tax_rate = _resolve_tax_rate(draft, None)
    totals = compute_totals(items, tax_rate)

    now = now or utcnow()
    invoice = Invoice(
        id=new_entity_id(),
        invoice_number=next_invoice_number(user_id=repo.user_id, existing_invoices=invoices, now=now),
        items=tuple(items),
        subtotal=totals.subtotal,
        tax=totals.tax_amount,
        total=totals.total,
        status="draft",
        tax_rate=tax_rate,
        user_id=repo.user_id,
        created_at=now,
        updated_at=now,
        **customer,
    )
    repo.save_invoices([*invoices, invoice])
    return invoice


def update_invoice(*, user_id: str, invoice_id: str, draft: dict) -> Invoice:
    """
    Replace an invoice's customer details and lines.

    Keeps id, invoice number and createdAt. Totals are recomputed; editing
    puts the invoice back to "draft".
    """
    draft = _check_draft(draft)
    repo = user_repository(user_id)
    invoices = repo.load_invoices()
    index = _find(invoices, invoice_id)
    existing = invoices[index]

    raw_items = draft["items"] if "items" in draft else [item.to_dict() for item in existing.items]
    items = build_items(raw_items, repo.load_products())
    if not items:
        raise ValidationError("Please add at least one item to the invoice")
    customer = _resolve_customer(draft, repo.load_customers(), existing)
    tax_rate = _resolve_tax_rate(draft, existing)
    totals = compute_totals(items, tax_rate)

    updated = existing.with_changes(
        items=tuple(items),
        subtotal=totals.subtotal,
        tax=totals.tax_amount,
        total=totals.total,
        status="draft",
        tax_rate=tax_rate,
        updated_at=utcnow(),
        **customer,
    )
    invoices[index] = updated
    repo.save_invoices(invoices)
    return updated


def set_invoice_status(*, user_id: str, invoice_id: str, status: str) -> Invoice:
    """
    Change status. Unconstrained unless STRICT_INVOICE_TRANSITIONS is set.

    Raises:
        ValidationError: unknown status
        InvalidTransitionError: strict mode rejected the change
        NotFoundError: invoice_id is not in the user's collection
    """
    validate_status(status)
    repo = user_repository(user_id)
    invoices = repo.load_invoices()
    index = _find(invoices, invoice_id)
    existing = invoices[index]

    require_transition(
        existing.status,
        status,
        strict=bool(current_app.config.get("STRICT_INVOICE_TRANSITIONS", False)),
    )

    updated = existing.with_changes(status=status, updated_at=utcnow())
    invoices[index] = updated
    repo.save_invoices(invoices)
    return updated


def delete_invoice(*, user_id: str, invoice_id: str) -> None:
    """Remove an invoice. Products and customers are not touched."""
    repo = user_repository(user_id)
    invoices = repo.load_invoices()
    _find(invoices, invoice_id)
    repo.save_invoices([inv for inv in invoices if inv.id != invoice_id])
