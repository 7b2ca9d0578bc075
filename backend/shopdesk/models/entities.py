from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Literal

from shopdesk.time_utils import parse_iso_datetime, to_utc_z


InvoiceStatus = Literal["draft", "sent", "paid", "overdue"]
INVOICE_STATUSES = ("draft", "sent", "paid", "overdue")


def _money(value) -> Decimal:
    # str() first so floats read back from JSON keep their printed digits
    return Decimal(str(value))


def _money_out(value: Decimal) -> float:
    return float(value)


def _required_dt(value) -> datetime:
    dt = parse_iso_datetime(value)
    if dt is None:
        raise ValueError("timestamp is required")
    return dt


@dataclass(frozen=True)
class Product:
    """
    A sellable item in the user's inventory.

    price and cost are independent (no price >= cost rule); margin is derived.
    """
    id: str
    name: str
    category: str
    price: Decimal
    cost: Decimal
    stock: int
    min_stock: int
    user_id: str
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    barcode: str | None = None

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock

    @property
    def margin(self) -> Decimal:
        return self.price - self.cost

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": _money_out(self.price),
            "cost": _money_out(self.cost),
            "stock": self.stock,
            "minStock": self.min_stock,
            "userId": self.user_id,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
        if self.description is not None:
            data["description"] = self.description
        if self.barcode is not None:
            data["barcode"] = self.barcode
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            category=data["category"],
            price=_money(data["price"]),
            cost=_money(data["cost"]),
            stock=int(data["stock"]),
            min_stock=int(data["minStock"]),
            user_id=str(data["userId"]),
            created_at=_required_dt(data["createdAt"]),
            updated_at=_required_dt(data["updatedAt"]),
            description=data.get("description"),
            barcode=data.get("barcode"),
        )


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    user_id: str
    created_at: datetime
    updated_at: datetime
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "userId": self.user_id,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
        for key in ("email", "phone", "address"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Customer":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            user_id=str(data["userId"]),
            created_at=_required_dt(data["createdAt"]),
            updated_at=_required_dt(data["updatedAt"]),
            email=data.get("email"),
            phone=data.get("phone"),
            address=data.get("address"),
        )


@dataclass(frozen=True)
class InvoiceItem:
    """
    A line on an invoice.

    SNAPSHOT: product_name and price are copied from the product when the line
    is added. product_id is kept for reference only; later product edits or
    deletes never change this line.
    """
    id: str
    product_id: str
    product_name: str
    quantity: int
    price: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "price": _money_out(self.price),
            "total": _money_out(self.total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InvoiceItem":
        return cls(
            id=str(data["id"]),
            product_id=str(data["productId"]),
            product_name=data["productName"],
            quantity=int(data["quantity"]),
            price=_money(data["price"]),
            total=_money(data["total"]),
        )


@dataclass(frozen=True)
class Invoice:
    """
    An invoice with denormalized customer and product data.

    SNAPSHOT: customer_* fields are copied when the invoice is created or
    edited. customer_id is a weak reference; deleting the customer leaves the
    invoice as a historical record.

    tax is an absolute amount, not a rate.
    """
    id: str
    invoice_number: str
    customer_name: str
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    status: InvoiceStatus
    user_id: str
    created_at: datetime
    updated_at: datetime
    items: tuple[InvoiceItem, ...] = field(default_factory=tuple)
    customer_id: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    customer_address: str | None = None
    tax_rate: Decimal | None = None

    @property
    def implied_tax_rate(self) -> Decimal:
        """
        Tax rate (percent) the invoice was priced at.

        Invoices written before tax_rate was stored only carry the rounded tax
        amount, so the rate is recovered from it and rounded to 2 places.
        """
        if self.tax_rate is not None:
            return self.tax_rate
        if not self.subtotal:
            return Decimal("0")
        return (self.tax / self.subtotal * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def with_changes(self, **changes) -> "Invoice":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "invoiceNumber": self.invoice_number,
            "customerName": self.customer_name,
            "items": [item.to_dict() for item in self.items],
            "subtotal": _money_out(self.subtotal),
            "tax": _money_out(self.tax),
            "total": _money_out(self.total),
            "status": self.status,
            "userId": self.user_id,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
        optional = {
            "customerId": self.customer_id,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "customerAddress": self.customer_address,
            "taxRate": None if self.tax_rate is None else _money_out(self.tax_rate),
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Invoice":
        status = data["status"]
        if status not in INVOICE_STATUSES:
            raise ValueError(f"unknown invoice status {status!r}")
        return cls(
            id=str(data["id"]),
            invoice_number=data["invoiceNumber"],
            customer_name=data["customerName"],
            items=tuple(InvoiceItem.from_dict(item) for item in data["items"]),
            subtotal=_money(data["subtotal"]),
            tax=_money(data["tax"]),
            total=_money(data["total"]),
            status=status,
            user_id=str(data["userId"]),
            created_at=_required_dt(data["createdAt"]),
            updated_at=_required_dt(data["updatedAt"]),
            customer_id=data.get("customerId"),
            customer_email=data.get("customerEmail"),
            customer_phone=data.get("customerPhone"),
            customer_address=data.get("customerAddress"),
            tax_rate=None if data.get("taxRate") is None else _money(data["taxRate"]),
        )
