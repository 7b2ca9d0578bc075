# backend/shopdesk/services/products_service.py
"""
Products Service (inventory)

MULTI-USER: Every operation works on one user's products collection only;
the user_id picks the repository and stamps new records.

Numeric fields are parsed and validated (validation.FieldPolicy) before they
reach a Product: price/cost must be non-negative amounts, stock/minStock
non-negative integers. Anything else is a ValidationError naming the field.
"""
from __future__ import annotations

from dataclasses import replace

from ..models import Product
from ..validation import FieldPolicy, NotFoundError, validate_payload
from shopdesk.time_utils import utcnow
from .document_service import new_entity_id
from .seed_service import user_repository

PRODUCT_POLICY = FieldPolicy(
    writable_fields={"name", "description", "category", "price", "cost", "stock", "minStock", "barcode"},
    required_on_create={"name", "category", "price", "cost", "stock", "minStock"},
    money_fields={"price", "cost"},
    count_fields={"stock", "minStock"},
)

# Payload keys that differ from Product attribute names
PRODUCT_ATTRS = {"minStock": "min_stock"}


def _attrs(patch: dict) -> dict:
    return {PRODUCT_ATTRS.get(k, k): v for k, v in patch.items()}


def _find(products: list[Product], product_id: str) -> int:
    for index, product in enumerate(products):
        if product.id == product_id:
            return index
    raise NotFoundError(f"Product {product_id} not found")


def matches_search(product: Product, search: str | None) -> bool:
    if not search:
        return True
    term = search.lower()
    return (
        term in product.name.lower()
        or (product.description is not None and term in product.description.lower())
        or (product.barcode is not None and search in product.barcode)
    )


def list_products(
    user_id: str,
    search: str | None = None,
    category: str | None = None,
) -> list[Product]:
    """
    Products in stored order, optionally filtered.

    Args:
        search: case-insensitive match on name/description, substring match on barcode
        category: exact category, or None/"all" for every category
    """
    products = user_repository(user_id).load_products()
    return [
        p for p in products
        if matches_search(p, search) and (category in (None, "", "all") or p.category == category)
    ]


def list_categories(user_id: str) -> list[str]:
    """Distinct categories in first-seen order."""
    seen: dict[str, None] = {}
    for product in user_repository(user_id).load_products():
        seen.setdefault(product.category, None)
    return list(seen)


def list_low_stock(user_id: str) -> list[Product]:
    return [p for p in user_repository(user_id).load_products() if p.is_low_stock]


def get_product(*, user_id: str, product_id: str) -> Product:
    products = user_repository(user_id).load_products()
    return products[_find(products, product_id)]


def create_product(*, user_id: str, payload: dict) -> Product:
    """
    Create product from raw input.

    Raises:
        ValidationError: missing/blank required fields or bad numbers
    """
    patch = validate_payload(payload=payload, policy=PRODUCT_POLICY, partial=False)
    repo = user_repository(user_id)
    products = repo.load_products()

    now = utcnow()
    product = Product(
        id=new_entity_id(),
        user_id=repo.user_id,
        created_at=now,
        updated_at=now,
        **_attrs(patch),
    )
    repo.save_products([*products, product])
    return product


def update_product(*, user_id: str, product_id: str, payload: dict) -> Product:
    """
    Merge the provided fields into an existing product.

    Raises:
        NotFoundError: product_id is not in the user's collection
        ValidationError: bad input
    """
    patch = validate_payload(payload=payload, policy=PRODUCT_POLICY, partial=True)
    repo = user_repository(user_id)
    products = repo.load_products()
    index = _find(products, product_id)

    updated = replace(products[index], **_attrs(patch), updated_at=utcnow())
    products[index] = updated
    repo.save_products(products)
    return updated


def delete_product(*, user_id: str, product_id: str) -> None:
    """
    Remove a product.

    Invoices that reference it keep their own snapshot of name and price,
    so nothing else changes.
    """
    repo = user_repository(user_id)
    products = repo.load_products()
    _find(products, product_id)
    repo.save_products([p for p in products if p.id != product_id])
