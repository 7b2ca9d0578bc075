# Overview: Service-layer operations for customers; create, edit, delete and search.

from __future__ import annotations

from dataclasses import replace

from ..models import Customer
from ..validation import FieldPolicy, NotFoundError, validate_payload
from shopdesk.time_utils import utcnow
from .document_service import new_entity_id
from .seed_service import user_repository

# No uniqueness on email or phone: two customers may share contact details
CUSTOMER_POLICY = FieldPolicy(
    writable_fields={"name", "email", "phone", "address"},
    required_on_create={"name"},
)


def _find(customers: list[Customer], customer_id: str) -> int:
    for index, customer in enumerate(customers):
        if customer.id == customer_id:
            return index
    raise NotFoundError(f"Customer {customer_id} not found")


def matches_search(customer: Customer, search: str | None) -> bool:
    if not search:
        return True
    term = search.lower()
    return (
        term in customer.name.lower()
        or (customer.email is not None and term in customer.email.lower())
        or (customer.phone is not None and search in customer.phone)
    )


def list_customers(user_id: str, search: str | None = None) -> list[Customer]:
    customers = user_repository(user_id).load_customers()
    return [c for c in customers if matches_search(c, search)]


def get_customer(*, user_id: str, customer_id: str) -> Customer:
    customers = user_repository(user_id).load_customers()
    return customers[_find(customers, customer_id)]


def create_customer(*, user_id: str, payload: dict) -> Customer:
    patch = validate_payload(payload=payload, policy=CUSTOMER_POLICY, partial=False)
    repo = user_repository(user_id)
    customers = repo.load_customers()

    now = utcnow()
    customer = Customer(
        id=new_entity_id(),
        user_id=repo.user_id,
        created_at=now,
        updated_at=now,
        **patch,
    )
    repo.save_customers([*customers, customer])
    return customer


def update_customer(*, user_id: str, customer_id: str, payload: dict) -> Customer:
    patch = validate_payload(payload=payload, policy=CUSTOMER_POLICY, partial=True)
    repo = user_repository(user_id)
    customers = repo.load_customers()
    index = _find(customers, customer_id)

    updated = replace(customers[index], **patch, updated_at=utcnow())
    customers[index] = updated
    repo.save_customers(customers)
    return updated


def delete_customer(*, user_id: str, customer_id: str) -> None:
    """Remove a customer. Existing invoices keep their copied contact details."""
    repo = user_repository(user_id)
    customers = repo.load_customers()
    _find(customers, customer_id)
    repo.save_customers([c for c in customers if c.id != customer_id])
