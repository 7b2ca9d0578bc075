# Overview: Service-layer operations for the per-user entity collections; wraps the key-value table.

"""
Entity Store: per-user collections persisted as JSON arrays.

WHY: Every screen works on whole collections (read all, change in memory,
write all back). Keeping one serialized array per (collection, user) makes
that model explicit and keeps users strictly apart: every key is built here
from the repository's user_id and nowhere else.

CONSISTENCY MODEL:
- Single writer per user; last write wins (no merge, no version check)
- save() replaces the full collection in one commit, so a reader sees either
  the old array or the new one, never a mix
- A missing key ("never written") is different from an empty array; seeding
  depends on that

LOAD RESULTS:
    ok      -> the key exists and decoded cleanly
    empty   -> the key does not exist
    corrupt -> the key exists but is not a valid array of entities
Callers of read() choose what to do with corrupt data. The load_* helpers
follow CORRUPT_DATA_POLICY ("empty" falls back to [], "raise" raises).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import InvalidOperation
from typing import Any

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import KeyValueEntry, Product, Customer, Invoice
from ..validation import ValidationError


COLLECTIONS = ("products", "customers", "invoices")

ENTITY_TYPES = {
    "products": Product,
    "customers": Customer,
    "invoices": Invoice,
}

LOAD_OK = "ok"
LOAD_EMPTY = "empty"
LOAD_CORRUPT = "corrupt"


class PersistenceError(Exception):
    """Raised when the key-value store cannot be read or written."""


class CorruptDataError(PersistenceError):
    """Raised when a stored collection exists but cannot be decoded."""


@dataclass
class LoadResult:
    status: str
    entities: list = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == LOAD_OK


def storage_key(collection: str, user_id: str) -> str:
    """Key layout shared with the browser client: {collection}_{userId}."""
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection '{collection}'. Must be one of: {', '.join(COLLECTIONS)}")
    return f"{collection}_{user_id}"


def _read_raw(key: str) -> str | None:
    try:
        row = db.session.query(KeyValueEntry).filter_by(key=key).first()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceError(f"Failed to read {key}") from exc
    if row is None:
        return None
    return row.value


def _write_raw(key: str, value: str) -> None:
    try:
        row = db.session.query(KeyValueEntry).filter_by(key=key).first()
        if row is None:
            row = KeyValueEntry(key=key, value=value)
            db.session.add(row)
        else:
            row.value = value
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceError(f"Failed to write {key}") from exc


def _decode(collection: str, raw: str | None) -> list:
    """Raises ValueError (or a subclass) for anything that is not a clean entity array."""
    payload: Any = json.loads(raw) if raw is not None else None
    if not isinstance(payload, list):
        raise ValueError("stored value is not a JSON array")
    entity_type = ENTITY_TYPES[collection]
    try:
        return [entity_type.from_dict(item) for item in payload]
    except (KeyError, TypeError, AttributeError, InvalidOperation) as exc:
        raise ValueError(f"malformed {collection} record: {exc}") from exc


class EntityRepository:
    """
    Typed access to one user's collections.

    MULTI-USER: A repository is bound to a single user_id at construction;
    it has no way to address another user's keys.
    """

    def __init__(self, user_id: str):
        user_id = str(user_id).strip() if user_id is not None else ""
        if not user_id:
            raise ValidationError("user_id is required")
        self.user_id = user_id

    def key(self, collection: str) -> str:
        return storage_key(collection, self.user_id)

    def exists(self, collection: str) -> bool:
        return _read_raw(self.key(collection)) is not None

    def read(self, collection: str) -> LoadResult:
        raw = _read_raw(self.key(collection))
        if raw is None:
            return LoadResult(status=LOAD_EMPTY)
        try:
            return LoadResult(status=LOAD_OK, entities=_decode(collection, raw))
        except ValueError as exc:
            return LoadResult(status=LOAD_CORRUPT, error=str(exc))

    def load(self, collection: str) -> list:
        result = self.read(collection)
        if result.status == LOAD_CORRUPT:
            current_app.logger.warning(
                "Unreadable %s collection for user %s: %s",
                collection, self.user_id, result.error,
            )
            if current_app.config.get("CORRUPT_DATA_POLICY", "empty") == "raise":
                raise CorruptDataError(f"Stored {collection} data is unreadable")
        return list(result.entities)

    def save(self, collection: str, entities) -> None:
        """Overwrite the whole collection."""
        entity_type = ENTITY_TYPES[collection]
        items = list(entities)
        for entity in items:
            if not isinstance(entity, entity_type):
                raise TypeError(f"{collection} accepts {entity_type.__name__} only")
        payload = json.dumps([entity.to_dict() for entity in items])
        _write_raw(self.key(collection), payload)

    # Typed helpers

    def load_products(self) -> list[Product]:
        return self.load("products")

    def save_products(self, products) -> None:
        self.save("products", products)

    def load_customers(self) -> list[Customer]:
        return self.load("customers")

    def save_customers(self, customers) -> None:
        self.save("customers", customers)

    def load_invoices(self) -> list[Invoice]:
        return self.load("invoices")

    def save_invoices(self, invoices) -> None:
        self.save("invoices", invoices)

    def dump(self, collection: str) -> list[dict]:
        """Raw JSON-ready view of a collection (CLI / debugging)."""
        return [entity.to_dict() for entity in self.load(collection)]
