# Overview: Service-layer operations for identifiers; entity ids and invoice numbers.

from __future__ import annotations

import re
import uuid
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import InvoiceSequence
from .collection_service import PersistenceError


INVOICE_PREFIX = "INV"
INVOICE_NUMBER_RE = re.compile(r"^INV-\d{6}-(\d+)$")


class DocumentSequenceError(Exception):
    """Raised when document sequence operations fail."""
    pass


def new_entity_id() -> str:
    """
    Time-based unique token for products, customers, invoices and lines.

    uuid1 embeds the timestamp plus a clock sequence, so two ids minted in the
    same millisecond still differ.
    """
    return uuid.uuid1().hex


def format_invoice_number(now: datetime, seq: int, pad: int = 4) -> str:
    return f"{INVOICE_PREFIX}-{now.year:04d}{now.month:02d}-{seq:0{pad}d}"


def generate_invoice_number(existing_invoices, now: datetime) -> str:
    """
    Count-based number: INV-{YYYY}{MM}-{count+1:04d}.

    Only unique for a single writer that never deletes invoices; create paths
    use next_invoice_number() instead.
    """
    return format_invoice_number(now, len(existing_invoices) + 1)


def _highest_suffix(existing_invoices) -> int:
    highest = 0
    for invoice in existing_invoices:
        match = INVOICE_NUMBER_RE.match(invoice.invoice_number or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def next_invoice_number(*, user_id: str, existing_invoices, now: datetime) -> str:
    """
    Atomically allocate the next invoice number for a user.

    The per-user counter starts one past whatever the collection already
    holds (its size or the highest numeric suffix, whichever is larger), so
    numbers from seeded or imported invoices are never handed out again.
    """
    if not user_id:
        raise DocumentSequenceError("user_id is required")

    stmt = (
        update(InvoiceSequence)
        .where(InvoiceSequence.user_id == user_id)
        .values(next_number=InvoiceSequence.next_number + 1)
        .execution_options(synchronize_session=False)
    )

    def _current() -> int:
        return (
            db.session.query(InvoiceSequence.next_number)
            .filter_by(user_id=user_id)
            .scalar()
        )

    try:
        result = db.session.execute(stmt)
        if result.rowcount:
            db.session.flush()
            next_num = _current() - 1
        else:
            start = max(len(existing_invoices), _highest_suffix(existing_invoices)) + 1
            seq = InvoiceSequence(user_id=user_id, next_number=start + 1)
            db.session.add(seq)
            try:
                db.session.flush()
                next_num = start
            except IntegrityError:
                db.session.rollback()
                result = db.session.execute(stmt)
                if not result.rowcount:
                    raise
                db.session.flush()
                next_num = _current() - 1
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceError("Failed to allocate invoice number") from exc

    return format_invoice_number(now, next_num)
