from __future__ import annotations

from ..extensions import db
from shopdesk.time_utils import to_utc_z


class KeyValueEntry(db.Model):
    """
    One serialized collection per row.

    Keys look like "products_<user_id>"; value is a JSON array of entities.
    A missing row means "never written", which is different from an empty
    array (seeding relies on that distinction).
    """
    __tablename__ = "kv_entries"
    __table_args__ = (
        db.UniqueConstraint("key", name="uq_kv_entries_key"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(255), nullable=False, index=True)
    value = db.Column(db.Text, nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "key": self.key,
            "value": self.value,
            "updated_at": to_utc_z(self.updated_at),
        }


class InvoiceSequence(db.Model):
    """
    Atomic per-user invoice number sequence.

    WHY: invoice numbers derived from the collection size repeat after a
    delete; a persisted counter never hands out the same number twice.
    """
    __tablename__ = "invoice_sequences"
    __table_args__ = (
        db.UniqueConstraint("user_id", name="uq_invoice_sequences_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), nullable=False, index=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "next_number": self.next_number,
            "updated_at": to_utc_z(self.updated_at),
        }
