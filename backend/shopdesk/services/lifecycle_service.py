# Overview: Invoice status rules; which status may follow which.

"""
Invoice Status Lifecycle

STATUSES:
    draft    - being prepared, freely editable
    sent     - delivered to the customer, awaiting payment
    paid     - settled; counts toward revenue
    overdue  - sent and past due

DEFAULT MODE (STRICT_INVOICE_TRANSITIONS = False):
    Any status may follow any other. This is how the shop has always worked:
    staff correct mistakes by simply picking the right status.

STRICT MODE (STRICT_INVOICE_TRANSITIONS = True):
    draft   -> sent
    sent    -> paid | overdue
    overdue -> paid
    Setting the status an invoice already has is always accepted.

Only "paid" affects revenue (see reporting_service).
"""

from __future__ import annotations

from ..validation import ValidationError


VALID_STATUSES = {"draft", "sent", "paid", "overdue"}

STRICT_TRANSITIONS = {
    ("draft", "sent"),
    ("sent", "paid"),
    ("sent", "overdue"),
    ("overdue", "paid"),
}


class InvalidTransitionError(ValidationError):
    """
    Raised when strict mode rejects a status change.

    This is a domain error, not a technical error.
    """
    pass


def validate_status(status: str) -> None:
    """
    Raises:
        ValidationError: If status is not in VALID_STATUSES
    """
    if not isinstance(status, str) or status not in VALID_STATUSES:
        raise ValidationError(
            f"Invalid status '{status}'. Must be one of: {', '.join(sorted(VALID_STATUSES))}"
        )


def can_transition(from_status: str, to_status: str, *, strict: bool = False) -> bool:
    validate_status(from_status)
    validate_status(to_status)

    if not strict or from_status == to_status:
        return True

    return (from_status, to_status) in STRICT_TRANSITIONS


def require_transition(from_status: str, to_status: str, *, strict: bool = False) -> None:
    if not can_transition(from_status, to_status, strict=strict):
        raise InvalidTransitionError(
            f"Cannot change invoice status from '{from_status}' to '{to_status}'"
        )
