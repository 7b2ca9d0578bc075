from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any


# Maximum price: $9,999,999.99
# This prevents nonsensical prices from reaching invoices and revenue totals
MAX_PRICE = Decimal("9999999.99")
CENT = Decimal("0.01")


class ValidationError(ValueError):
    """400-level input problem."""


class NotFoundError(LookupError):
    """404-level: an id that is not present in the user's collection."""


@dataclass(frozen=True)
class FieldPolicy:
    """
    Central policy layer for one entity type:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required on create
    - money_fields / count_fields: numeric fields parsed and validated
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    money_fields: set[str] = None  # type: ignore
    count_fields: set[str] = None  # type: ignore


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half-up (what a cashier would do by hand)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_money(field: str, value: Any) -> Decimal:
    """
    Parse a non-negative currency amount.

    Accepts numbers and numeric strings ("12.99", " 8.5 ").
    Rejects booleans, blanks, NaN/Infinity, negatives and amounts over MAX_PRICE.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")

    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"{field} must be a finite number")
        value = repr(value)

    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValidationError(f"{field} must be a number")

    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")
    if amount > MAX_PRICE:
        raise ValidationError(f"{field} cannot exceed {MAX_PRICE}")

    return round_money(amount)


def parse_count(field: str, value: Any, *, minimum: int = 0) -> int:
    """
    Parse an integer count (stock levels, quantities).

    Integers - strict validation to reject floats and scientific notation.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            number = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    elif isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{field} must be an integer")

    if number < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    return number


def parse_percent(field: str, value: Any) -> Decimal:
    """Tax rates: non-negative, at most 100, not rounded to cents."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"{field} must be a finite number")
        value = repr(value)
    if isinstance(value, str):
        value = value.strip()
    try:
        rate = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not rate.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if rate < 0 or rate > 100:
        raise ValidationError(f"{field} must be between 0 and 100")
    return rate


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip()


def validate_payload(*, payload: Any, policy: FieldPolicy, partial: bool) -> dict:
    """
    Validates + normalizes incoming JSON against a policy.
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    money = policy.money_fields or set()
    counts = policy.count_fields or set()

    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")

    patch: dict = {}
    for k, raw in payload.items():
        if k in money:
            patch[k] = parse_money(k, raw)
        elif k in counts:
            patch[k] = parse_count(k, raw)
        else:
            val = _clean_text(raw)
            if k in required and not val:
                raise ValidationError(f"{k} cannot be blank")
            # Optional text fields: blank means "not set"
            patch[k] = val or None

    return patch
