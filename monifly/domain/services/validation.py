"""Domain validation helpers.

Each helper returns the normalized value or raises ``ValidationError``.
"""

from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum

from monifly.domain.errors import ValidationError
from monifly.domain.services.normalization import normalize_currency_code
from monifly.utils.decimal_utils import coerce_decimal


def require_text(value: str | None, field: str) -> str:
    """Return the trimmed value, rejecting empty strings."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} must not be empty")
    return cleaned


def require_amount(value, field: str, *, allow_zero: bool = True) -> Decimal:
    """Parse a non-negative finite amount.

    Args:
        value: Raw amount (Decimal, int, float or numeric string).
        field: Field name used in error messages.
        allow_zero: Whether zero is accepted.

    Returns:
        Decimal: Parsed amount.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required")
    try:
        amount = coerce_decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field} is not a number: {value!r}") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be finite")
    if amount < 0:
        raise ValidationError(f"{field} must not be negative: {amount}")
    if amount == 0 and not allow_zero:
        raise ValidationError(f"{field} must be greater than zero")
    return amount


def require_signed_amount(value, field: str) -> Decimal:
    """Parse a finite amount that may be negative (balances)."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required")
    try:
        amount = coerce_decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field} is not a number: {value!r}") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be finite")
    return amount


def require_currency(code: str | None, known: Iterable[str]) -> str:
    """Return the normalized code when it is a recognized currency."""
    normalized = normalize_currency_code(code)
    if normalized is None:
        raise ValidationError("currency must not be empty")
    if normalized not in known:
        raise ValidationError(f"Unrecognized currency code: {code}")
    return normalized


def require_day_of_month(value) -> int:
    """Return the day of month when it is an integer in [1, 31]."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"day_of_month must be an integer: {value!r}")
    if not 1 <= value <= 31:
        raise ValidationError(f"day_of_month must be in [1, 31]: {value}")
    return value


def parse_iso_date(value, field: str = "date") -> date:
    """Parse an ISO-8601 date or timestamp into a calendar date.

    Timestamps such as ``2024-01-15T10:00:00.000Z`` keep only their date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must be an ISO-8601 date")
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        if "T" in raw or " " in raw:
            return datetime.fromisoformat(raw).date()
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError(f"{field} is not an ISO-8601 date: {value}") from exc


def parse_enum(enum_cls: type[Enum], value, field: str):
    """Return the enum member for a member or its raw value."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"{field} must be one of: {allowed} (got {value!r})"
        ) from exc


__all__ = [
    "require_text",
    "require_amount",
    "require_signed_amount",
    "require_currency",
    "require_day_of_month",
    "parse_iso_date",
    "parse_enum",
]
