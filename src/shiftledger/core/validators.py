# File: src/shiftledger/core/validators.py
"""Reusable validation utilities for amounts and free text."""

import re
from decimal import Decimal, InvalidOperation

from shiftledger.core.errors import ValidationError

MAX_AMOUNT = Decimal("9999999999.99")


def validate_currency(value: Decimal | float | str, max_value: Decimal = MAX_AMOUNT) -> Decimal:
    """
    Validate a currency value.

    Args:
        value: Currency value to validate
        max_value: Maximum allowed value (matches NUMERIC(12, 2))

    Returns:
        Validated Decimal

    Raises:
        ValueError: If value is malformed, NaN, negative, too large or has >2 decimals
    """
    try:
        decimal_value = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid currency format: {value}") from e

    if not decimal_value.is_finite():
        raise ValueError(f"Invalid currency format: {value}")

    if decimal_value < 0:
        raise ValueError("Currency value cannot be negative")

    if decimal_value > max_value:
        raise ValueError(f"Currency value exceeds maximum allowed: {max_value}")

    if decimal_value.as_tuple().exponent < -2:
        raise ValueError("Currency value cannot have more than 2 decimal places")

    return decimal_value


def validate_positive_amount(value: Decimal | float | str) -> Decimal:
    """Currency value that must also be strictly greater than zero."""
    decimal_value = validate_currency(value)
    if decimal_value == 0:
        raise ValueError("Amount must be greater than zero")
    return decimal_value


def validate_cash_count(value: Decimal | float | str | None) -> Decimal:
    """Validate the operator's counted drawer cash.

    Raises:
        ValidationError: missing, NaN, malformed or negative amount
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(
            "Actual cash amount is required",
            details={"field": "actual_amount"},
        )
    try:
        return validate_currency(value)
    except ValueError as exc:
        raise ValidationError(
            str(exc),
            details={"field": "actual_amount", "value": str(value)},
        ) from exc


def sanitize_text(value: str | None, max_length: int = 500) -> str | None:
    """
    Strip HTML tags and surrounding whitespace from free text.

    Returns:
        Cleaned text, or None when nothing is left
    """
    if not value:
        return None

    cleaned = re.sub(r"<[^>]+>", "", value).strip()
    if not cleaned:
        return None
    if len(cleaned) > max_length:
        raise ValueError(f"Text cannot exceed {max_length} characters")
    return cleaned
