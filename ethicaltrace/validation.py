"""
Input validation for EthicalTrace.

Malformed inputs are programming errors, not domain outcomes: they raise
ValidationError before any store state is read or written.
"""

import re
from typing import Any

MAX_ID_LENGTH = 64

HEX_PATTERN = re.compile(r'^[a-fA-F0-9]+$')


class ValidationError(ValueError):
    """Raised when input validation fails."""
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


def validate_identifier(value: Any, field_name: str) -> str:
    """
    Validate a record identifier or caller identity.

    Identifiers are non-empty strings of at most MAX_ID_LENGTH characters.
    """
    if not isinstance(value, str):
        raise ValidationError(field_name, "must be a string")

    if not value:
        raise ValidationError(field_name, "cannot be empty")

    if len(value) > MAX_ID_LENGTH:
        raise ValidationError(field_name, f"must not exceed {MAX_ID_LENGTH} characters")

    return value


def validate_uint(value: Any, field_name: str) -> int:
    """Validate an unsigned integer (bools are rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field_name, "must be an integer")

    if value < 0:
        raise ValidationError(field_name, "must not be negative")

    return value


def validate_hex(value: str, field_name: str, expected_length: int) -> str:
    """
    Validate a hexadecimal string, with or without a 0x prefix.

    Returns:
        The lowercased hex digits without prefix
    """
    if not isinstance(value, str):
        raise ValidationError(field_name, "must be a string")

    value = value.strip().lower()
    if value.startswith("0x"):
        value = value[2:]

    if not value or not HEX_PATTERN.match(value):
        raise ValidationError(field_name, "must be valid hexadecimal")

    if len(value) != expected_length:
        raise ValidationError(field_name, f"must be {expected_length} hex characters")

    return value
