"""
EthicalTrace 32-byte hashes.

Evidence, verification and response hashes are fixed 32-byte values.
The all-zero value is the explicit "absent hash" sentinel; it is a real
value, distinct from a caller not supplying a hash at all.
"""

import hashlib
from typing import Any, Union

from .canonicalization import canonicalize
from .validation import ValidationError, validate_hex

HASH_SIZE = 32

ZERO_HASH = bytes(HASH_SIZE)


def to_hash32(value: Union[bytes, str], field_name: str = "hash") -> bytes:
    """
    Coerce a 32-byte hash from bytes or hex text.

    Accepts raw bytes of length 32 or 64 hex characters with or without
    a 0x prefix.

    Raises:
        ValidationError: If the value is not exactly 32 bytes
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != HASH_SIZE:
            raise ValidationError(field_name, f"must be {HASH_SIZE} bytes")
        return bytes(value)

    digits = validate_hex(value, field_name, expected_length=HASH_SIZE * 2)
    return bytes.fromhex(digits)


def hash_hex(value: bytes) -> str:
    """Render a 32-byte hash as 0x-prefixed lowercase hex."""
    return "0x" + value.hex()


def is_zero_hash(value: bytes) -> bool:
    return value == ZERO_HASH


def evidence_hash(data: Union[bytes, str]) -> bytes:
    """SHA-256 of an evidence document's bytes."""
    if isinstance(data, str):
        data = data.encode('utf-8')
    return hashlib.sha256(data).digest()


def evidence_hash_json(document: Any) -> bytes:
    """SHA-256 of a JSON evidence document in canonical form."""
    return evidence_hash(canonicalize(document))
