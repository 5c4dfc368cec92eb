"""
Caller authentication for the EthicalTrace service.

On a ledger the transaction signature establishes the caller. Here the
caller is named by the X-Caller header. With signed calls enabled the
header must be a base64 Ed25519 public key and X-Signature must sign the
canonical JSON of {caller, method, path, issued_at, body}, where
issued_at (X-Issued-At) lies inside the freshness window.
"""

import base64
import binascii
from typing import Any, Dict, Optional

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from ethicaltrace import ValidationError, canonicalize
from ethicaltrace.validation import validate_identifier

CALLER_HEADER = "x-caller"
SIGNATURE_HEADER = "x-signature"
ISSUED_AT_HEADER = "x-issued-at"


class CallerAuthError(Exception):
    """Raised when a request does not establish a caller identity."""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode('ascii')


def b64d(s: str) -> bytes:
    return base64.b64decode(s.encode('ascii'), validate=True)


def signed_call_payload(
    caller: str,
    method: str,
    path: str,
    issued_at: int,
    body: Optional[Dict[str, Any]]
) -> bytes:
    """Canonical bytes a caller signs for one request."""
    return canonicalize({
        "caller": caller,
        "method": method.upper(),
        "path": path,
        "issued_at": issued_at,
        "body": body or {}
    })


def verify_ed25519(signature_b64: str, payload: bytes, public_key_b64: str) -> bool:
    """Verify an Ed25519 signature. Malformed keys or signatures fail closed."""
    try:
        vk = VerifyKey(b64d(public_key_b64))
        vk.verify(payload, b64d(signature_b64))
        return True
    except (BadSignatureError, binascii.Error, ValueError, TypeError):
        return False


def sign_call(
    signing_key: SigningKey,
    method: str,
    path: str,
    issued_at: int,
    body: Optional[Dict[str, Any]] = None
) -> Dict[str, str]:
    """Build the authentication headers for a signed call."""
    caller = b64e(bytes(signing_key.verify_key))
    payload = signed_call_payload(caller, method, path, issued_at, body)
    return {
        "X-Caller": caller,
        "X-Signature": b64e(signing_key.sign(payload).signature),
        "X-Issued-At": str(issued_at),
    }


def authenticate_caller(
    headers: Dict[str, str],
    method: str,
    path: str,
    body: Optional[Dict[str, Any]],
    now_epoch: int,
    require_signature: bool,
    freshness_seconds: int
) -> str:
    """
    Establish the caller identity of a request.

    Raises:
        CallerAuthError: If the caller is missing or the signature check fails
    """
    caller = headers.get(CALLER_HEADER, "")
    try:
        validate_identifier(caller, "caller")
    except ValidationError as e:
        raise CallerAuthError(f"MISSING_OR_INVALID_CALLER ({e.message})")

    if not require_signature:
        return caller

    signature = headers.get(SIGNATURE_HEADER, "")
    if not signature:
        raise CallerAuthError("MISSING_SIGNATURE")

    try:
        issued_at = int(headers.get(ISSUED_AT_HEADER, "0"))
    except ValueError:
        raise CallerAuthError("INVALID_ISSUED_AT")
    if issued_at <= 0:
        raise CallerAuthError("MISSING_ISSUED_AT")

    if abs(now_epoch - issued_at) > freshness_seconds:
        raise CallerAuthError("STALE_SIGNATURE")

    payload = signed_call_payload(caller, method, path, issued_at, body)
    if not verify_ed25519(signature, payload, caller):
        raise CallerAuthError("INVALID_SIGNATURE")

    return caller
