"""Webhook request signature verification.

Facebook signs every webhook POST with the App Secret and sends the result
in the ``X-Hub-Signature`` header as ``sha1=<hexdigest>``. A request whose
header is absent is reported separately from one whose digest is wrong, so
callers can log the two cases apart before rejecting either.
"""

import hashlib
import hmac

from src.constants import SIGNATURE_METHOD


class SignatureError(Exception):
    """Base exception for signature verification failures."""

    pass


class MissingSignatureError(SignatureError):
    """Raised when the request carries no signature header."""

    pass


class InvalidSignatureError(SignatureError):
    """Raised when the signature does not match the request body."""

    pass


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def compute_signature(secret: str | bytes, raw_body: bytes) -> str:
    """Compute the HMAC-SHA1 hex digest of the raw request body."""
    return hmac.new(_as_bytes(secret), raw_body, hashlib.sha1).hexdigest()


def verify_signature(
    secret: str | bytes,
    raw_body: bytes,
    header_value: str | None,
) -> bool:
    """Check a ``<method>=<hexdigest>`` header against the request body.

    Args:
        secret: Facebook App secret
        raw_body: Request body exactly as received
        header_value: Value of the X-Hub-Signature header

    Returns:
        True if the digest matches, False for a wrong digest, an
        unsupported method or a malformed header

    Raises:
        MissingSignatureError: If the header is absent or empty
    """
    if not header_value:
        raise MissingSignatureError("Request has no signature header")

    method, sep, received = header_value.strip().partition("=")
    if not sep or method.lower() != SIGNATURE_METHOD or not received:
        return False

    expected = compute_signature(secret, raw_body)
    return hmac.compare_digest(received.encode("utf-8"), expected.encode("ascii"))


def require_valid_signature(
    secret: str | bytes,
    raw_body: bytes,
    header_value: str | None,
) -> None:
    """Raise unless the request signature is present and valid.

    Raises:
        MissingSignatureError: If the header is absent or empty
        InvalidSignatureError: If the digest does not match
    """
    if not verify_signature(secret, raw_body, header_value):
        raise InvalidSignatureError("Request signature does not match body")
