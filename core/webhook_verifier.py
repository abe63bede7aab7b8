"""
Webhook signature verification.

The provider signs the exact raw request body with HMAC-SHA256 under the
shared webhook secret and sends the hex digest in a header. This check is
the only thing standing between a forged "invoice paid" event and the
status store, so it compares full decoded byte buffers in constant time.
"""

import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="


def _compute_digest(raw_body: bytes, secret: str) -> bytes:
    """HMAC-SHA256 of the raw body."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()


def sign(raw_body: bytes, secret: str) -> str:
    """Hex signature the provider is expected to send for raw_body."""
    return _compute_digest(raw_body, secret).hex()


def verify(raw_body: bytes, provided_signature: str | None, secret: str) -> bool:
    """
    Check a webhook signature.

    Args:
        raw_body: Request body exactly as received, before any JSON parsing
        provided_signature: Hex digest from the signature header; a leading
            'sha256=' (BTCPay style) is accepted
        secret: Shared webhook secret

    Returns:
        True only if the signature matches. Missing or non-hex signatures
        return False; a missing signature returns before any hashing.

    Raises:
        ValueError: If secret is empty (configuration error, not a bad request)
    """
    if not provided_signature:
        return False
    if not secret:
        raise ValueError("webhook secret is required")

    signature = provided_signature.strip()
    if signature.lower().startswith(SIGNATURE_PREFIX):
        signature = signature[len(SIGNATURE_PREFIX):]

    try:
        provided = bytes.fromhex(signature)
    except ValueError:
        logger.warning("Webhook signature is not valid hex")
        return False

    expected = _compute_digest(raw_body, secret)
    return hmac.compare_digest(expected, provided)
