"""Verify the ``X-Hub-Signature-256`` header Facebook adds to webhook deliveries."""

import hashlib
import hmac

import logfire

SIGNATURE_PREFIX = "sha256="


def compute_signature(payload_body: bytes, app_secret: str) -> str:
    """Header value Facebook would send for ``payload_body``."""
    digest = hmac.new(app_secret.encode(), payload_body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_webhook_signature(
    payload_body: bytes,
    signature_header: str | None,
    app_secret: str,
) -> bool:
    """
    Check the HMAC-SHA256 of the raw request body against the header.

    Args:
        payload_body: Raw request body bytes
        signature_header: Value of the ``X-Hub-Signature-256`` header
        app_secret: Facebook App secret

    Returns:
        True if the signature matches, False otherwise
    """
    if not signature_header or not signature_header.startswith(SIGNATURE_PREFIX):
        logfire.warn("Webhook signature missing or malformed")
        return False

    is_valid = hmac.compare_digest(signature_header, compute_signature(payload_body, app_secret))
    if not is_valid:
        logfire.warn("Webhook signature mismatch")
    return is_valid
