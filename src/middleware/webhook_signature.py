"""Webhook authenticity checks for both providers.

All comparisons use hmac.compare_digest() (constant time).
"""

import hashlib
import hmac

FACEBOOK_SIGNATURE_HEADER = "X-Hub-Signature-256"
TELEGRAM_SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def verify_facebook_signature(
    body: bytes, signature_header: str | None, app_secret: str
) -> bool:
    """Verify Meta's X-Hub-Signature-256 header (``sha256=<hex hmac>``).

    Args:
        body: Raw request body bytes
        signature_header: Value of X-Hub-Signature-256
        app_secret: Facebook App secret

    Returns:
        True if signature is valid
    """
    if not signature_header or not signature_header.startswith("sha256="):
        return False

    expected = signature_header[len("sha256="):]
    computed = hmac.new(app_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(computed, expected)


def verify_telegram_secret(header_value: str | None, secret: str) -> bool:
    """Verify the secret_token Telegram echoes on every webhook delivery."""
    if not header_value:
        return False
    return hmac.compare_digest(header_value.encode("utf-8"), secret.encode("utf-8"))
