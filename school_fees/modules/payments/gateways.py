"""Mock payment gateway client and webhook signing."""

import hashlib
import hmac
import secrets

from school_fees.core.config import settings


def build_redirect_url(gateway: str, transaction_id: int) -> str:
    """Checkout URL the parent is sent to. No gateway is called."""
    return settings.payment_redirect_url_template.format(
        gateway=gateway, transaction_id=transaction_id
    )


def sign_payload(body: bytes, secret: str | None = None) -> str:
    """Hex HMAC-SHA256 of a raw webhook body."""
    key = secret if secret is not None else (settings.payment_webhook_secret or "")
    return hmac.new(key.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None) -> bool:
    """
    Check a webhook signature against the configured secret.

    Always fails when no secret is configured.
    """
    configured = (settings.payment_webhook_secret or "").strip()
    if not configured or not signature:
        return False
    expected = sign_payload(body, configured)
    return secrets.compare_digest(signature.strip().lower(), expected)
