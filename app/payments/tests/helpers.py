"""
Helpers for building signed Stripe webhook requests in tests.
"""

import hashlib
import hmac
import time

WEBHOOK_SECRET = "whsec_test_checkout"


def sign_payload(
    payload: bytes,
    secret: str = WEBHOOK_SECRET,
    timestamp: int | None = None,
) -> str:
    """Build a Stripe-Signature header for `payload`."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"
    signature = hmac.new(
        secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"
