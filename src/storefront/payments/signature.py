"""Gateway callback signatures.

A callback is authentic when its signature equals
HMAC-SHA256(secret, "<gateway_order_id>|<gateway_payment_id>") as hex. The
secret never leaves the server; the comparison is constant-time.
"""

import hashlib
import hmac
import os

_DEVELOPMENT_SECRET = "storefront-development-secret"


def signing_secret() -> str:
    """The shared gateway secret; a fixed development secret outside production."""
    secret = os.environ.get("RAZORPAY_KEY_SECRET")
    if secret:
        return secret
    if os.environ.get("PROTEAN_ENV") == "production":
        raise RuntimeError("RAZORPAY_KEY_SECRET must be set in production")
    return _DEVELOPMENT_SECRET


def compute_signature(gateway_order_id: str, gateway_payment_id: str, secret: str | None = None) -> str:
    message = f"{gateway_order_id}|{gateway_payment_id}".encode()
    key = (secret or signing_secret()).encode()
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def signature_matches(
    gateway_order_id: str,
    gateway_payment_id: str,
    signature: str | None,
    secret: str | None = None,
) -> bool:
    if not signature:
        return False
    expected = compute_signature(gateway_order_id, gateway_payment_id, secret)
    return hmac.compare_digest(expected.encode(), signature.encode())
