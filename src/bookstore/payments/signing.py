"""HMAC-SHA256 webhook signatures, hex encoded."""

import hashlib
import hmac


def sign(payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def signature_matches(payload: bytes, signature: str, secret: str) -> bool:
    if not signature or not secret:
        return False
    return hmac.compare_digest(sign(payload, secret), signature)
