import hashlib
import hmac


def compute_signature(secret: str, message) -> str:
    """Hex HMAC-SHA256 of ``message`` (str or bytes) keyed with ``secret``."""
    if isinstance(message, str):
        message = message.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def signatures_match(expected: str, supplied: str) -> bool:
    if not supplied:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))


def payment_signature_message(order_id: str, payment_id: str) -> str:
    return f"{order_id}|{payment_id}"
