import logging
from typing import Any, Dict, Optional

import razorpay

from app.config import Settings
from app.utils.errors import InternalError
from app.utils.signature import (
    compute_signature,
    payment_signature_message,
    signatures_match,
)

logger = logging.getLogger(__name__)

MOCK_ORDER_PREFIX = "order_mock_"
FALLBACK_KEY_SECRET = "test-secret"


class PaymentGateway:
    """Operations the purchase flows need from the payment processor."""

    name = "base"

    def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        raise NotImplementedError

    def verify_payment_signature(
        self, order_id: str, payment_id: str, signature: str
    ) -> bool:
        raise NotImplementedError


class RazorpayGateway(PaymentGateway):
    name = "razorpay"

    def __init__(self, key_id: str, key_secret: str, client=None):
        self.key_id = key_id
        self.client = client or razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount, currency, receipt, notes=None):
        razorpay_order = self.client.order.create({
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        })
        return {
            "id": razorpay_order["id"],
            "amount": int(razorpay_order["amount"]),
            "currency": razorpay_order["currency"],
        }

    def verify_payment_signature(self, order_id, payment_id, signature):
        try:
            self.client.utility.verify_payment_signature({
                "razorpay_order_id": order_id,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
            })
        except razorpay.errors.SignatureVerificationError:
            return False
        return True


class MockGateway(PaymentGateway):
    """
    Stand-in used outside strict mode when Razorpay keys are missing.
    Orders are marked with ``order_mock_`` so they are never mistaken for real ones.
    """

    name = "mock"

    def __init__(self, key_secret: str = ""):
        self.key_secret = key_secret or FALLBACK_KEY_SECRET

    def create_order(self, amount, currency, receipt, notes=None):
        logger.warning(
            "Razorpay client not configured - using mock order for %s", receipt
        )
        return {
            "id": f"{MOCK_ORDER_PREFIX}{receipt}",
            "amount": amount,
            "currency": currency,
        }

    def sign(self, order_id: str, payment_id: str) -> str:
        return compute_signature(
            self.key_secret, payment_signature_message(order_id, payment_id)
        )

    def verify_payment_signature(self, order_id, payment_id, signature):
        return signatures_match(self.sign(order_id, payment_id), signature)


class UnavailableGateway(PaymentGateway):
    """Strict mode without credentials: every order request is a hard failure."""

    name = "unavailable"

    def create_order(self, amount, currency, receipt, notes=None):
        raise InternalError("Payment gateway is not configured")

    def verify_payment_signature(self, order_id, payment_id, signature):
        return False


def build_payment_gateway(settings: Settings) -> PaymentGateway:
    if settings.razorpay_configured:
        return RazorpayGateway(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)

    if settings.strict_payments:
        logger.error("RAZORPAY_KEY_ID / RAZORPAY_KEY_SECRET missing in strict mode")
        return UnavailableGateway()

    logger.warning("Razorpay keys not set. Falling back to the mock payment gateway.")
    return MockGateway(settings.RAZORPAY_KEY_SECRET)


_gateway: Optional[PaymentGateway] = None


def get_payment_gateway() -> PaymentGateway:
    global _gateway
    if _gateway is None:
        from app.config import settings
        _gateway = build_payment_gateway(settings)
    return _gateway
