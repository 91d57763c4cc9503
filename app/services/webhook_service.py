import json
import logging
from typing import Any, Callable, Dict, Optional

from sqlmodel import Session

from app.constants.purchase_status import PurchaseTrigger
from app.services.entitlement_service import apply_entitlement
from app.services.purchase_ledger import apply_transition, find_by_order_id
from app.utils.errors import BadRequestError
from app.utils.signature import compute_signature, signatures_match

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Razorpay-Signature"


def verify_webhook_signature(body: bytes, signature: Optional[str], secret: str) -> None:
    if not signature:
        raise BadRequestError("Missing webhook signature")

    if not secret:
        logger.warning("RAZORPAY_WEBHOOK_SECRET not set, skipping signature verification")
        return

    expected = compute_signature(secret, body)
    if not signatures_match(expected, signature):
        logger.error("Webhook signature verification failed")
        raise BadRequestError("Invalid webhook signature")


def parse_event(body: bytes) -> Dict[str, Any]:
    try:
        event = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        raise BadRequestError("Malformed webhook payload")

    if not isinstance(event, dict) or not isinstance(event.get("event"), str):
        raise BadRequestError("Malformed webhook payload")
    return event


def _entity(event: Dict[str, Any], kind: str) -> Dict[str, Any]:
    try:
        entity = event["payload"][kind]["entity"]
    except (KeyError, TypeError):
        raise BadRequestError(f"Webhook payload is missing the {kind} entity")
    if not isinstance(entity, dict):
        raise BadRequestError(f"Webhook payload is missing the {kind} entity")
    return entity


def _find_purchase(session: Session, order_id):
    # orphaned checkouts have no order id, never match them
    if not order_id:
        return None
    return find_by_order_id(session, order_id)


def _on_payment_captured(session: Session, event: Dict[str, Any]) -> bool:
    payment = _entity(event, "payment")
    purchase = _find_purchase(session, payment.get("order_id"))
    if not purchase:
        return False

    updated = apply_transition(
        session,
        purchase.id,
        PurchaseTrigger.PAYMENT_CAPTURED,
        source="webhook",
        values={"gateway_payment_id": payment.get("id")},
        meta={"event": event["event"], "gatewayPaymentId": payment.get("id")},
    )
    if updated is None:
        return False

    apply_entitlement(session, updated)
    logger.info(
        "Payment captured: purchase %s, user %s, amount %s",
        updated.id, updated.user_id, updated.amount,
    )
    return True


def _on_payment_failed(session: Session, event: Dict[str, Any]) -> bool:
    payment = _entity(event, "payment")
    purchase = _find_purchase(session, payment.get("order_id"))
    if not purchase:
        return False

    updated = apply_transition(
        session,
        purchase.id,
        PurchaseTrigger.PAYMENT_FAILED,
        source="webhook",
        meta={
            "event": event["event"],
            "gatewayPaymentId": payment.get("id"),
            "errorCode": payment.get("error_code"),
        },
    )
    return updated is not None


def _on_order_paid(session: Session, event: Dict[str, Any]) -> bool:
    order = _entity(event, "order")
    purchase = _find_purchase(session, order.get("id"))
    if not purchase:
        return False

    updated = apply_transition(
        session,
        purchase.id,
        PurchaseTrigger.ORDER_PAID,
        source="webhook",
        meta={"event": event["event"]},
    )
    if updated is None:
        return False

    apply_entitlement(session, updated)
    return True


EVENT_HANDLERS: Dict[str, Callable[[Session, Dict[str, Any]], bool]] = {
    "payment.captured": _on_payment_captured,
    "payment.failed": _on_payment_failed,
    "order.paid": _on_order_paid,
}


def handle_webhook(
    session: Session,
    *,
    body: bytes,
    signature: Optional[str],
    secret: str,
) -> Dict[str, Any]:
    """
    Verify and apply one gateway event.

    Unknown orders, unknown event types and purchases that already left
    ``pending`` are acknowledged without changes so the gateway stops retrying.
    """
    verify_webhook_signature(body, signature, secret)
    event = parse_event(body)

    handler = EVENT_HANDLERS.get(event["event"])
    if handler is None:
        logger.info("Unhandled webhook event: %s", event["event"])
        return {"received": True}

    try:
        handler(session, event)
    except BadRequestError:
        raise
    except Exception:
        logger.exception("Error handling webhook event %s", event["event"])
        raise

    return {"received": True}
