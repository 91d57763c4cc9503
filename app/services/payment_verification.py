import logging

from sqlmodel import Session

from app.constants.purchase_status import (
    TERMINAL_STATUSES,
    PurchaseStatus,
    PurchaseTrigger,
)
from app.models.purchase import Purchase
from app.models.user import User
from app.schemas.purchase_schemas import VerifyPaymentRequest
from app.services.entitlement_service import apply_entitlement
from app.services.payment_gateway import PaymentGateway
from app.services.purchase_ledger import apply_transition, find_by_order_id
from app.utils.errors import BadRequestError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def _conflict_for(purchase: Purchase) -> ConflictError:
    if purchase.status == PurchaseStatus.completed.value:
        return ConflictError("Payment already verified")
    return ConflictError(f"Purchase is already {purchase.status}")


def verify_payment(
    session: Session,
    *,
    user: User,
    payload: VerifyPaymentRequest,
    gateway: PaymentGateway,
) -> Purchase:
    purchase = find_by_order_id(session, payload.gateway_order_id, user_id=user.id)
    if not purchase:
        raise NotFoundError("Purchase not found")

    if PurchaseStatus(purchase.status) in TERMINAL_STATUSES:
        raise _conflict_for(purchase)

    valid = gateway.verify_payment_signature(
        payload.gateway_order_id,
        payload.gateway_payment_id,
        payload.gateway_signature,
    )

    if not valid:
        apply_transition(
            session,
            purchase.id,
            PurchaseTrigger.SIGNATURE_MISMATCH,
            source="verify",
            meta={"gatewayPaymentId": payload.gateway_payment_id},
        )
        logger.warning("Invalid payment signature for purchase %s", purchase.id)
        raise BadRequestError("Invalid payment signature")

    updated = apply_transition(
        session,
        purchase.id,
        PurchaseTrigger.PAYMENT_VERIFIED,
        source="verify",
        values={
            "gateway_payment_id": payload.gateway_payment_id,
            "gateway_signature": payload.gateway_signature,
        },
        meta={"gatewayPaymentId": payload.gateway_payment_id},
    )

    if updated is None:
        # a webhook (or a parallel verify) got there first
        session.refresh(purchase)
        raise _conflict_for(purchase)

    apply_entitlement(session, updated)
    return updated
