import logging
from decimal import Decimal, ROUND_HALF_UP

from sqlmodel import Session

from app.config import Settings
from app.models.user import User
from app.schemas.purchase_schemas import CheckoutRequest, CheckoutResponse
from app.services.catalog_service import resolve_item
from app.services.payment_gateway import PaymentGateway
from app.services.purchase_ledger import attach_gateway_order, create_pending_purchase
from app.utils.errors import BadRequestError, InternalError, PurchaseAPIError, ValidationError

logger = logging.getLogger(__name__)


def to_minor_units(amount: float) -> int:
    """Rupees -> paise, rounded half up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def create_checkout_session(
    session: Session,
    *,
    user: User,
    payload: CheckoutRequest,
    gateway: PaymentGateway,
    settings: Settings,
) -> CheckoutResponse:
    """
    Price the requested item, record a pending purchase and open a gateway order.

    The purchase row is committed before the gateway is contacted; if the
    gateway call fails the pending row stays behind for reconciliation.
    """
    purchase_type = payload.purchase_type
    item_id = payload.item_id
    if item_id is None:
        field = "serviceId" if purchase_type == "service" else "courseId"
        raise ValidationError(f"{field} is required for {purchase_type.value} purchases")

    item = resolve_item(session, purchase_type, item_id)

    if item.price is None or item.price <= 0:
        raise BadRequestError("Item price must be greater than 0")

    purchase = create_pending_purchase(
        session,
        user_id=user.id,
        item=item,
        currency=settings.payment_currency,
    )

    try:
        order = gateway.create_order(
            amount=to_minor_units(purchase.amount),
            currency=purchase.currency,
            receipt=f"purchase_{purchase.id}",
            notes={
                "purchaseId": str(purchase.id),
                "userId": str(user.id),
                "purchaseType": purchase_type.value,
                "serviceId": str(payload.service_id or ""),
                "courseId": str(payload.course_id or ""),
                "itemName": item.name,
            },
        )
    except PurchaseAPIError:
        raise
    except Exception as exc:
        logger.exception("Gateway order creation failed for purchase %s", purchase.id)
        detail = "Failed to create payment order"
        if not settings.strict_payments:
            detail = f"{detail}: {exc}"
        raise InternalError(detail) from exc

    purchase = attach_gateway_order(session, purchase, order["id"])

    logger.info(
        "Checkout created: purchase %s, order %s, user %s",
        purchase.id, purchase.gateway_order_id, user.id,
    )

    return CheckoutResponse(
        order_id=order["id"],
        amount=order["amount"],
        currency=order["currency"],
        key_id=getattr(gateway, "key_id", None),
        purchase_id=purchase.id,
        success_url=str(payload.success_url or settings.payment_success_url),
        cancel_url=str(payload.cancel_url or settings.payment_cancel_url),
    )
