from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlmodel import Session, select
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.constants.purchase_status import PurchaseStatus, PurchaseType
from app.database import get_session
from app.models.purchase import Purchase
from app.models.user import User
from app.schemas.purchase_schemas import (
    CheckoutRequest,
    CheckoutResponse,
    PurchaseDetailResponse,
    PurchaseDetailRead,
    PurchaseListResponse,
    PurchaseRead,
    PurchaseStatusResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
    WebhookAck,
)
from app.services.checkout_service import create_checkout_session
from app.services.payment_gateway import PaymentGateway, get_payment_gateway
from app.services.payment_verification import verify_payment
from app.services.purchase_ledger import find_by_order_id
from app.services.webhook_service import SIGNATURE_HEADER, handle_webhook
from app.utils.errors import NotFoundError
from app.utils.pagination import paginate
from app.utils.token import get_current_user

router = APIRouter()


def get_webhook_secret() -> str:
    return settings.RAZORPAY_WEBHOOK_SECRET


@router.post("/checkout", response_model=CheckoutResponse, status_code=201)
def checkout(
    payload: CheckoutRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Create a gateway order for a one-time service or course purchase"""
    return create_checkout_session(
        session,
        user=current_user,
        payload=payload,
        gateway=gateway,
        settings=settings,
    )


@router.post("/verify", response_model=VerifyPaymentResponse)
def verify(
    payload: VerifyPaymentRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    purchase = verify_payment(
        session,
        user=current_user,
        payload=payload,
        gateway=gateway,
    )
    return VerifyPaymentResponse(
        purchase=PurchaseRead.model_validate(purchase),
        verified=True,
    )


@router.get("/status/{order_id}", response_model=PurchaseStatusResponse)
def purchase_status(
    order_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    purchase = find_by_order_id(session, order_id, user_id=current_user.id)
    if not purchase:
        raise NotFoundError("Purchase not found")

    return PurchaseStatusResponse(
        order_id=purchase.gateway_order_id,
        status=purchase.status,
        amount=purchase.amount,
        currency=purchase.currency,
    )


@router.post("/webhook", response_model=WebhookAck)
async def razorpay_webhook(
    request: Request,
    session: Session = Depends(get_session),
    webhook_secret: str = Depends(get_webhook_secret),
    signature: Optional[str] = Header(default=None, alias=SIGNATURE_HEADER),
):
    # signature covers the exact bytes the gateway sent
    body = await request.body()
    return await run_in_threadpool(
        handle_webhook,
        session,
        body=body,
        signature=signature,
        secret=webhook_secret,
    )


@router.get("", response_model=PurchaseListResponse)
def list_my_purchases(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[PurchaseStatus] = Query(None),
    purchase_type: Optional[PurchaseType] = Query(None, alias="purchaseType"),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    query = select(Purchase).where(Purchase.user_id == current_user.id)

    if status:
        query = query.where(Purchase.status == status.value)
    if purchase_type:
        query = query.where(Purchase.purchase_type == purchase_type.value)

    query = query.order_by(Purchase.created_at.desc(), Purchase.id.desc())

    data = paginate(session=session, query=query, page=page, limit=limit)

    return PurchaseListResponse(
        purchases=[PurchaseRead.model_validate(p) for p in data["results"]],
        pagination=data["pagination"],
    )


@router.get("/{purchase_id}", response_model=PurchaseDetailResponse)
def get_my_purchase(
    purchase_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    purchase = session.get(Purchase, purchase_id)

    if not purchase or purchase.user_id != current_user.id:
        raise NotFoundError("Purchase not found")

    return PurchaseDetailResponse(purchase=PurchaseDetailRead.model_validate(purchase))
