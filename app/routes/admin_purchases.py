from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select

from app.constants.purchase_status import PurchaseStatus, PurchaseTrigger, PurchaseType
from app.database import get_session
from app.dependencies.admin import require_admin
from app.models.purchase import Purchase
from app.models.user import User
from app.schemas.purchase_schemas import (
    PurchaseDetailRead,
    PurchaseDetailResponse,
    PurchaseListResponse,
    PurchaseRead,
)
from app.services.purchase_ledger import apply_transition
from app.utils.errors import ConflictError, NotFoundError
from app.utils.pagination import paginate

router = APIRouter()


@router.get("", response_model=PurchaseListResponse)
def list_purchases(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[PurchaseStatus] = Query(None),
    purchase_type: Optional[PurchaseType] = Query(None, alias="purchaseType"),
    user_id: Optional[int] = Query(None, alias="userId"),
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    query = select(Purchase)

    if status:
        query = query.where(Purchase.status == status.value)
    if purchase_type:
        query = query.where(Purchase.purchase_type == purchase_type.value)
    if user_id:
        query = query.where(Purchase.user_id == user_id)

    query = query.order_by(Purchase.created_at.desc(), Purchase.id.desc())

    data = paginate(session=session, query=query, page=page, limit=limit)

    return PurchaseListResponse(
        purchases=[PurchaseRead.model_validate(p) for p in data["results"]],
        pagination=data["pagination"],
    )


@router.post("/{purchase_id}/refund", response_model=PurchaseDetailResponse)
def record_refund(
    purchase_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Mark a completed purchase as refunded. Money movement happens in the
    gateway dashboard; this only records the outcome.
    """
    purchase = session.get(Purchase, purchase_id)
    if not purchase:
        raise NotFoundError("Purchase not found")

    updated = apply_transition(
        session,
        purchase_id,
        PurchaseTrigger.REFUND_RECORDED,
        source="admin",
        meta={"adminId": admin.id},
    )
    if updated is None:
        session.refresh(purchase)
        raise ConflictError(
            f"Only completed purchases can be refunded. Current status: {purchase.status}"
        )

    return PurchaseDetailResponse(purchase=PurchaseDetailRead.model_validate(updated))
