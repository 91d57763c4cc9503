import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.constants.purchase_status import PurchaseStatus, PurchaseTrigger, transition_edge
from app.models.purchase import Purchase
from app.models.purchase_event import PurchaseEvent
from app.services.catalog_service import CatalogItem
from app.utils.errors import ConflictError

logger = logging.getLogger(__name__)


def create_pending_purchase(
    session: Session,
    *,
    user_id: int,
    item: CatalogItem,
    currency: str,
) -> Purchase:
    purchase = Purchase(
        user_id=user_id,
        purchase_type=item.purchase_type.value,
        service_id=item.item_id if item.purchase_type == "service" else None,
        course_id=item.item_id if item.purchase_type == "course" else None,
        amount=item.price,
        original_amount=item.price,
        currency=currency.upper(),
        status=PurchaseStatus.pending.value,
        meta={
            "itemName": item.name,
            "itemDescription": item.description,
            "userId": str(user_id),
        },
    )
    session.add(purchase)
    session.commit()
    session.refresh(purchase)
    return purchase


def attach_gateway_order(session: Session, purchase: Purchase, order_id: str) -> Purchase:
    """Store the gateway order handle. One order id maps to at most one purchase."""
    purchase.gateway_order_id = order_id
    purchase.updated_at = datetime.utcnow()
    session.add(purchase)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("Gateway order is already linked to another purchase")
    session.refresh(purchase)
    return purchase


def find_by_order_id(
    session: Session, order_id: str, user_id: Optional[int] = None
) -> Optional[Purchase]:
    query = select(Purchase).where(Purchase.gateway_order_id == order_id)
    if user_id is not None:
        query = query.where(Purchase.user_id == user_id)
    return session.exec(query).first()


def apply_transition(
    session: Session,
    purchase_id: int,
    trigger: PurchaseTrigger,
    *,
    source: str,
    values: Optional[Dict[str, Any]] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Optional[Purchase]:
    """
    Compare-and-set the purchase status for ``trigger``.

    The UPDATE only matches while the row is still in the trigger's source
    status, so concurrent writers (verify call, webhook retries) cannot apply
    the same transition twice. Returns the updated purchase when this caller
    won, None when the transition was a no-op.
    """
    from_status, to_status = transition_edge(trigger)
    now = datetime.utcnow()

    changes = dict(values or {})
    changes["status"] = to_status.value
    changes["updated_at"] = now
    if to_status == PurchaseStatus.completed:
        changes.setdefault("completed_at", now)
    elif to_status == PurchaseStatus.refunded:
        changes.setdefault("refunded_at", now)

    result = session.exec(
        update(Purchase)
        .where(Purchase.id == purchase_id)
        .where(Purchase.status == from_status.value)
        .values(**changes)
    )

    if result.rowcount != 1:
        session.rollback()
        logger.info(
            "Transition %s skipped for purchase %s (not %s)",
            trigger.value, purchase_id, from_status.value,
        )
        return None

    session.add(
        PurchaseEvent(
            purchase_id=purchase_id,
            trigger=trigger.value,
            from_status=from_status.value,
            to_status=to_status.value,
            source=source,
            meta=meta,
            created_at=now,
        )
    )
    session.commit()

    logger.info(
        "Purchase %s moved %s -> %s via %s (%s)",
        purchase_id, from_status.value, to_status.value, trigger.value, source,
    )
    return session.get(Purchase, purchase_id, populate_existing=True)


def list_events(session: Session, purchase_id: int):
    return session.exec(
        select(PurchaseEvent)
        .where(PurchaseEvent.purchase_id == purchase_id)
        .order_by(PurchaseEvent.created_at)
    ).all()
