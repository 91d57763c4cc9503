from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session, select

from app.constants.purchase_status import PurchaseType
from app.models.course import Course
from app.models.service import Service
from app.utils.errors import NotFoundError


@dataclass(frozen=True)
class CatalogItem:
    purchase_type: PurchaseType
    item_id: int
    name: str
    description: str
    price: float
    is_premium: bool = False


def find_service(session: Session, service_id: int) -> Optional[Service]:
    return session.exec(
        select(Service)
        .where(Service.id == service_id)
        .where(Service.deleted_at.is_(None))
    ).first()


def find_course(session: Session, course_id: int) -> Optional[Course]:
    return session.exec(
        select(Course)
        .where(Course.id == course_id)
        .where(Course.deleted_at.is_(None))
    ).first()


def resolve_item(session: Session, purchase_type: PurchaseType, item_id: int) -> CatalogItem:
    if purchase_type == PurchaseType.service:
        service = find_service(session, item_id)
        if not service:
            raise NotFoundError("Service not found")
        return CatalogItem(
            purchase_type=PurchaseType.service,
            item_id=service.id,
            name=service.name,
            description=service.description,
            price=service.price,
        )

    course = find_course(session, item_id)
    if not course:
        raise NotFoundError("Course not found")
    return CatalogItem(
        purchase_type=PurchaseType.course,
        item_id=course.id,
        name=course.title,
        description=course.description,
        price=course.price,
        is_premium=course.is_premium,
    )
