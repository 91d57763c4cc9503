from datetime import datetime

from sqlalchemy.exc import OperationalError

from app.constants.purchase_status import PurchaseTrigger, PurchaseType
from app.models import Purchase
from app.services.catalog_service import CatalogItem
from app.services.entitlement_service import apply_entitlement, one_year_from
from app.services.purchase_ledger import apply_transition, create_pending_purchase


def _completed_course_purchase(session, user, course):
    item = CatalogItem(
        purchase_type=PurchaseType.course,
        item_id=course.id,
        name=course.title,
        description=course.description,
        price=course.price,
        is_premium=course.is_premium,
    )
    purchase = create_pending_purchase(session, user_id=user.id, item=item, currency="INR")
    return apply_transition(
        session, purchase.id, PurchaseTrigger.ORDER_PAID, source="webhook"
    )


def test_one_year_from():
    assert one_year_from(datetime(2025, 3, 10, 12, 0)) == datetime(2026, 3, 10, 12, 0)
    assert one_year_from(datetime(2024, 2, 29, 8, 30)) == datetime(2025, 3, 1, 8, 30)


def test_premium_course_grants_a_year(session, user, make_course):
    purchase = _completed_course_purchase(session, user, make_course(is_premium=True))
    before = datetime.utcnow()

    assert apply_entitlement(session, purchase) is True

    session.refresh(user)
    assert user.is_premium is True
    assert user.premium_expires_at >= one_year_from(before).replace(microsecond=0)


def test_non_premium_course_is_noop(session, user, make_course):
    purchase = _completed_course_purchase(session, user, make_course(is_premium=False))

    assert apply_entitlement(session, purchase) is False
    session.refresh(user)
    assert user.is_premium is False


def test_soft_deleted_course_still_grants_premium(session, user, make_course):
    course = make_course(is_premium=True)
    purchase = _completed_course_purchase(session, user, course)
    course.deleted_at = datetime.utcnow()
    session.add(course)
    session.commit()

    assert apply_entitlement(session, purchase) is True
    session.refresh(user)
    assert user.is_premium is True


def test_missing_course_row_is_noop(session, user):
    purchase = Purchase(
        user_id=user.id,
        purchase_type="course",
        course_id=9999,
        amount=499.0,
        original_amount=499.0,
        status="completed",
    )
    session.add(purchase)
    session.commit()
    session.refresh(purchase)

    assert apply_entitlement(session, purchase) is False
    session.refresh(user)
    assert user.is_premium is False


def test_pending_purchase_is_never_entitled(session, user, make_course):
    course = make_course(is_premium=True)
    item = CatalogItem(
        purchase_type=PurchaseType.course,
        item_id=course.id,
        name=course.title,
        description=course.description,
        price=course.price,
        is_premium=True,
    )
    purchase = create_pending_purchase(session, user_id=user.id, item=item, currency="INR")

    assert apply_entitlement(session, purchase) is False


def test_database_error_keeps_purchase_completed(session, user, make_course, monkeypatch):
    purchase = _completed_course_purchase(session, user, make_course(is_premium=True))

    def broken_commit():
        raise OperationalError("UPDATE user", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "commit", broken_commit)
    assert apply_entitlement(session, purchase) is False
    monkeypatch.undo()

    assert session.get(Purchase, purchase.id).status == "completed"
    session.refresh(user)
    assert user.is_premium is False
