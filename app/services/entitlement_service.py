import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.constants.purchase_status import PurchaseStatus, PurchaseType
from app.models.purchase import Purchase
from app.models.course import Course
from app.models.user import User

logger = logging.getLogger(__name__)


def one_year_from(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        # Feb 29 -> Mar 1 of the next year
        return moment.replace(year=moment.year + 1, month=3, day=1)


def apply_entitlement(session: Session, purchase: Purchase) -> bool:
    """
    Grant premium access for a completed premium-course purchase.

    Must only be called by the writer that moved the purchase into
    ``completed``. A missing course or user is a no-op, and database errors
    are logged without touching the already committed purchase.
    Returns True when the user was updated.
    """
    if purchase.status != PurchaseStatus.completed.value:
        return False
    if purchase.purchase_type != PurchaseType.course.value or not purchase.course_id:
        return False

    try:
        course = session.get(Course, purchase.course_id)
        if not course or not course.is_premium:
            return False

        user = session.get(User, purchase.user_id)
        if not user:
            logger.warning(
                "Purchase %s completed for missing user %s", purchase.id, purchase.user_id
            )
            return False

        now = datetime.utcnow()
        user.is_premium = True
        user.premium_expires_at = one_year_from(now)
        user.updated_at = now
        session.add(user)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to grant premium access for purchase %s", purchase.id)
        return False

    logger.info(
        "Premium access granted to user %s until %s", user.id, user.premium_expires_at
    )
    return True
