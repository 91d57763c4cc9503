from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from app.constants.purchase_status import PurchaseStatus

if TYPE_CHECKING:
    from .course import Course
    from .service import Service


class Purchase(SQLModel, table=True):
    """
    Ledger entry for one buy attempt. Rows are never deleted.
    """

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="user.id", index=True)
    purchase_type: str  # service | course
    service_id: Optional[int] = Field(default=None, foreign_key="service.id", index=True)
    course_id: Optional[int] = Field(default=None, foreign_key="course.id", index=True)

    amount: float = Field(nullable=False, ge=0)
    original_amount: float = Field(nullable=False, ge=0)
    currency: str = Field(default="INR")

    status: str = Field(default=PurchaseStatus.pending.value, index=True)

    gateway_order_id: Optional[str] = Field(default=None, unique=True, index=True)
    gateway_payment_id: Optional[str] = Field(default=None, index=True)
    gateway_signature: Optional[str] = None

    # item name/description at time of purchase
    meta: Optional[dict] = Field(default=None, sa_column=Column("metadata", JSON))

    completed_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # soft-deleted items still resolve here
    service: Optional["Service"] = Relationship()
    course: Optional["Course"] = Relationship()
