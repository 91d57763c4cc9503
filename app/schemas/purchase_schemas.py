from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator
from pydantic.alias_generators import to_camel

from app.constants.purchase_status import PurchaseStatus, PurchaseType


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CheckoutRequest(CamelModel):
    purchase_type: PurchaseType
    service_id: Optional[int] = None
    course_id: Optional[int] = None
    success_url: Optional[HttpUrl] = None
    cancel_url: Optional[HttpUrl] = None

    @property
    def item_id(self) -> Optional[int]:
        if self.purchase_type == PurchaseType.service:
            return self.service_id
        return self.course_id


class CheckoutResponse(CamelModel):
    order_id: str
    amount: int  # minor units, as the gateway reports it
    currency: str
    key_id: Optional[str] = None
    purchase_id: int
    success_url: str
    cancel_url: str


class VerifyPaymentRequest(CamelModel):
    gateway_order_id: str = Field(min_length=1)
    gateway_payment_id: str = Field(min_length=1)
    gateway_signature: str = Field(min_length=1)


class ServiceSummary(CamelModel):
    id: int
    name: str
    slug: str
    price: float


class CourseSummary(CamelModel):
    id: int
    title: str
    thumbnail: Optional[str] = None
    price: float


class ServiceDetail(ServiceSummary):
    description: str = ""


class CourseDetail(CourseSummary):
    description: str = ""


class PurchaseRead(CamelModel):
    id: int
    user_id: int
    purchase_type: PurchaseType
    service_id: Optional[int] = None
    course_id: Optional[int] = None
    amount: float
    original_amount: float
    currency: str
    status: PurchaseStatus
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(
        default_factory=dict, validation_alias="meta", serialization_alias="metadata"
    )
    completed_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    service: Optional[ServiceSummary] = None
    course: Optional[CourseSummary] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def _empty_metadata(cls, value):
        return value or {}


class PurchaseDetailRead(PurchaseRead):
    service: Optional[ServiceDetail] = None
    course: Optional[CourseDetail] = None


class VerifyPaymentResponse(CamelModel):
    purchase: PurchaseRead
    verified: bool


class PurchaseStatusResponse(CamelModel):
    order_id: str
    status: PurchaseStatus
    amount: float
    currency: str


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class PurchaseListResponse(CamelModel):
    purchases: List[PurchaseRead]
    pagination: Pagination


class PurchaseDetailResponse(CamelModel):
    purchase: PurchaseDetailRead


class WebhookAck(BaseModel):
    received: bool = True
