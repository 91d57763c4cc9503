from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON


class PurchaseEvent(SQLModel, table=True):
    __tablename__ = "purchase_event"
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    purchase_id: int = Field(foreign_key="purchase.id", index=True)
    trigger: str = Field(index=True)

    from_status: str
    to_status: str
    source: str = Field(default="system")  # verify | webhook | admin

    meta: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=datetime.utcnow)
