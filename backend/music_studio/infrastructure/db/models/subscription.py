"""
Subscription Database Model

One row per plan grant. Rows are never deleted; renewals add rows and
cancellations change status.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from music_studio.infrastructure.db.models.base import BaseModel, utcnow


class SubscriptionRecord(BaseModel, table=True):
    """
    Subscription table.

    Maps to the 'subscriptions' table in PostgreSQL.
    """

    __tablename__ = "subscriptions"

    user_id: str = Field(..., foreign_key="users.id", index=True, max_length=36)

    # Subscription details
    plan: str = Field(default="free", max_length=20)
    status: str = Field(default="pending", max_length=20, index=True)
    start_date: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
    end_date: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        nullable=True,
    )
    amount: int = Field(default=0)
    currency: str = Field(default="INR", max_length=3)

    # Razorpay references (opaque)
    razorpay_order_id: Optional[str] = Field(default=None, max_length=255, index=True)
    razorpay_payment_id: Optional[str] = Field(default=None, max_length=255)
    razorpay_signature: Optional[str] = Field(default=None, max_length=255)
