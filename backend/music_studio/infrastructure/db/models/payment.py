"""
Payment Model

Gateway payment attempts. A checkout creates a pending row; verification
flips it to completed.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import Field

from music_studio.infrastructure.db.models.base import BaseModel


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Payment(BaseModel, table=True):
    """Payment table."""

    __tablename__ = "payments"

    user_id: str = Field(..., foreign_key="users.id", index=True, max_length=36)
    subscription_id: Optional[str] = Field(
        default=None, foreign_key="subscriptions.id", max_length=36
    )
    amount: int = Field(..., ge=0, description="Amount in whole currency units")
    currency: str = Field(default="INR", max_length=3)
    status: str = Field(default=PaymentStatus.PENDING.value, max_length=20)
    type: str = Field(default="subscription", max_length=20)
    razorpay_order_id: Optional[str] = Field(default=None, max_length=255, index=True)
    razorpay_payment_id: Optional[str] = Field(default=None, max_length=255)
    razorpay_signature: Optional[str] = Field(default=None, max_length=255)
    details: Optional[dict] = Field(
        default=None,
        sa_column=Column(JSON, default={}),
        description="Plan and gateway context"
    )
