"""
Payment Routes

Gateway checkout for paid plans, verification of the result and payment
lookup.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from music_studio.api.dependencies import (
    CurrentUserDep,
    PaymentServiceDep,
    RegisteredUserDep,
)
from music_studio.domain.plans import PlanId
from music_studio.domain.subscription import Subscription
from music_studio.infrastructure.db.models.payment import Payment


router = APIRouter()


class CheckoutRequest(BaseModel):
    plan: PlanId = Field(..., description="Paid plan to purchase")


class VerifyPaymentRequest(BaseModel):
    """Fields Razorpay checkout returns to the client."""
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


class PaymentResponse(BaseModel):
    id: str
    amount: int
    currency: str
    status: str
    type: str
    subscription_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    created_at: datetime


class CheckoutResponse(BaseModel):
    order_id: str
    amount: int = Field(description="Amount in the currency's smallest unit")
    currency: str
    key_id: Optional[str] = None
    payment: PaymentResponse
    subscription: Subscription


class VerifyPaymentResponse(BaseModel):
    payment: PaymentResponse
    subscription: Subscription


def _payment_to_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        amount=payment.amount,
        currency=payment.currency,
        status=payment.status,
        type=payment.type,
        subscription_id=payment.subscription_id,
        razorpay_order_id=payment.razorpay_order_id,
        razorpay_payment_id=payment.razorpay_payment_id,
        created_at=payment.created_at,
    )


@router.post("/payments/checkout", response_model=CheckoutResponse, status_code=201)
async def checkout(
    request: CheckoutRequest,
    user_id: RegisteredUserDep,
    service: PaymentServiceDep,
):
    """Create a gateway order and a pending subscription for a paid plan."""
    result = await service.checkout(user_id, request.plan)
    return CheckoutResponse(
        order_id=result.order["id"],
        amount=result.order["amount"],
        currency=result.order["currency"],
        key_id=result.key_id,
        payment=_payment_to_response(result.payment),
        subscription=result.subscription,
    )


@router.post("/payments/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    request: VerifyPaymentRequest,
    user_id: CurrentUserDep,
    service: PaymentServiceDep,
):
    """Verify a checkout signature and activate the subscription."""
    result = await service.verify(
        user_id,
        request.razorpay_order_id,
        request.razorpay_payment_id,
        request.razorpay_signature,
    )
    return VerifyPaymentResponse(
        payment=_payment_to_response(result.payment),
        subscription=result.subscription,
    )


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: str,
    user_id: CurrentUserDep,
    service: PaymentServiceDep,
):
    """Payment status."""
    payment = await service.get_payment(user_id, payment_id)
    return _payment_to_response(payment)


@router.get("/payments", response_model=PaymentResponse)
async def get_payment_by_order(
    user_id: CurrentUserDep,
    service: PaymentServiceDep,
    order_id: str = Query(..., min_length=1),
):
    """Payment status looked up by gateway order id."""
    payment = await service.get_payment_by_order(user_id, order_id)
    return _payment_to_response(payment)
