"""
Payment Service

Checkout and verification flow for paid plans:

1. checkout: gateway order + pending subscription + pending payment row
2. verify: signature check, payment completed, subscription activated
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from music_studio.domain.plans import DEFAULT_PLAN_CATALOG, PlanCatalog, PlanId
from music_studio.domain.subscription import Subscription, SubscriptionStatus
from music_studio.infrastructure.db.models.payment import Payment, PaymentStatus
from music_studio.infrastructure.db.repositories.payment_repository import PaymentRepository
from music_studio.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
)
from music_studio.infrastructure.exceptions import NotFoundError, ValidationError
from music_studio.infrastructure.payments.razorpay_service import RazorpayService
from music_studio.services.subscription_service import SubscriptionService


logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    order: Dict[str, Any]
    payment: Payment
    subscription: Subscription
    key_id: Optional[str]


@dataclass
class VerificationResult:
    payment: Payment
    subscription: Subscription


class PaymentService:
    """Ties gateway orders to payment and subscription records."""

    def __init__(
        self,
        gateway: RazorpayService,
        payments: PaymentRepository,
        subscriptions: SubscriptionRepository,
        subscription_service: SubscriptionService,
        catalog: PlanCatalog = DEFAULT_PLAN_CATALOG,
    ):
        self._gateway = gateway
        self._payments = payments
        self._subscriptions = subscriptions
        self._subscription_service = subscription_service
        self._catalog = catalog

    async def checkout(self, user_id: str, plan_id: PlanId) -> CheckoutResult:
        """
        Start a purchase of a paid plan.

        Raises:
            ValidationError: plan is free or unknown
            PaymentServiceError: gateway failure
        """
        plan = self._catalog.plans.get(plan_id)
        if plan is None or not plan.is_paid:
            raise ValidationError(
                "Only paid plans can be purchased",
                details={"plan": str(plan_id)},
            )

        order = await self._gateway.create_order(
            amount=plan.price,
            currency=plan.currency,
            user_id=user_id,
            plan=plan.id.value,
        )
        order_id = order["id"]

        subscription = await self._subscription_service.select_plan(
            user_id, plan.id, order_id=order_id
        )
        payment = await self._payments.add(
            Payment(
                user_id=user_id,
                subscription_id=subscription.id,
                amount=plan.price,
                currency=plan.currency,
                status=PaymentStatus.PENDING.value,
                type="subscription",
                razorpay_order_id=order_id,
                details={"plan": plan.id.value, "razorpay_key_id": self._gateway.key_id},
            )
        )

        return CheckoutResult(
            order=order,
            payment=payment,
            subscription=subscription,
            key_id=self._gateway.key_id,
        )

    async def verify(
        self,
        user_id: str,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> VerificationResult:
        """
        Confirm a checkout and activate its subscription.

        Verifying an already completed order returns the stored result.

        Raises:
            InvalidSignatureError: signature mismatch
            NotFoundError: no checkout for this order and user
        """
        self._gateway.verify_payment_signature(order_id, payment_id, signature)

        payment = await self._payments.get_by_order_id(order_id)
        if payment is None or payment.user_id != user_id:
            raise NotFoundError(
                f"No checkout found for order {order_id}",
                operation="verify",
                table="payments",
            )

        subscription = await self._subscriptions.get_by_order_id(order_id)
        if subscription is None:
            raise NotFoundError(
                f"No subscription found for order {order_id}",
                operation="verify",
                table="subscriptions",
            )

        if payment.status == PaymentStatus.COMPLETED.value:
            logger.info(f"Order {order_id} already verified, skipping")
            return VerificationResult(payment=payment, subscription=subscription)

        payment.status = PaymentStatus.COMPLETED.value
        payment.razorpay_payment_id = payment_id
        payment.razorpay_signature = signature
        payment = await self._payments.add(payment)

        if subscription.status == SubscriptionStatus.PENDING:
            subscription = await self._subscription_service.activate(
                subscription, payment_id=payment_id, signature=signature
            )

        return VerificationResult(payment=payment, subscription=subscription)

    async def get_payment(self, user_id: str, payment_id: str) -> Payment:
        """
        Raises:
            NotFoundError: missing or owned by someone else
        """
        payment = await self._payments.get_by_id(payment_id)
        if payment is None or payment.user_id != user_id:
            raise NotFoundError(
                f"Payment {payment_id} not found",
                operation="get",
                table="payments",
            )
        return payment

    async def get_payment_by_order(self, user_id: str, order_id: str) -> Payment:
        """
        Latest payment for a gateway order.

        Raises:
            NotFoundError: missing or owned by someone else
        """
        payment = await self._payments.get_by_order_id(order_id)
        if payment is None or payment.user_id != user_id:
            raise NotFoundError(
                f"Payment for order {order_id} not found",
                operation="get",
                table="payments",
            )
        return payment
