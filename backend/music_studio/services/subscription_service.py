"""
Subscription Service

Subscription lifecycle: plan selection, activation after payment and
cancellation. Records are only ever status-transitioned, never deleted.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from music_studio.domain.plans import DEFAULT_PLAN_CATALOG, PlanCatalog, PlanId, compute_end_date
from music_studio.domain.subscription import (
    Subscription,
    SubscriptionStatus,
    ensure_transition,
    utc_now,
)
from music_studio.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
)
from music_studio.infrastructure.exceptions import NotFoundError, ValidationError


logger = logging.getLogger(__name__)


class SubscriptionService:
    """Creates and transitions subscription records."""

    def __init__(
        self,
        repo: SubscriptionRepository,
        catalog: PlanCatalog = DEFAULT_PLAN_CATALOG,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._repo = repo
        self._catalog = catalog
        self._clock = clock

    async def select_plan(
        self,
        user_id: str,
        plan_id: PlanId,
        order_id: Optional[str] = None,
    ) -> Subscription:
        """
        Create a subscription record for a newly selected plan.

        The free plan is active immediately and never expires. Paid plans
        start pending and are activated once payment is verified; selecting
        a paid plan again later is how a renewal is recorded.

        Raises:
            ValidationError: plan id is not in the catalog
        """
        if plan_id not in self._catalog.plans:
            raise ValidationError(f"Invalid plan: {plan_id}", details={"plan": str(plan_id)})

        plan = self._catalog.plans[plan_id]
        now = self._clock()

        subscription = Subscription(
            user_id=user_id,
            plan=plan.id,
            status=SubscriptionStatus.PENDING if plan.is_paid else SubscriptionStatus.ACTIVE,
            start_date=now,
            end_date=None,
            amount=plan.price,
            currency=plan.currency,
            razorpay_order_id=order_id,
            created_at=now,
        )
        return await self._repo.create(subscription)

    async def get_owned(self, subscription_id: str, user_id: str) -> Subscription:
        """
        Load a subscription that belongs to the user.

        Raises:
            NotFoundError: missing or owned by someone else
        """
        subscription = await self._repo.get_by_id(subscription_id)
        if subscription is None or subscription.user_id != user_id:
            raise NotFoundError(
                f"Subscription {subscription_id} not found",
                operation="get",
                table="subscriptions",
            )
        return subscription

    async def activate(
        self,
        subscription: Subscription,
        payment_id: Optional[str] = None,
        signature: Optional[str] = None,
    ) -> Subscription:
        """
        pending -> active after payment verification.

        The validity window starts at activation, not at selection.

        Raises:
            InvalidTransitionError: subscription is not pending
        """
        ensure_transition(subscription, SubscriptionStatus.ACTIVE)

        now = self._clock()
        plan = self._catalog.get(subscription.plan)

        subscription.status = SubscriptionStatus.ACTIVE
        subscription.start_date = now
        subscription.end_date = compute_end_date(plan, now)
        if payment_id:
            subscription.razorpay_payment_id = payment_id
        if signature:
            subscription.razorpay_signature = signature

        activated = await self._repo.save(subscription)
        logger.info(
            f"Activated {activated.plan.value} subscription {activated.id} "
            f"for user {activated.user_id} until {activated.end_date}"
        )
        return activated

    async def cancel(self, subscription_id: str, user_id: str) -> Subscription:
        """
        active -> cancelled, user-initiated.

        Raises:
            NotFoundError: subscription missing or not owned by user
            InvalidTransitionError: subscription is not active
        """
        subscription = await self.get_owned(subscription_id, user_id)
        ensure_transition(subscription, SubscriptionStatus.CANCELLED)

        subscription.status = SubscriptionStatus.CANCELLED
        cancelled = await self._repo.save(subscription)
        logger.info(f"User {user_id} cancelled subscription {subscription_id}")
        return cancelled

    async def list_history(self, user_id: str) -> List[Subscription]:
        return await self._repo.list_for_user(user_id)
