"""
Subscription Repository

Data access layer for subscription persistence with domain model mapping.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from music_studio.domain.plans import PlanId, parse_plan_id
from music_studio.domain.subscription import (
    Subscription,
    SubscriptionStatus,
)
from music_studio.infrastructure.db.models.subscription import SubscriptionRecord
from music_studio.infrastructure.exceptions import NotFoundError


logger = logging.getLogger(__name__)


class SubscriptionRepository:
    """
    Repository for subscription data access.

    Maps SubscriptionRecord rows to Subscription domain entities.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    # =========================================================================
    # Query Methods
    # =========================================================================

    async def get_by_id(self, subscription_id: str) -> Optional[Subscription]:
        model = await self._session.get(SubscriptionRecord, subscription_id)
        return self._to_domain(model) if model else None

    async def get_by_order_id(self, order_id: str) -> Optional[Subscription]:
        """
        Get the subscription created for a gateway order.

        Args:
            order_id: Razorpay order ID

        Returns:
            Subscription domain model or None
        """
        statement = (
            select(SubscriptionRecord)
            .where(SubscriptionRecord.razorpay_order_id == order_id)
            .order_by(SubscriptionRecord.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(statement)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def list_for_user(self, user_id: str, limit: int = 50) -> List[Subscription]:
        """Subscription history for a user, newest first."""
        statement = (
            select(SubscriptionRecord)
            .where(SubscriptionRecord.user_id == user_id)
            .order_by(SubscriptionRecord.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(statement)
        return [self._to_domain(m) for m in result.scalars().all()]

    async def list_effective_for_user(
        self,
        user_id: str,
        now: datetime,
    ) -> List[Subscription]:
        """
        Active subscriptions still in their validity window, newest first.

        Free-plan rows are included regardless of end date.
        """
        statement = (
            select(SubscriptionRecord)
            .where(
                SubscriptionRecord.user_id == user_id,
                SubscriptionRecord.status == SubscriptionStatus.ACTIVE.value,
                or_(
                    SubscriptionRecord.plan == PlanId.FREE.value,
                    SubscriptionRecord.end_date.is_(None),
                    SubscriptionRecord.end_date >= now,
                ),
            )
            .order_by(SubscriptionRecord.created_at.desc())
        )
        result = await self._session.execute(statement)
        return [self._to_domain(m) for m in result.scalars().all()]

    # =========================================================================
    # Command Methods
    # =========================================================================

    async def create(self, subscription: Subscription) -> Subscription:
        """
        Create a new subscription.

        Args:
            subscription: Subscription domain model

        Returns:
            Created subscription with ID
        """
        model = self._to_model(subscription)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)

        logger.info(
            f"Created {model.plan} subscription {model.id} ({model.status}) for user {model.user_id}"
        )
        return self._to_domain(model)

    async def save(self, subscription: Subscription) -> Subscription:
        """
        Write back status, dates and payment references.

        Raises:
            NotFoundError: no row with the subscription's id
        """
        model = await self._session.get(SubscriptionRecord, subscription.id)
        if not model:
            raise NotFoundError(
                f"Subscription {subscription.id} not found",
                operation="save",
                table="subscriptions",
            )

        model.status = subscription.status.value
        model.start_date = subscription.start_date
        model.end_date = subscription.end_date
        model.razorpay_order_id = subscription.razorpay_order_id
        model.razorpay_payment_id = subscription.razorpay_payment_id
        model.razorpay_signature = subscription.razorpay_signature

        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)

        logger.info(f"Updated subscription {model.id} to {model.status}")
        return self._to_domain(model)

    # =========================================================================
    # Mapping Methods
    # =========================================================================

    def _to_domain(self, model: SubscriptionRecord) -> Subscription:
        """Convert database model to domain entity."""
        return Subscription(
            id=model.id,
            user_id=model.user_id,
            plan=parse_plan_id(model.plan),
            status=SubscriptionStatus(model.status),
            start_date=model.start_date,
            end_date=model.end_date,
            amount=model.amount,
            currency=model.currency,
            razorpay_order_id=model.razorpay_order_id,
            razorpay_payment_id=model.razorpay_payment_id,
            razorpay_signature=model.razorpay_signature,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, domain: Subscription) -> SubscriptionRecord:
        """Convert domain entity to database model."""
        values = dict(
            user_id=domain.user_id,
            plan=domain.plan.value,
            status=domain.status.value,
            start_date=domain.start_date,
            end_date=domain.end_date,
            amount=domain.amount,
            currency=domain.currency,
            razorpay_order_id=domain.razorpay_order_id,
            razorpay_payment_id=domain.razorpay_payment_id,
            razorpay_signature=domain.razorpay_signature,
            created_at=domain.created_at,
        )
        if domain.id:
            values["id"] = domain.id
        return SubscriptionRecord(**values)
