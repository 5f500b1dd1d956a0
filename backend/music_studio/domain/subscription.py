"""
Subscription Domain Models

Enums, the subscription entity and the pure rules for deciding which
subscription is in force for a user at a given instant.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional
from pydantic import BaseModel, ConfigDict, Field

from music_studio.domain.plans import PlanId
from music_studio.infrastructure.exceptions import InvalidTransitionError


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status."""
    PENDING = "pending"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# pending -> (abandoned) has no explicit transition; the record stays pending.
ALLOWED_TRANSITIONS: dict[SubscriptionStatus, frozenset[SubscriptionStatus]] = {
    SubscriptionStatus.PENDING: frozenset({SubscriptionStatus.ACTIVE}),
    SubscriptionStatus.ACTIVE: frozenset({SubscriptionStatus.CANCELLED}),
    SubscriptionStatus.CANCELLED: frozenset(),
    SubscriptionStatus.COMPLETED: frozenset(),
}


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# Domain Entities
# =============================================================================

class Subscription(BaseModel):
    """A time-bounded (or perpetual) grant of a plan to a user."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    user_id: str
    plan: PlanId = PlanId.FREE
    status: SubscriptionStatus = SubscriptionStatus.PENDING
    start_date: datetime = Field(default_factory=utc_now)
    end_date: Optional[datetime] = None
    amount: int = 0
    currency: str = "INR"
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None


def is_effective(subscription: Subscription, now: datetime) -> bool:
    """
    Whether a subscription currently grants its plan.

    The stored status is never rewritten when a paid period runs out, so an
    `active` record past its end date is treated as expired here. Free-plan
    validity is never end-date enforced.
    """
    if subscription.status != SubscriptionStatus.ACTIVE:
        return False
    if subscription.plan == PlanId.FREE or subscription.end_date is None:
        return True
    return as_utc(subscription.end_date) >= as_utc(now)


def resolve_current_subscription(
    subscriptions: Iterable[Subscription],
    now: datetime,
) -> Optional[Subscription]:
    """
    Pick the subscription in force: the most recently created effective one.

    Several simultaneously effective records (e.g. a duplicate activation)
    are not an error; the newest wins and the rest are ignored.
    """
    effective = [s for s in subscriptions if is_effective(s, now)]
    if not effective:
        return None
    return max(effective, key=lambda s: as_utc(s.created_at))


def ensure_transition(subscription: Subscription, target: SubscriptionStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is allowed."""
    if target not in ALLOWED_TRANSITIONS[subscription.status]:
        raise InvalidTransitionError(
            subscription.status.value,
            target.value,
            subscription_id=subscription.id,
        )
