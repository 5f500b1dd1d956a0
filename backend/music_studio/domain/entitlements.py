"""
Entitlement Domain Models

Decision objects returned by the entitlement guard and the pure quota
arithmetic behind them. Usage windows are calendar periods in UTC.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field

from music_studio.domain.plans import PlanId, UNLIMITED
from music_studio.domain.subscription import Subscription


USER_NOT_FOUND_REASON = "User not found"
CHECK_FAILED_REASON = "Error checking subscription"


# =============================================================================
# Decision Objects
# =============================================================================

class QuotaDecision(BaseModel):
    """Allow/deny decision for a monthly counted action."""
    allowed: bool
    remaining: Optional[int] = Field(
        default=None,
        description="Actions left in the window; omitted when unlimited"
    )
    reason: Optional[str] = None


class PracticeDecision(BaseModel):
    """Allow/deny decision for daily practice time."""
    allowed: bool
    remaining_minutes: Optional[int] = Field(
        default=None,
        description="Whole minutes left today; omitted when unlimited"
    )
    reason: Optional[str] = None


class UserPlan(BaseModel):
    """The plan in force for a user."""
    plan: PlanId = PlanId.FREE
    is_premium: bool = False
    subscription: Optional[Subscription] = None


class EntitlementSummary(BaseModel):
    """All checks for one user, as the client dashboard consumes them."""
    plan: PlanId
    is_premium: bool
    can_access_premium: bool
    songs: QuotaDecision
    ai_generations: QuotaDecision
    practice: PracticeDecision


# =============================================================================
# Usage Windows
# =============================================================================

def start_of_month(now: datetime) -> datetime:
    """First instant of the current calendar month in UTC."""
    now = now.astimezone(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def start_of_day(now: datetime) -> datetime:
    """First instant of the current calendar day in UTC."""
    now = now.astimezone(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


# =============================================================================
# Quota Arithmetic
# =============================================================================

def is_unlimited(limit: int) -> bool:
    return limit == UNLIMITED


def evaluate_quota(limit: int, used: int, limit_reason: str) -> QuotaDecision:
    """
    Compare integer usage against a plan limit.

    Args:
        limit: Plan cap, or UNLIMITED
        used: Count of actions already taken in the window
        limit_reason: Reason reported when the cap is reached

    Returns:
        QuotaDecision; remaining is clamped to 0 when denied
    """
    if is_unlimited(limit):
        return QuotaDecision(allowed=True)

    remaining = limit - used
    if remaining <= 0:
        return QuotaDecision(allowed=False, remaining=0, reason=limit_reason)

    return QuotaDecision(allowed=True, remaining=remaining)


def song_limit_reason(limit: int) -> str:
    return f"Monthly song limit reached ({limit} songs)"


def ai_generation_limit_reason(limit: int) -> str:
    return f"Monthly AI generation limit reached ({limit} generations)"


def practice_limit_reason(limit: int) -> str:
    return f"Daily practice limit reached ({limit} minutes)"


def evaluate_practice(limit_minutes: int, practiced_seconds: int) -> PracticeDecision:
    """Daily practice check; total seconds are floored to whole minutes."""
    if is_unlimited(limit_minutes):
        return PracticeDecision(allowed=True)

    decision = evaluate_quota(
        limit_minutes,
        practiced_seconds // 60,
        practice_limit_reason(limit_minutes),
    )
    return PracticeDecision(
        allowed=decision.allowed,
        remaining_minutes=decision.remaining,
        reason=decision.reason,
    )
