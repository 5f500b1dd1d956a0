"""
Entitlement Guard

Answers "can this user do this right now?" and "how much quota is left?"
for song creation, AI generation and daily practice, based on the user's
current subscription plan and usage counted from stored records.

Callers always receive a decision object. Missing users and exhausted
quotas are ordinary denials; store failures are logged and reported as a
denial with a generic reason instead of propagating.

Concurrency: a plain check followed by an insert is a soft limit, since two
requests from the same user may both observe the last unit of quota. Pass
lock=True to take a row lock on the user inside the caller's transaction;
the insert must then happen in that same transaction.
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Protocol, Tuple

from sqlalchemy.exc import SQLAlchemyError

from music_studio.domain.entitlements import (
    CHECK_FAILED_REASON,
    USER_NOT_FOUND_REASON,
    EntitlementSummary,
    PracticeDecision,
    QuotaDecision,
    UserPlan,
    ai_generation_limit_reason,
    evaluate_practice,
    evaluate_quota,
    is_unlimited,
    song_limit_reason,
    start_of_day,
    start_of_month,
)
from music_studio.domain.plans import (
    DEFAULT_PLAN_CATALOG,
    Plan,
    PlanCatalog,
    PlanId,
    PlanLimits,
)
from music_studio.domain.subscription import (
    Subscription,
    is_effective,
    resolve_current_subscription,
    utc_now,
)
from music_studio.infrastructure.exceptions import DatabaseError


logger = logging.getLogger(__name__)


# Store unreachable, query failed or timed out (TimeoutError is an OSError).
INFRASTRUCTURE_ERRORS = (DatabaseError, SQLAlchemyError, OSError)


class EntitlementStore(Protocol):
    """Persistent store consumed by the guard."""

    async def get_user_subscriptions(
        self,
        user_id: str,
        now: datetime,
        lock: bool = False,
    ) -> Optional[List[Subscription]]:
        """Effective subscriptions newest first, or None for an unknown user."""
        ...

    async def count_songs_since(self, user_id: str, since: datetime) -> int:
        ...

    async def count_ai_generations_since(self, user_id: str, since: datetime) -> int:
        ...

    async def sum_practice_seconds_since(self, user_id: str, since: datetime) -> int:
        ...


class EntitlementGuard:
    """
    Plan-based quota checks for one store and plan catalog.

    Args:
        store: Persistent store (EntitlementRepository in production)
        catalog: Plan table; defaults to the built-in catalog
        clock: Returns the current aware UTC instant
    """

    def __init__(
        self,
        store: EntitlementStore,
        catalog: PlanCatalog = DEFAULT_PLAN_CATALOG,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._catalog = catalog
        self._clock = clock

    @property
    def catalog(self) -> PlanCatalog:
        return self._catalog

    # =========================================================================
    # Resolution
    # =========================================================================

    async def _resolve(
        self,
        user_id: str,
        now: datetime,
        lock: bool = False,
    ) -> Optional[Tuple[Optional[Subscription], Plan]]:
        """Current subscription and its plan; None when the user is unknown."""
        subscriptions = await self._store.get_user_subscriptions(user_id, now, lock=lock)
        if subscriptions is None:
            return None

        current = resolve_current_subscription(subscriptions, now)
        plan = self._catalog.get(current.plan if current else PlanId.FREE)
        return current, plan

    async def _check_monthly(
        self,
        user_id: str,
        lock: bool,
        action: str,
        limit_of: Callable[[PlanLimits], int],
        count_since: Callable[[str, datetime], Awaitable[int]],
        limit_reason: Callable[[int], str],
    ) -> QuotaDecision:
        now = self._clock()
        try:
            resolved = await self._resolve(user_id, now, lock)
            if resolved is None:
                return QuotaDecision(allowed=False, reason=USER_NOT_FOUND_REASON)

            _, plan = resolved
            limit = limit_of(plan.limits)
            if is_unlimited(limit):
                return QuotaDecision(allowed=True)

            used = await count_since(user_id, start_of_month(now))
        except INFRASTRUCTURE_ERRORS as e:
            logger.error(f"Error checking {action} limit for user {user_id}: {e}")
            return QuotaDecision(allowed=False, reason=CHECK_FAILED_REASON)

        decision = evaluate_quota(limit, used, limit_reason(limit))
        if not decision.allowed:
            logger.info(f"User {user_id} reached {action} limit ({used}/{limit}) on {plan.id.value} plan")
        return decision

    # =========================================================================
    # Checks
    # =========================================================================

    async def can_create_song(self, user_id: str, lock: bool = False) -> QuotaDecision:
        """Monthly song quota."""
        return await self._check_monthly(
            user_id,
            lock,
            "song creation",
            lambda limits: limits.songs_per_month,
            self._store.count_songs_since,
            song_limit_reason,
        )

    async def can_use_ai_generation(self, user_id: str, lock: bool = False) -> QuotaDecision:
        """Monthly AI generation quota, counted from recorded generation events."""
        return await self._check_monthly(
            user_id,
            lock,
            "AI generation",
            lambda limits: limits.ai_generations_per_month,
            self._store.count_ai_generations_since,
            ai_generation_limit_reason,
        )

    async def can_practice_more(self, user_id: str, lock: bool = False) -> PracticeDecision:
        """
        Daily practice quota.

        Durations (seconds) of today's sessions are summed, then floored to
        whole minutes.
        """
        now = self._clock()
        try:
            resolved = await self._resolve(user_id, now, lock)
            if resolved is None:
                return PracticeDecision(allowed=False, reason=USER_NOT_FOUND_REASON)

            _, plan = resolved
            limit = plan.limits.practice_minutes_per_day
            if is_unlimited(limit):
                return PracticeDecision(allowed=True)

            practiced = await self._store.sum_practice_seconds_since(user_id, start_of_day(now))
        except INFRASTRUCTURE_ERRORS as e:
            logger.error(f"Error checking practice limit for user {user_id}: {e}")
            return PracticeDecision(allowed=False, reason=CHECK_FAILED_REASON)

        decision = evaluate_practice(limit, practiced)
        if not decision.allowed:
            logger.info(f"User {user_id} reached daily practice limit ({limit} min)")
        return decision

    async def can_access_premium(self, user_id: str) -> bool:
        """
        True iff any in-force subscription grants a paid plan.

        Not limited to the current subscription: a newer free record does not
        hide a paid period that is still running.
        """
        now = self._clock()
        try:
            subscriptions = await self._store.get_user_subscriptions(user_id, now)
        except INFRASTRUCTURE_ERRORS as e:
            logger.error(f"Error checking premium access for user {user_id}: {e}")
            return False

        if not subscriptions:
            return False

        return any(
            is_effective(s, now) and self._catalog.get(s.plan).is_paid
            for s in subscriptions
        )

    async def get_user_plan(self, user_id: str) -> UserPlan:
        """
        Resolve the plan in force for a user.

        Unknown users and store failures resolve to the implicit free plan.
        """
        now = self._clock()
        try:
            resolved = await self._resolve(user_id, now)
        except INFRASTRUCTURE_ERRORS as e:
            logger.error(f"Error getting user plan for user {user_id}: {e}")
            return UserPlan()

        if resolved is None:
            logger.warning(f"Plan requested for unknown user {user_id}")
            return UserPlan()

        current, plan = resolved
        return UserPlan(plan=plan.id, is_premium=plan.is_paid, subscription=current)

    async def check_all(self, user_id: str) -> EntitlementSummary:
        """Every check for one user, for dashboards."""
        user_plan = await self.get_user_plan(user_id)
        return EntitlementSummary(
            plan=user_plan.plan,
            is_premium=user_plan.is_premium,
            can_access_premium=await self.can_access_premium(user_id),
            songs=await self.can_create_song(user_id),
            ai_generations=await self.can_use_ai_generation(user_id),
            practice=await self.can_practice_more(user_id),
        )
