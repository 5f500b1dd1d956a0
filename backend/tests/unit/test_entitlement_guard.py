"""
Unit tests for EntitlementGuard.

Runs the guard against an in-memory store and a fixed clock
(2026-02-15 12:00 UTC).
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from music_studio.domain.entitlements import CHECK_FAILED_REASON, USER_NOT_FOUND_REASON
from music_studio.domain.plans import (
    DEFAULT_PLAN_CATALOG,
    UNLIMITED,
    Plan,
    PlanCatalog,
    PlanDuration,
    PlanId,
    PlanLimits,
)
from music_studio.domain.subscription import SubscriptionStatus
from music_studio.infrastructure.exceptions import DatabaseError
from music_studio.services.entitlement_guard import EntitlementGuard

from conftest import NOW, FakeEntitlementStore, fixed_clock, make_subscription


def _catalog(songs: int, practice: int = 15, ai: int = 3) -> PlanCatalog:
    """Single free plan with the given caps."""
    return PlanCatalog(
        plans={
            PlanId.FREE: Plan(
                id=PlanId.FREE,
                name="Free",
                price=0,
                duration=PlanDuration.LIFETIME,
                limits=PlanLimits(
                    songs_per_month=songs,
                    practice_minutes_per_day=practice,
                    ai_generations_per_month=ai,
                ),
            )
        }
    )


@pytest.fixture
def guard(store):
    return EntitlementGuard(store, DEFAULT_PLAN_CATALOG, clock=fixed_clock)


def _monthly(end_date=datetime(2026, 3, 1, tzinfo=timezone.utc), **kwargs):
    return make_subscription(
        plan=PlanId.MONTHLY,
        created_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
        end_date=end_date,
        **kwargs,
    )


# ============================================================================
# Song quota
# ============================================================================

class TestCanCreateSong:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit,used", [(5, 0), (5, 4), (10, 7), (1, 0)])
    async def test_under_limit_reports_remaining(self, store, limit, used):
        store.add_user("user-1")
        store.songs["user-1"] = used
        guard = EntitlementGuard(store, _catalog(songs=limit), clock=fixed_clock)

        decision = await guard.can_create_song("user-1")

        assert decision.allowed is True
        assert decision.remaining == limit - used
        assert decision.reason is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit,used", [(5, 5), (5, 9), (1, 1)])
    async def test_at_or_over_limit_denies(self, store, limit, used):
        store.add_user("user-1")
        store.songs["user-1"] = used
        guard = EntitlementGuard(store, _catalog(songs=limit), clock=fixed_clock)

        decision = await guard.can_create_song("user-1")

        assert decision.allowed is False
        assert decision.remaining == 0
        assert str(limit) in decision.reason

    @pytest.mark.asyncio
    async def test_free_plan_exhausted_message(self, guard, store):
        store.add_user("user-1", make_subscription())
        store.songs["user-1"] = 5

        decision = await guard.can_create_song("user-1")

        assert decision.model_dump() == {
            "allowed": False,
            "remaining": 0,
            "reason": "Monthly song limit reached (5 songs)",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("used", [0, 5, 10_000])
    async def test_unlimited_plan_omits_remaining(self, guard, store, used):
        store.add_user("user-1", _monthly())
        store.songs["user-1"] = used

        decision = await guard.can_create_song("user-1")

        assert decision.allowed is True
        assert decision.remaining is None

    @pytest.mark.asyncio
    async def test_unlimited_plan_skips_usage_count(self, guard, store):
        store.add_user("user-1", _monthly())

        await guard.can_create_song("user-1")

        assert store.windows == []

    @pytest.mark.asyncio
    async def test_zero_cap_is_not_unlimited(self, store):
        store.add_user("user-1")
        guard = EntitlementGuard(store, _catalog(songs=0), clock=fixed_clock)

        decision = await guard.can_create_song("user-1")

        assert decision.allowed is False
        assert decision.remaining == 0

    @pytest.mark.asyncio
    async def test_counts_from_start_of_utc_month(self, guard, store):
        store.add_user("user-1")

        await guard.can_create_song("user-1")

        assert store.windows == [datetime(2026, 2, 1, tzinfo=timezone.utc)]


# ============================================================================
# Defaults and resolution
# ============================================================================

class TestFreeDefault:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("used", [0, 3, 5])
    async def test_no_subscription_matches_explicit_free(self, used):
        implicit = FakeEntitlementStore()
        implicit.add_user("user-1")
        explicit = FakeEntitlementStore()
        explicit.add_user("user-1", make_subscription())
        for s in (implicit, explicit):
            s.songs["user-1"] = used
            s.ai_generations["user-1"] = used
            s.practice_seconds["user-1"] = used * 60

        a = EntitlementGuard(implicit, clock=fixed_clock)
        b = EntitlementGuard(explicit, clock=fixed_clock)

        assert await a.can_create_song("user-1") == await b.can_create_song("user-1")
        assert await a.can_use_ai_generation("user-1") == await b.can_use_ai_generation("user-1")
        assert await a.can_practice_more("user-1") == await b.can_practice_more("user-1")
        assert (await a.get_user_plan("user-1")).plan == (await b.get_user_plan("user-1")).plan

    @pytest.mark.asyncio
    async def test_pending_paid_subscription_leaves_user_on_free(self, guard, store):
        store.add_user("user-1", _monthly(status=SubscriptionStatus.PENDING))
        store.songs["user-1"] = 5

        decision = await guard.can_create_song("user-1")

        assert decision.allowed is False

    @pytest.mark.asyncio
    async def test_expired_paid_subscription_falls_back_to_free(self, guard, store):
        store.add_user(
            "user-1",
            _monthly(end_date=datetime(2026, 2, 10, tzinfo=timezone.utc)),
        )
        store.songs["user-1"] = 5

        decision = await guard.can_create_song("user-1")

        assert decision.allowed is False
        assert decision.reason == "Monthly song limit reached (5 songs)"


class TestGetUserPlan:

    @pytest.mark.asyncio
    async def test_newest_effective_subscription_wins(self, guard, store):
        store.add_user("user-1", make_subscription(), _monthly())

        user_plan = await guard.get_user_plan("user-1")

        assert user_plan.plan == PlanId.MONTHLY
        assert user_plan.is_premium is True
        assert user_plan.subscription.plan == PlanId.MONTHLY

    @pytest.mark.asyncio
    async def test_two_active_paid_takes_newest(self, guard, store):
        older = make_subscription(
            plan=PlanId.YEARLY,
            created_at=datetime(2026, 1, 10, tzinfo=timezone.utc),
            end_date=datetime(2027, 1, 10, tzinfo=timezone.utc),
        )
        store.add_user("user-1", older, _monthly())

        user_plan = await guard.get_user_plan("user-1")

        assert user_plan.plan == PlanId.MONTHLY

    @pytest.mark.asyncio
    async def test_no_subscription_is_free_and_not_premium(self, guard, store):
        store.add_user("user-1")

        user_plan = await guard.get_user_plan("user-1")

        assert user_plan.plan == PlanId.FREE
        assert user_plan.is_premium is False
        assert user_plan.subscription is None

    @pytest.mark.asyncio
    async def test_unknown_user_gets_free_default(self, guard):
        user_plan = await guard.get_user_plan("ghost")

        assert user_plan.plan == PlanId.FREE
        assert user_plan.is_premium is False

    @pytest.mark.asyncio
    async def test_store_failure_gets_free_default(self, guard, store):
        store.add_user("user-1", _monthly())
        store.error = DatabaseError("connection refused")

        user_plan = await guard.get_user_plan("user-1")

        assert user_plan.plan == PlanId.FREE

    @pytest.mark.asyncio
    async def test_plan_missing_from_catalog_uses_free_limits(self, store):
        store.add_user("user-1", _monthly())
        store.songs["user-1"] = 1
        guard = EntitlementGuard(store, _catalog(songs=2), clock=fixed_clock)

        decision = await guard.can_create_song("user-1")
        user_plan = await guard.get_user_plan("user-1")

        assert decision.remaining == 1
        assert user_plan.plan == PlanId.FREE
        assert user_plan.is_premium is False


# ============================================================================
# Premium access
# ============================================================================

class TestCanAccessPremium:

    @pytest.mark.asyncio
    async def test_free_plan(self, guard, store):
        store.add_user("user-1", make_subscription())
        assert await guard.can_access_premium("user-1") is False

    @pytest.mark.asyncio
    async def test_no_subscription(self, guard, store):
        store.add_user("user-1")
        assert await guard.can_access_premium("user-1") is False

    @pytest.mark.asyncio
    async def test_active_paid_before_end(self, guard, store):
        store.add_user("user-1", _monthly())
        assert await guard.can_access_premium("user-1") is True

    @pytest.mark.asyncio
    async def test_end_date_equal_to_now_still_counts(self, guard, store):
        store.add_user("user-1", _monthly(end_date=NOW))
        assert await guard.can_access_premium("user-1") is True

    @pytest.mark.asyncio
    async def test_active_paid_without_end_date(self, guard, store):
        store.add_user("user-1", _monthly(end_date=None))
        assert await guard.can_access_premium("user-1") is True

    @pytest.mark.asyncio
    async def test_expired_paid(self, guard, store):
        store.add_user("user-1", _monthly(end_date=datetime(2026, 2, 14, tzinfo=timezone.utc)))
        assert await guard.can_access_premium("user-1") is False

    @pytest.mark.asyncio
    async def test_cancelled_paid(self, guard, store):
        store.add_user("user-1", _monthly(status=SubscriptionStatus.CANCELLED))
        assert await guard.can_access_premium("user-1") is False

    @pytest.mark.asyncio
    async def test_unknown_user(self, guard):
        assert await guard.can_access_premium("ghost") is False

    @pytest.mark.asyncio
    async def test_newer_free_does_not_hide_running_paid(self, guard, store):
        store.add_user(
            "user-1",
            _monthly(),
            make_subscription(created_at=datetime(2026, 2, 10, tzinfo=timezone.utc)),
        )
        assert await guard.can_access_premium("user-1") is True
        assert (await guard.get_user_plan("user-1")).plan == PlanId.FREE

    @pytest.mark.asyncio
    async def test_pending_paid_does_not_count(self, guard, store):
        store.add_user("user-1", _monthly(status=SubscriptionStatus.PENDING))
        assert await guard.can_access_premium("user-1") is False

    @pytest.mark.asyncio
    async def test_store_failure(self, guard, store):
        store.add_user("user-1", _monthly())
        store.error = OperationalError("SELECT 1", {}, Exception("db down"))
        assert await guard.can_access_premium("user-1") is False


# ============================================================================
# AI generation and practice
# ============================================================================

class TestCanUseAIGeneration:

    @pytest.mark.asyncio
    async def test_counts_recorded_generations(self, guard, store):
        store.add_user("user-1")
        store.ai_generations["user-1"] = 2

        decision = await guard.can_use_ai_generation("user-1")

        assert decision.allowed is True
        assert decision.remaining == 1

    @pytest.mark.asyncio
    async def test_exhausted(self, guard, store):
        store.add_user("user-1")
        store.ai_generations["user-1"] = 3

        decision = await guard.can_use_ai_generation("user-1")

        assert decision.allowed is False
        assert decision.reason == "Monthly AI generation limit reached (3 generations)"

    @pytest.mark.asyncio
    async def test_unlimited_for_yearly(self, guard, store):
        store.add_user(
            "user-1",
            make_subscription(plan=PlanId.YEARLY, end_date=datetime(2027, 1, 1, tzinfo=timezone.utc)),
        )
        store.ai_generations["user-1"] = 500

        decision = await guard.can_use_ai_generation("user-1")

        assert decision.allowed is True
        assert decision.remaining is None


class TestCanPracticeMore:

    @pytest.mark.asyncio
    async def test_seconds_summed_then_floored(self, guard, store):
        store.add_user("user-1")
        # 14 min 59 s practiced: 14 whole minutes used of 15
        store.practice_seconds["user-1"] = 14 * 60 + 59

        decision = await guard.can_practice_more("user-1")

        assert decision.allowed is True
        assert decision.remaining_minutes == 1

    @pytest.mark.asyncio
    async def test_limit_reached(self, guard, store):
        store.add_user("user-1")
        store.practice_seconds["user-1"] = 15 * 60

        decision = await guard.can_practice_more("user-1")

        assert decision.allowed is False
        assert decision.remaining_minutes == 0
        assert decision.reason == "Daily practice limit reached (15 minutes)"

    @pytest.mark.asyncio
    async def test_unlimited_plan_ignores_usage(self, guard, store):
        store.add_user("user-1", _monthly())
        store.practice_seconds["user-1"] = 500 * 60

        decision = await guard.can_practice_more("user-1")

        assert decision.model_dump(exclude_none=True) == {"allowed": True}

    @pytest.mark.asyncio
    async def test_counts_from_start_of_utc_day(self, guard, store):
        store.add_user("user-1")

        await guard.can_practice_more("user-1")

        assert store.windows == [datetime(2026, 2, 15, tzinfo=timezone.utc)]


# ============================================================================
# Failure modes and locking
# ============================================================================

class TestFailureModes:

    @pytest.mark.asyncio
    async def test_unknown_user_is_denied(self, guard):
        song = await guard.can_create_song("ghost")
        ai = await guard.can_use_ai_generation("ghost")
        practice = await guard.can_practice_more("ghost")

        for decision in (song, ai, practice):
            assert decision.allowed is False
            assert decision.reason == USER_NOT_FOUND_REASON

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            DatabaseError("query failed"),
            OperationalError("SELECT 1", {}, Exception("db down")),
            TimeoutError("timed out"),
        ],
    )
    async def test_store_failure_denies_with_generic_reason(self, guard, store, error):
        store.add_user("user-1")
        store.error = error

        song = await guard.can_create_song("user-1")
        practice = await guard.can_practice_more("user-1")

        assert song.allowed is False
        assert song.reason == CHECK_FAILED_REASON
        assert practice.allowed is False
        assert practice.reason == CHECK_FAILED_REASON

    @pytest.mark.asyncio
    async def test_programming_errors_propagate(self, guard, store):
        store.add_user("user-1")
        store.error = KeyError("bug")

        with pytest.raises(KeyError):
            await guard.can_create_song("user-1")

    @pytest.mark.asyncio
    async def test_lock_is_passed_to_store(self, guard, store):
        store.add_user("user-1")

        await guard.can_create_song("user-1", lock=True)
        await guard.can_practice_more("user-1")

        assert store.lock_calls == [True, False]


class TestCheckAll:

    @pytest.mark.asyncio
    async def test_summary_for_free_user(self, guard, store):
        store.add_user("user-1")
        store.songs["user-1"] = 2
        store.ai_generations["user-1"] = 3
        store.practice_seconds["user-1"] = 300

        summary = await guard.check_all("user-1")

        assert summary.plan == PlanId.FREE
        assert summary.is_premium is False
        assert summary.can_access_premium is False
        assert summary.songs.remaining == 3
        assert summary.ai_generations.allowed is False
        assert summary.practice.remaining_minutes == 10

    @pytest.mark.asyncio
    async def test_summary_for_premium_user(self, guard, store):
        store.add_user("user-1", _monthly())

        summary = await guard.check_all("user-1")

        assert summary.plan == PlanId.MONTHLY
        assert summary.is_premium is True
        assert summary.can_access_premium is True
        assert summary.songs.remaining is None


def test_sentinel_is_minus_one():
    assert UNLIMITED == -1
    assert DEFAULT_PLAN_CATALOG.get(PlanId.MONTHLY).limits.songs_per_month == UNLIMITED
