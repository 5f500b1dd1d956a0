"""
Test configuration and fixtures for AI Music Studio.

Provides shared fixtures for unit and integration tests.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from music_studio.domain.plans import PlanId
from music_studio.domain.subscription import Subscription, SubscriptionStatus


# Mid-month, mid-day so month and day windows are both non-trivial.
NOW = datetime(2026, 2, 15, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return NOW


def make_subscription(
    user_id: str = "user-1",
    plan: PlanId = PlanId.FREE,
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    created_at: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc),
    end_date: Optional[datetime] = None,
    **extra,
) -> Subscription:
    return Subscription(
        id=extra.pop("id", f"sub-{plan.value}-{created_at:%Y%m%d}"),
        user_id=user_id,
        plan=plan,
        status=status,
        start_date=created_at,
        end_date=end_date,
        created_at=created_at,
        **extra,
    )


class FakeEntitlementStore:
    """
    In-memory EntitlementStore.

    Returns every subscription it holds so the guard's own resolution is
    what gets exercised. Set `error` to make every call raise.
    """

    def __init__(self):
        self.users: set = set()
        self.subscriptions: Dict[str, List[Subscription]] = {}
        self.songs: Dict[str, int] = {}
        self.ai_generations: Dict[str, int] = {}
        self.practice_seconds: Dict[str, int] = {}
        self.error: Optional[Exception] = None
        self.lock_calls: List[bool] = []
        self.windows: List[datetime] = []

    def add_user(self, user_id: str, *subscriptions: Subscription) -> None:
        self.users.add(user_id)
        self.subscriptions.setdefault(user_id, []).extend(subscriptions)

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    async def get_user_subscriptions(self, user_id, now, lock=False):
        self._maybe_fail()
        self.lock_calls.append(lock)
        if user_id not in self.users:
            return None
        return list(self.subscriptions.get(user_id, []))

    async def count_songs_since(self, user_id, since):
        self._maybe_fail()
        self.windows.append(since)
        return self.songs.get(user_id, 0)

    async def count_ai_generations_since(self, user_id, since):
        self._maybe_fail()
        self.windows.append(since)
        return self.ai_generations.get(user_id, 0)

    async def sum_practice_seconds_since(self, user_id, since):
        self._maybe_fail()
        self.windows.append(since)
        return self.practice_seconds.get(user_id, 0)


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app():
    """Get the FastAPI application with dependency overrides cleared after."""
    from music_studio.main import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Get synchronous test client."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def store():
    return FakeEntitlementStore()

