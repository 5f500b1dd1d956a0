"""
Entitlement Repository

The persistent store behind the entitlement guard: user lookup with the
user's in-force subscriptions, plus usage aggregates per window. All
queries run on the caller's session so a locked check and the insert that
follows it share one transaction.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from music_studio.domain.subscription import Subscription
from music_studio.infrastructure.db.repositories.user_repository import UserRepository
from music_studio.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
)
from music_studio.infrastructure.db.repositories.song_repository import SongRepository
from music_studio.infrastructure.db.repositories.practice_session_repository import (
    PracticeSessionRepository,
)
from music_studio.infrastructure.db.repositories.ai_generation_repository import (
    AIGenerationRepository,
)


class EntitlementRepository:
    """Read-mostly queries used by EntitlementGuard."""

    def __init__(self, session: AsyncSession):
        self._users = UserRepository(session)
        self._subscriptions = SubscriptionRepository(session)
        self._songs = SongRepository(session)
        self._practice = PracticeSessionRepository(session)
        self._generations = AIGenerationRepository(session)

    async def get_user_subscriptions(
        self,
        user_id: str,
        now: datetime,
        lock: bool = False,
    ) -> Optional[List[Subscription]]:
        """
        Effective subscriptions for a user, newest first.

        Args:
            user_id: User ID
            now: Instant used for the end-date filter
            lock: Take a row lock on the user for the rest of the transaction

        Returns:
            List (possibly empty) of subscriptions, or None if the user
            does not exist
        """
        if lock:
            user = await self._users.get_for_update(user_id)
        else:
            user = await self._users.get_by_id(user_id)

        if user is None:
            return None

        return await self._subscriptions.list_effective_for_user(user_id, now)

    async def count_songs_since(self, user_id: str, since: datetime) -> int:
        return await self._songs.count_by_author_since(user_id, since)

    async def count_ai_generations_since(self, user_id: str, since: datetime) -> int:
        return await self._generations.count_since(user_id, since)

    async def sum_practice_seconds_since(self, user_id: str, since: datetime) -> int:
        return await self._practice.sum_duration_since(user_id, since)
