"""
AI Generation Repository

Usage events for AI generation quotas.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from music_studio.infrastructure.db.repositories.base_repository import BaseRepository
from music_studio.infrastructure.db.models.ai_generation import (
    AIGeneration,
    AIGenerationCreate,
    AIGenerationKind,
)


logger = logging.getLogger(__name__)


class AIGenerationRepository(BaseRepository[AIGeneration, AIGenerationCreate]):
    """Repository for AI generation events."""

    def __init__(self, session: AsyncSession):
        super().__init__(AIGeneration, session)

    async def record(
        self,
        user_id: str,
        kind: AIGenerationKind,
        model: Optional[str] = None,
    ) -> AIGeneration:
        """Record one generation for a user."""
        event = await self.create(
            AIGenerationCreate(user_id=user_id, kind=kind.value, model=model)
        )
        logger.debug(f"Recorded {kind.value} generation for user {user_id}")
        return event

    async def count_since(self, user_id: str, since: datetime) -> int:
        """Generations by a user at or after `since`."""
        stmt = select(func.count(AIGeneration.id)).where(
            AIGeneration.user_id == user_id,
            AIGeneration.created_at >= since,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()
