"""
Practice Session Repository

Extends BaseRepository with per-user history and aggregate queries.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from music_studio.infrastructure.db.repositories.base_repository import BaseRepository
from music_studio.infrastructure.db.models.practice_session import (
    PracticeSession,
    PracticeSessionCreate,
)


class PracticeSessionRepository(BaseRepository[PracticeSession, PracticeSessionCreate]):
    """Repository for practice sessions."""

    def __init__(self, session: AsyncSession):
        super().__init__(PracticeSession, session)

    def _user_filters(self, user_id: str, session_type: Optional[str]) -> list:
        filters = [PracticeSession.user_id == user_id]
        if session_type:
            filters.append(PracticeSession.session_type == session_type)
        return filters

    async def get_by_user(
        self,
        user_id: str,
        session_type: Optional[str] = None,
        limit: int = 10,
    ) -> List[PracticeSession]:
        """Recent sessions for a user, newest first."""
        stmt = (
            select(PracticeSession)
            .where(*self._user_filters(user_id, session_type))
            .order_by(PracticeSession.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_stats(
        self,
        user_id: str,
        session_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Session count, total seconds and average scores for a user."""
        stmt = select(
            func.count(PracticeSession.id).label("total_sessions"),
            func.coalesce(func.sum(PracticeSession.duration), 0).label("total_duration"),
            func.avg(PracticeSession.pitch_score).label("pitch"),
            func.avg(PracticeSession.rhythm_score).label("rhythm"),
            func.avg(PracticeSession.stability_score).label("stability"),
            func.avg(PracticeSession.overall_score).label("overall"),
        ).where(*self._user_filters(user_id, session_type))
        row = (await self._session.execute(stmt)).one()
        return {
            "total_sessions": row.total_sessions,
            "total_duration": int(row.total_duration),
            "average_scores": {
                "pitch": float(row.pitch or 0),
                "rhythm": float(row.rhythm or 0),
                "stability": float(row.stability or 0),
                "overall": float(row.overall or 0),
            },
        }

    async def sum_duration_since(self, user_id: str, since: datetime) -> int:
        """Total practice seconds recorded at or after `since`."""
        stmt = select(
            func.coalesce(func.sum(PracticeSession.duration), 0)
        ).where(
            PracticeSession.user_id == user_id,
            PracticeSession.created_at >= since,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())
