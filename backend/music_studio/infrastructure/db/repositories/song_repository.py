"""
Song Repository

Extends BaseRepository with marketplace and quota queries.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from music_studio.infrastructure.db.repositories.base_repository import BaseRepository
from music_studio.infrastructure.db.models.song import Song, SongCreate, SongSortField


class SongRepository(BaseRepository[Song, SongCreate]):
    """Repository for songs."""

    def __init__(self, session: AsyncSession):
        super().__init__(Song, session)

    def _public_filters(
        self,
        genre: Optional[str],
        mood: Optional[str],
        license_type: Optional[str],
        search: Optional[str],
    ) -> list:
        filters = [Song.is_public.is_(True)]
        if genre:
            filters.append(Song.genre == genre)
        if mood:
            filters.append(Song.mood == mood)
        if license_type:
            filters.append(Song.license_type == license_type)
        if search:
            pattern = f"%{search}%"
            filters.append(
                or_(
                    Song.title.ilike(pattern),
                    Song.description.ilike(pattern),
                    Song.tags.ilike(pattern),
                )
            )
        return filters

    async def list_public(
        self,
        skip: int = 0,
        limit: int = 10,
        genre: Optional[str] = None,
        mood: Optional[str] = None,
        license_type: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: SongSortField = SongSortField.CREATED_AT,
        descending: bool = True,
    ) -> List[Song]:
        """Public marketplace songs, newest first unless another order is given."""
        column = getattr(Song, SongSortField(sort_by).value)
        stmt = (
            select(Song)
            .where(*self._public_filters(genre, mood, license_type, search))
            .order_by(column.desc() if descending else column.asc(), Song.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count_public(
        self,
        genre: Optional[str] = None,
        mood: Optional[str] = None,
        license_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> int:
        stmt = (
            select(func.count(Song.id))
            .where(*self._public_filters(genre, mood, license_type, search))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def count_by_author_since(self, author_id: str, since: datetime) -> int:
        """Songs created by an author at or after `since`."""
        stmt = select(func.count(Song.id)).where(
            Song.author_id == author_id,
            Song.created_at >= since,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()
