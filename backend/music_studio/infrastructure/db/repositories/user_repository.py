"""
User Repository

Lookup and row locking for user accounts.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from music_studio.infrastructure.db.repositories.base_repository import BaseRepository
from music_studio.infrastructure.db.models.user import (
    UserAccount,
    UserAccountCreate,
)


class UserRepository(BaseRepository[UserAccount, UserAccountCreate]):
    """Repository for user accounts."""

    def __init__(self, session: AsyncSession):
        super().__init__(UserAccount, session)

    async def get_for_update(self, user_id: str) -> Optional[UserAccount]:
        """
        Load a user and hold a row lock until the transaction ends.

        Serializes check-then-insert sequences for one user. SQLite ignores
        FOR UPDATE.
        """
        stmt = (
            select(UserAccount)
            .where(UserAccount.id == user_id)
            .with_for_update()
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        stmt = select(UserAccount).where(UserAccount.email == email)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
