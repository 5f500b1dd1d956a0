"""
Base Repository for AI Music Studio

Generic async repository implementing CRUD operations over an AsyncSession.
Records in this system are never physically deleted, so there is no delete.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel


# Type variables for generic repository
ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=SQLModel)


class IReadRepository(ABC, Generic[ModelType]):
    """Interface for read operations."""

    @abstractmethod
    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """Get a single record by ID."""
        pass


class IWriteRepository(ABC, Generic[ModelType, CreateSchemaType]):
    """Interface for write operations."""

    @abstractmethod
    async def create(self, data: CreateSchemaType) -> ModelType:
        """Create a new record."""
        pass

    @abstractmethod
    async def save(self, db_obj: ModelType) -> ModelType:
        """Persist changes to an existing record."""
        pass


class BaseRepository(
    IReadRepository[ModelType],
    IWriteRepository[ModelType, CreateSchemaType],
    Generic[ModelType, CreateSchemaType]
):
    """
    Generic async repository with create/read/save operations.

    Writes are flushed, not committed: the owner of the session (the
    request dependency) commits once at the end.

    Args:
        model: The SQLModel class to operate on
        session: Async database session
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self._model = model
        self._session = session

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """
        Get a single record by its primary key.

        Args:
            id: Primary key

        Returns:
            Model instance or None if not found
        """
        return await self._session.get(self._model, id)

    async def create(self, data: CreateSchemaType) -> ModelType:
        """
        Create a new record.

        Args:
            data: Create schema with field values

        Returns:
            Created model instance
        """
        db_obj = self._model.model_validate(data)
        self._session.add(db_obj)
        await self._session.flush()
        await self._session.refresh(db_obj)
        return db_obj

    async def save(self, db_obj: ModelType) -> ModelType:
        """
        Persist attribute changes made to a loaded record.

        Args:
            db_obj: Model instance attached to this session

        Returns:
            Refreshed model instance
        """
        self._session.add(db_obj)
        await self._session.flush()
        await self._session.refresh(db_obj)
        return db_obj
