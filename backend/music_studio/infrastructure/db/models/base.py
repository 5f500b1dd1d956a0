"""
Base Model for SQLModel ORM

Provides common fields and behavior for all database models.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class TimestampMixin(SQLModel):
    """
    Mixin providing timestamp fields for models.

    Usage windows are computed against created_at, so it is indexed and
    always stored with its time zone.
    """

    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        index=True,
        sa_type=DateTime(timezone=True),
        description="Record creation timestamp (UTC)"
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utcnow},
        description="Last update timestamp (UTC)"
    )


class IDMixin(SQLModel):
    """Mixin providing a string UUID primary key."""

    id: str = Field(
        default_factory=new_id,
        primary_key=True,
        max_length=36,
        nullable=False,
        description="Unique identifier (UUID v4 string)"
    )


class BaseModel(IDMixin, TimestampMixin):
    """
    Base model combining ID and timestamp mixins.

    Provides: id, created_at, updated_at
    """
