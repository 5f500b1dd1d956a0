"""
Song Model

Marketplace tracks. Each row also counts as one song-creation usage event
for its author.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from music_studio.infrastructure.db.models.base import BaseModel


class SongSortField(str, Enum):
    """Columns the marketplace listing can be ordered by."""
    CREATED_AT = "created_at"
    TITLE = "title"
    DURATION = "duration"
    PRICE = "price"
    TEMPO = "tempo"


class SongBase(SQLModel):
    """Fields shared between create/read."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    audio_url: str = Field(..., max_length=500)
    cover_image: Optional[str] = Field(default=None, max_length=500)
    duration: int = Field(..., gt=0, description="Length in seconds")
    genre: Optional[str] = Field(default=None, max_length=50, index=True)
    mood: Optional[str] = Field(default=None, max_length=50, index=True)
    language: Optional[str] = Field(default=None, max_length=50)
    tempo: Optional[int] = Field(default=None, gt=0)
    key: Optional[str] = Field(default=None, max_length=10)
    price: int = Field(default=0, ge=0)
    license_type: Optional[str] = Field(default=None, max_length=50)
    tags: Optional[str] = Field(default=None, max_length=500)


class Song(SongBase, BaseModel, table=True):
    """Song table."""

    __tablename__ = "songs"

    author_id: str = Field(..., foreign_key="users.id", index=True, max_length=36)
    is_public: bool = Field(default=True)


class SongCreate(SongBase):
    """Schema for creating a song."""
    author_id: str
    is_public: bool = True


class SongRead(SongBase):
    """Schema for returning a song."""
    id: str
    author_id: str
    is_public: bool
    created_at: datetime
