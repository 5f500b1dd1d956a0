"""
AI Generation Usage Event

One row per AI generation call (lyrics, music). Monthly AI quotas are
counted from this table.
"""

from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from music_studio.infrastructure.db.models.base import BaseModel


class AIGenerationKind(str, Enum):
    """What was generated."""
    LYRICS = "lyrics"
    MUSIC = "music"


class AIGeneration(BaseModel, table=True):
    """AI generation usage event."""

    __tablename__ = "ai_generations"

    user_id: str = Field(..., foreign_key="users.id", index=True, max_length=36)
    kind: str = Field(..., max_length=20, description="Type of generation")
    model: Optional[str] = Field(default=None, max_length=100)


class AIGenerationCreate(SQLModel):
    """Schema for recording a generation."""
    user_id: str
    kind: str
    model: Optional[str] = None
