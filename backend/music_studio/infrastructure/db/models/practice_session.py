"""
Practice Session Model

One singing practice run. Durations are summed per day for the practice
minutes quota.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from music_studio.infrastructure.db.models.base import BaseModel


class PracticeSessionBase(SQLModel):
    session_type: str = Field(default="singing", max_length=50)
    song_id: Optional[str] = Field(default=None, foreign_key="songs.id", max_length=36)
    duration: int = Field(..., ge=0, description="Length in seconds")
    pitch_score: Optional[float] = Field(default=None, ge=0, le=100)
    rhythm_score: Optional[float] = Field(default=None, ge=0, le=100)
    stability_score: Optional[float] = Field(default=None, ge=0, le=100)
    overall_score: Optional[float] = Field(default=None, ge=0, le=100)
    notes: Optional[str] = Field(default=None, max_length=2000)
    audio_url: Optional[str] = Field(default=None, max_length=500)


class PracticeSession(PracticeSessionBase, BaseModel, table=True):
    """Practice session table."""

    __tablename__ = "practice_sessions"

    user_id: str = Field(..., foreign_key="users.id", index=True, max_length=36)


class PracticeSessionCreate(PracticeSessionBase):
    """Schema for creating a practice session."""
    user_id: str


class PracticeSessionRead(PracticeSessionBase):
    """Schema for returning a practice session."""
    id: str
    user_id: str
    created_at: datetime
