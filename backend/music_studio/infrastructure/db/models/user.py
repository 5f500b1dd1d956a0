"""
User Account Model

Minimal user record. Authentication lives with the identity provider; this
table anchors ownership of subscriptions, songs and usage events.
"""

from typing import Optional

from sqlmodel import Field, SQLModel

from music_studio.infrastructure.db.models.base import BaseModel


class UserAccount(BaseModel, table=True):
    """Registered studio user."""

    __tablename__ = "users"

    email: str = Field(..., max_length=255, unique=True, index=True)
    name: Optional[str] = Field(default=None, max_length=100)
    avatar_url: Optional[str] = Field(default=None, max_length=500)


class UserAccountCreate(SQLModel):
    """Schema for creating a user."""
    id: Optional[str] = None
    email: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
