"""
SQLModel ORM Models for AI Music Studio

Exports all database models for Alembic autogenerate and application use.
Import models here to register them with SQLModel.metadata.
"""

from music_studio.infrastructure.db.models.base import (
    BaseModel,
    TimestampMixin,
    IDMixin,
)
from music_studio.infrastructure.db.models.user import (
    UserAccount,
    UserAccountCreate,
)
from music_studio.infrastructure.db.models.subscription import SubscriptionRecord
from music_studio.infrastructure.db.models.song import (
    Song,
    SongBase,
    SongCreate,
    SongRead,
)
from music_studio.infrastructure.db.models.practice_session import (
    PracticeSession,
    PracticeSessionBase,
    PracticeSessionCreate,
    PracticeSessionRead,
)
from music_studio.infrastructure.db.models.ai_generation import (
    AIGeneration,
    AIGenerationCreate,
    AIGenerationKind,
)
from music_studio.infrastructure.db.models.payment import (
    Payment,
    PaymentStatus,
)


__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    "IDMixin",
    # Users
    "UserAccount",
    "UserAccountCreate",
    # Billing
    "SubscriptionRecord",
    "Payment",
    "PaymentStatus",
    # Usage records
    "Song",
    "SongBase",
    "SongCreate",
    "SongRead",
    "PracticeSession",
    "PracticeSessionBase",
    "PracticeSessionCreate",
    "PracticeSessionRead",
    "AIGeneration",
    "AIGenerationCreate",
    "AIGenerationKind",
]
