"""
Repository Layer for AI Music Studio

Exports all repository classes for dependency injection.
"""

from music_studio.infrastructure.db.repositories.base_repository import (
    BaseRepository,
    IReadRepository,
    IWriteRepository,
)
from music_studio.infrastructure.db.repositories.user_repository import (
    UserRepository,
)
from music_studio.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
)
from music_studio.infrastructure.db.repositories.song_repository import (
    SongRepository,
)
from music_studio.infrastructure.db.repositories.practice_session_repository import (
    PracticeSessionRepository,
)
from music_studio.infrastructure.db.repositories.ai_generation_repository import (
    AIGenerationRepository,
)
from music_studio.infrastructure.db.repositories.payment_repository import (
    PaymentRepository,
)
from music_studio.infrastructure.db.repositories.entitlement_repository import (
    EntitlementRepository,
)


__all__ = [
    # Base
    "BaseRepository",
    "IReadRepository",
    "IWriteRepository",
    # Repositories
    "UserRepository",
    "SubscriptionRepository",
    "SongRepository",
    "PracticeSessionRepository",
    "AIGenerationRepository",
    "PaymentRepository",
    "EntitlementRepository",
]
