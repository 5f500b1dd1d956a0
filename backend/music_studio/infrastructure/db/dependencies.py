"""
Dependency Injection Providers for AI Music Studio

Provides FastAPI dependencies for database sessions and repositories.
Every provider in a request shares the same session, hence one transaction.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from music_studio.infrastructure.db.database import get_session
from music_studio.infrastructure.db.repositories import (
    AIGenerationRepository,
    EntitlementRepository,
    PaymentRepository,
    PracticeSessionRepository,
    SongRepository,
    SubscriptionRepository,
    UserRepository,
)


# Type alias for session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_user_repository(
    session: SessionDep,
) -> AsyncGenerator[UserRepository, None]:
    """
    Dependency provider for UserRepository.

    Usage:
        @router.get("/users/me")
        async def get_me(repo: UserRepoDep):
            ...
    """
    yield UserRepository(session)


async def get_subscription_repository(
    session: SessionDep,
) -> AsyncGenerator[SubscriptionRepository, None]:
    yield SubscriptionRepository(session)


async def get_song_repository(
    session: SessionDep,
) -> AsyncGenerator[SongRepository, None]:
    yield SongRepository(session)


async def get_practice_session_repository(
    session: SessionDep,
) -> AsyncGenerator[PracticeSessionRepository, None]:
    yield PracticeSessionRepository(session)


async def get_ai_generation_repository(
    session: SessionDep,
) -> AsyncGenerator[AIGenerationRepository, None]:
    yield AIGenerationRepository(session)


async def get_payment_repository(
    session: SessionDep,
) -> AsyncGenerator[PaymentRepository, None]:
    yield PaymentRepository(session)


async def get_entitlement_repository(
    session: SessionDep,
) -> AsyncGenerator[EntitlementRepository, None]:
    yield EntitlementRepository(session)


# Type aliases for repository dependencies
UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]
SubscriptionRepoDep = Annotated[
    SubscriptionRepository,
    Depends(get_subscription_repository)
]
SongRepoDep = Annotated[SongRepository, Depends(get_song_repository)]
PracticeSessionRepoDep = Annotated[
    PracticeSessionRepository,
    Depends(get_practice_session_repository)
]
AIGenerationRepoDep = Annotated[
    AIGenerationRepository,
    Depends(get_ai_generation_repository)
]
PaymentRepoDep = Annotated[PaymentRepository, Depends(get_payment_repository)]
EntitlementRepoDep = Annotated[
    EntitlementRepository,
    Depends(get_entitlement_repository)
]
