"""
Practice Routes

Recording singing practice sessions against the daily practice quota.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from music_studio.api.dependencies import (
    CurrentUserDep,
    GuardDep,
    PracticeSessionRepoDep,
)
from music_studio.config.settings import get_settings
from music_studio.infrastructure.db.models.practice_session import (
    PracticeSessionBase,
    PracticeSessionCreate,
    PracticeSessionRead,
)


logger = logging.getLogger(__name__)

router = APIRouter()


class PracticeStats(BaseModel):
    total_sessions: int
    total_duration: int
    average_scores: Dict[str, float]


class PracticeHistoryResponse(BaseModel):
    sessions: List[PracticeSessionRead]
    stats: PracticeStats


@router.post(
    "/practice",
    response_model=PracticeSessionRead,
    status_code=status.HTTP_201_CREATED,
)
async def record_practice_session(
    request: PracticeSessionBase,
    user_id: CurrentUserDep,
    guard: GuardDep,
    repo: PracticeSessionRepoDep,
):
    """Store a finished session while today's practice quota lasts."""
    decision = await guard.can_practice_more(
        user_id, lock=get_settings().strict_quota_enforcement
    )
    if not decision.allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=decision.reason)

    session = await repo.create(
        PracticeSessionCreate(user_id=user_id, **request.model_dump())
    )
    logger.info(f"User {user_id} recorded {session.duration}s of practice")
    return PracticeSessionRead.model_validate(session, from_attributes=True)


@router.get("/practice", response_model=PracticeHistoryResponse)
async def get_practice_history(
    user_id: CurrentUserDep,
    repo: PracticeSessionRepoDep,
    session_type: Optional[str] = None,
    limit: int = Query(10, ge=1, le=100),
):
    """Recent sessions and aggregate scores."""
    sessions = await repo.get_by_user(user_id, session_type=session_type, limit=limit)
    stats = await repo.get_stats(user_id, session_type=session_type)
    return PracticeHistoryResponse(
        sessions=[PracticeSessionRead.model_validate(s, from_attributes=True) for s in sessions],
        stats=PracticeStats(**stats),
    )
