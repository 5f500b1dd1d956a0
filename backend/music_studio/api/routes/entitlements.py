"""
Entitlement Routes

Read-only view of what the current user's plan allows right now.
"""

from fastapi import APIRouter

from music_studio.api.dependencies import CurrentUserDep, GuardDep
from music_studio.domain.entitlements import (
    EntitlementSummary,
    PracticeDecision,
    QuotaDecision,
)


router = APIRouter()


@router.get(
    "/entitlements",
    response_model=EntitlementSummary,
    response_model_exclude_none=True,
)
async def get_entitlements(user_id: CurrentUserDep, guard: GuardDep):
    """All quota checks plus the plan in force."""
    return await guard.check_all(user_id)


@router.get("/entitlements/songs", response_model=QuotaDecision, response_model_exclude_none=True)
async def check_song_quota(user_id: CurrentUserDep, guard: GuardDep):
    return await guard.can_create_song(user_id)


@router.get(
    "/entitlements/ai-generations",
    response_model=QuotaDecision,
    response_model_exclude_none=True,
)
async def check_ai_quota(user_id: CurrentUserDep, guard: GuardDep):
    return await guard.can_use_ai_generation(user_id)


@router.get(
    "/entitlements/practice",
    response_model=PracticeDecision,
    response_model_exclude_none=True,
)
async def check_practice_quota(user_id: CurrentUserDep, guard: GuardDep):
    return await guard.can_practice_more(user_id)
