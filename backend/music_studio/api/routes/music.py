"""
Music Generation Routes

AI backing-track generation, counted against the monthly AI generation
quota together with lyrics.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from music_studio.api.dependencies import (
    AIGenerationRepoDep,
    CurrentUserDep,
    GeminiDep,
    GuardDep,
)
from music_studio.config.settings import get_settings
from music_studio.domain.music import GeneratedMusic, MusicGenerationRequest
from music_studio.infrastructure.db.models.ai_generation import AIGenerationKind


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/music-generation", response_model=GeneratedMusic)
async def generate_music(
    request: MusicGenerationRequest,
    user_id: CurrentUserDep,
    guard: GuardDep,
    gemini: GeminiDep,
    generations: AIGenerationRepoDep,
):
    decision = await guard.can_use_ai_generation(
        user_id, lock=get_settings().strict_quota_enforcement
    )
    if not decision.allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=decision.reason)

    result = await gemini.generate_music(request)
    await generations.record(user_id, AIGenerationKind.MUSIC, model=result.model)

    logger.info(f"Generated {request.genre} backing track for user {user_id}")
    return result
