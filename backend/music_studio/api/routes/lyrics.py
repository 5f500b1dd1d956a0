"""
Lyrics Routes

AI lyrics generation (counted against the monthly AI generation quota)
and karaoke line timing for existing lyrics.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from music_studio.api.dependencies import (
    AIGenerationRepoDep,
    CurrentUserDep,
    GeminiDep,
    GuardDep,
)
from music_studio.config.settings import get_settings
from music_studio.domain.lyrics import (
    GeneratedLyrics,
    KaraokeLine,
    LyricsRequest,
    estimated_duration,
    parse_karaoke_lines,
)
from music_studio.infrastructure.db.models.ai_generation import AIGenerationKind


logger = logging.getLogger(__name__)

router = APIRouter()


class KaraokeRequest(BaseModel):
    lyrics: str = Field(..., min_length=1, max_length=20000)


class KaraokeResponse(BaseModel):
    lines: List[KaraokeLine]
    total_lines: int
    estimated_duration: int


@router.post("/lyrics", response_model=GeneratedLyrics)
async def generate_lyrics(
    request: LyricsRequest,
    user_id: CurrentUserDep,
    guard: GuardDep,
    gemini: GeminiDep,
    generations: AIGenerationRepoDep,
):
    """
    Generate lyrics with Gemini.

    Only successful generations are counted against the quota.
    """
    decision = await guard.can_use_ai_generation(
        user_id, lock=get_settings().strict_quota_enforcement
    )
    if not decision.allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=decision.reason)

    result = await gemini.generate_lyrics(request)
    await generations.record(user_id, AIGenerationKind.LYRICS, model=result.model)

    logger.info(f"Generated lyrics for user {user_id} ({result.line_count} lines)")
    return result


@router.post("/lyrics/karaoke", response_model=KaraokeResponse)
async def build_karaoke(request: KaraokeRequest, user_id: CurrentUserDep):
    """Timed karaoke lines for lyrics the user already has."""
    lines = parse_karaoke_lines(request.lyrics)
    return KaraokeResponse(
        lines=lines,
        total_lines=len(lines),
        estimated_duration=estimated_duration(lines),
    )
