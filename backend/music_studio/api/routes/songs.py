"""
Song Routes

Song creation (counted against the monthly song quota) and the public
marketplace listing.
"""

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from music_studio.api.dependencies import CurrentUserDep, GuardDep, SongRepoDep
from music_studio.config.settings import get_settings
from music_studio.infrastructure.db.models.song import (
    SongBase,
    SongCreate,
    SongRead,
    SongSortField,
)


logger = logging.getLogger(__name__)

router = APIRouter()


class CreateSongRequest(SongBase):
    """Song metadata; the author is the authenticated user."""
    is_public: bool = True


class SongListResponse(BaseModel):
    songs: List[SongRead]
    total: int
    page: int
    limit: int
    pages: int


@router.post("/songs", response_model=SongRead, status_code=status.HTTP_201_CREATED)
async def create_song(
    request: CreateSongRequest,
    user_id: CurrentUserDep,
    guard: GuardDep,
    repo: SongRepoDep,
):
    """Create a song if the monthly quota allows it."""
    decision = await guard.can_create_song(
        user_id, lock=get_settings().strict_quota_enforcement
    )
    if not decision.allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=decision.reason)

    song = await repo.create(SongCreate(author_id=user_id, **request.model_dump()))
    logger.info(f"User {user_id} created song {song.id}")
    return SongRead.model_validate(song, from_attributes=True)


@router.get("/songs", response_model=SongListResponse)
async def list_songs(
    repo: SongRepoDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    genre: Optional[str] = None,
    mood: Optional[str] = None,
    license_type: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=100),
    sort_by: SongSortField = SongSortField.CREATED_AT,
    sort_order: Literal["asc", "desc"] = "desc",
):
    """Public marketplace songs, newest first by default."""
    skip = (page - 1) * limit
    songs = await repo.list_public(
        skip=skip,
        limit=limit,
        genre=genre,
        mood=mood,
        license_type=license_type,
        search=search,
        sort_by=sort_by,
        descending=sort_order == "desc",
    )
    total = await repo.count_public(
        genre=genre, mood=mood, license_type=license_type, search=search
    )
    return SongListResponse(
        songs=[SongRead.model_validate(s, from_attributes=True) for s in songs],
        total=total,
        page=page,
        limit=limit,
        pages=(total + limit - 1) // limit,
    )
