"""
Lyrics Domain Models

Lyrics generation requests and karaoke line timing.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


# Fixed display time per karaoke line
SECONDS_PER_LINE = 4


class LyricsRequest(BaseModel):
    """Parameters for generating song lyrics."""
    theme: str = Field(..., min_length=1, max_length=100)
    language: str = Field(..., min_length=1, max_length=50)
    style: str = Field(..., min_length=1, max_length=50)
    idea: str = Field(..., min_length=10, max_length=2000)
    mood: Optional[str] = Field(default=None, max_length=50)


class KaraokeLine(BaseModel):
    """One singable line with its display window in seconds."""
    id: str
    text: str
    start_time: int
    end_time: int


class GeneratedLyrics(BaseModel):
    title: str
    theme: str
    language: str
    style: str
    mood: Optional[str] = None
    lyrics: str
    karaoke_lines: List[KaraokeLine]
    word_count: int
    line_count: int
    model: str
    created_at: datetime


def parse_karaoke_lines(lyrics: str) -> List[KaraokeLine]:
    """
    Split lyrics into timed karaoke lines.

    Blank lines and section labels ("Verse 1:", "Chorus:") are dropped.
    """
    lines = [
        line.strip()
        for line in lyrics.splitlines()
        if line.strip() and ":" not in line
    ]
    return [
        KaraokeLine(
            id=f"line-{index}",
            text=text,
            start_time=index * SECONDS_PER_LINE,
            end_time=(index + 1) * SECONDS_PER_LINE,
        )
        for index, text in enumerate(lines)
    ]


def estimated_duration(lines: List[KaraokeLine]) -> int:
    """Seconds needed to show every line once."""
    return len(lines) * SECONDS_PER_LINE
