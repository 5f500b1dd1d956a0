"""
Gemini AI Service for AI Music Studio

Uses the google.genai SDK to write song lyrics and backing-track
arrangements. Prompt wording is kept here
so routes only deal with validated requests and results.
"""

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from google import genai
from google.genai import errors, types

from music_studio.config.settings import get_settings
from music_studio.domain.lyrics import (
    GeneratedLyrics,
    LyricsRequest,
    parse_karaoke_lines,
)
from music_studio.domain.music import GeneratedMusic, MusicGenerationRequest
from music_studio.infrastructure.exceptions import (
    AIServiceError,
    RateLimitError,
    ConfigurationError,
)


logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are a professional songwriter and lyricist. Create high-quality, "
    "original song lyrics based on user requirements."
)


def build_lyrics_prompt(request: LyricsRequest) -> str:
    """User prompt for a lyrics request."""
    parts = [
        "Generate song lyrics based on the following parameters:",
        "",
        f"Theme: {request.theme}",
        f"Language: {request.language}",
        f"Style: {request.style}",
        f"Idea: {request.idea}",
    ]
    if request.mood:
        parts.append(f"Mood: {request.mood}")
    parts += [
        "",
        "Please write complete song lyrics with:",
        "- Clear verse-chorus structure",
        f"- Rhyming patterns appropriate for {request.style} style",
        "- Emotional depth and storytelling",
        "- Length suitable for a 2-4 minute song",
        "- Format with clear section labels (Verse 1, Chorus, Verse 2, Bridge, etc.)",
        "",
        "The lyrics should be original, creative, and suitable for singing practice.",
    ]
    return "\n".join(parts)


MUSIC_SYSTEM_PROMPT = (
    "You are a music producer and arranger. Describe original, royalty-free "
    "backing tracks precisely enough for a musician to play them."
)

MUSIC_TEMPERATURE = 0.7
MUSIC_MAX_OUTPUT_TOKENS = 2000


def build_music_prompt(request: MusicGenerationRequest) -> str:
    """User prompt for a backing-track request."""
    parts = [
        f"Compose a {request.duration} second {request.genre} backing track "
        f"with a {request.mood} mood.",
        f"Key: {request.key}, Tempo: {request.tempo} BPM, "
        f"Primary instrument: {request.instrument}.",
    ]
    if request.time_signature:
        parts.append(f"Time signature: {request.time_signature}")
    if request.scale_type:
        parts.append(f"Scale type: {request.scale_type}")
    if request.complexity is not None:
        parts.append(f"Complexity level: {request.complexity}/100")
    if request.instrument_layers is not None:
        parts.append(f"Number of instrument layers: {request.instrument_layers}")
    parts += [
        "",
        "The track is for singing practice. Give the section structure "
        "(intro, verse, chorus, outro) with bar counts, the chord progression "
        "of each section and what every instrument layer plays.",
    ]
    return "\n".join(parts)


class GeminiService:
    """
    Lyrics and backing-track generation through Gemini.

    Args:
        api_key: Google AI API key
        model: Gemini model name
        temperature: Sampling temperature for lyrics
        max_output_tokens: Output cap for lyrics
        client: Prebuilt genai.Client (tests)
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        temperature: float = 0.8,
        max_output_tokens: int = 1500,
        client: Optional[genai.Client] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._client = client

    @property
    def model(self) -> str:
        return self._model

    @property
    def client(self) -> genai.Client:
        """Get the Gemini client instance, created on first use."""
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    "Missing GOOGLE_API_KEY environment variable",
                    missing_keys=["GOOGLE_API_KEY"]
                )
            self._client = genai.Client(api_key=self._api_key)
            logger.info(f"GeminiService initialized with model: {self._model}")
        return self._client

    async def _generate(
        self,
        prompt: str,
        system_instruction: str,
        operation: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        """
        One generate_content call; returns the stripped answer text.

        Raises:
            RateLimitError: Gemini returned 429
            AIServiceError: any other API failure or an empty answer
        """
        try:
            response = await self.client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                ),
            )
        except errors.APIError as e:
            if e.code == 429:
                raise RateLimitError("Gemini rate limit exceeded", original_error=e)
            logger.error(f"Gemini {operation} failed: {e}")
            raise AIServiceError(
                f"Failed to {operation.replace('_', ' ')}",
                model=self._model,
                operation=operation,
                original_error=e,
            )

        text = (response.text or "").strip()
        if not text:
            raise AIServiceError(
                "Model returned an empty answer",
                model=self._model,
                operation=operation,
            )
        return text

    async def generate_lyrics(self, request: LyricsRequest) -> GeneratedLyrics:
        """Generate lyrics and their karaoke timing."""
        lyrics = await self._generate(
            build_lyrics_prompt(request),
            SYSTEM_PROMPT,
            "generate_lyrics",
            self._temperature,
            self._max_output_tokens,
        )

        karaoke_lines = parse_karaoke_lines(lyrics)
        return GeneratedLyrics(
            title=f"{request.theme} Song",
            theme=request.theme,
            language=request.language,
            style=request.style,
            mood=request.mood,
            lyrics=lyrics,
            karaoke_lines=karaoke_lines,
            word_count=len(lyrics.split()),
            line_count=len(karaoke_lines),
            model=self._model,
            created_at=datetime.now(timezone.utc),
        )

    async def generate_music(self, request: MusicGenerationRequest) -> GeneratedMusic:
        """Arrangement for a backing track: structure, chords and layers."""
        arrangement = await self._generate(
            build_music_prompt(request),
            MUSIC_SYSTEM_PROMPT,
            "generate_music",
            MUSIC_TEMPERATURE,
            MUSIC_MAX_OUTPUT_TOKENS,
        )

        return GeneratedMusic(
            title=request.title,
            genre=request.genre,
            mood=request.mood,
            tempo=request.tempo,
            key=request.key,
            duration=request.duration,
            instrument=request.instrument,
            arrangement=arrangement,
            model=self._model,
            created_at=datetime.now(timezone.utc),
            parameters=request,
        )


@lru_cache
def get_gemini_service() -> GeminiService:
    """Cached GeminiService built from settings."""
    settings = get_settings()
    return GeminiService(
        api_key=settings.google_api_key,
        model=settings.gemini_model,
        temperature=settings.lyrics_temperature,
        max_output_tokens=settings.lyrics_max_output_tokens,
    )
