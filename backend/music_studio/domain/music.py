"""
Music Generation Domain Models

Parameters for an AI-composed backing track and the arrangement the model
returns for it.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class MusicGenerationRequest(BaseModel):
    """Parameters for generating a backing track."""
    genre: str = Field(..., min_length=1, max_length=50)
    mood: str = Field(..., min_length=1, max_length=50)
    tempo: int = Field(..., ge=40, le=200, description="Beats per minute")
    key: str = Field(..., min_length=1, max_length=20)
    duration: int = Field(..., ge=15, le=300, description="Track length in seconds")
    instrument: str = Field(..., min_length=1, max_length=50)
    time_signature: Optional[str] = Field(default=None, max_length=10)
    scale_type: Optional[str] = Field(default=None, max_length=30)
    complexity: Optional[int] = Field(default=None, ge=0, le=100)
    instrument_layers: Optional[int] = Field(default=None, ge=1, le=8)

    @property
    def title(self) -> str:
        return f"{self.mood} {self.genre} in {self.key}"


class GeneratedMusic(BaseModel):
    title: str
    genre: str
    mood: str
    tempo: int
    key: str
    duration: int
    instrument: str
    arrangement: str
    model: str
    created_at: datetime
    parameters: MusicGenerationRequest
