"""
Voice Service Request Schemas.

Request bodies sent to the voice-synthesis backend. Field names follow the
backend's wire format (snake_case ``voice_name``).

Example Requests:
    POST /api/voices/generate
    {"text": "Hello there", "voice_name": "narrator", "language": "korean"}

    POST /api/voices/generate/batch
    {"texts": ["One", "Two"], "voice_name": "narrator", "language": "auto"}
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """Single-text synthesis request; the response body is raw audio."""
    text: str = Field(..., min_length=1, description="Text to synthesize")
    voice_name: str = Field(..., min_length=1, description="Saved voice profile name")
    language: Optional[str] = Field(default=None, description="Language hint")


class BatchGenerateRequest(BaseModel):
    """
    Batched synthesis request for one voice.

    The response is JSON carrying one base64 audio entry per text, in order.
    """
    texts: List[str] = Field(..., min_length=1, description="Texts to synthesize, in order")
    voice_name: str = Field(..., min_length=1, description="Saved voice profile name")
    language: Optional[str] = Field(default="auto", description="Language hint")
