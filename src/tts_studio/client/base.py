"""
Voice Service Contract.

The generation orchestrator only talks to the backend through this
protocol, so tests and alternative transports can stand in for HTTP.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from tts_studio.client.schemas import BatchGenerateRequest, GenerateRequest


@runtime_checkable
class VoiceServiceClient(Protocol):
    """
    Narrow request/response contract of the voice-synthesis backend.

    Implementations raise RequestFailedError for transport and service
    errors, and MalformedResponseError when a batch body is not JSON.
    """

    async def generate(self, request: GenerateRequest) -> bytes:
        """Synthesize one text; returns encoded audio bytes."""
        ...

    async def generate_batch(self, request: BatchGenerateRequest) -> Any:
        """Synthesize several texts with one voice; returns the decoded JSON body."""
        ...
