"""
Voice Service Client.

    - base.py: VoiceServiceClient protocol (the narrow contract)
    - schemas.py: Pydantic request bodies
    - http.py: httpx implementation against the backend's REST endpoints
"""
from .base import VoiceServiceClient
from .http import HttpVoiceClient
from .schemas import BatchGenerateRequest, GenerateRequest

__all__ = [
    "BatchGenerateRequest",
    "GenerateRequest",
    "HttpVoiceClient",
    "VoiceServiceClient",
]
