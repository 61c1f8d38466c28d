"""
HTTP Voice Service Client (httpx).

Usage:
    async with HttpVoiceClient(ServiceConfig(base_url="http://localhost:8000")) as client:
        audio = await client.generate(GenerateRequest(text="Hi", voice_name="narrator"))

No request timeout is applied unless service.timeout_s is set; a hung
request then blocks its chunk indefinitely.
"""
from __future__ import annotations

from typing import Any, Optional

import httpx

from tts_studio.client.schemas import BatchGenerateRequest, GenerateRequest
from tts_studio.core.config import ServiceConfig
from tts_studio.core.logging import debug, get_logger
from tts_studio.errors import MalformedResponseError, RequestFailedError

_LOG = get_logger("tts-studio.client")

GENERATE_PATH = "/api/voices/generate"
GENERATE_BATCH_PATH = "/api/voices/generate/batch"


class HttpVoiceClient:
    """
    VoiceServiceClient backed by httpx.AsyncClient.

    Args:
        config: Base URL and optional timeout.
        client: Pre-built AsyncClient (e.g. with a mock transport in tests).
            When given, the caller owns its lifecycle.
    """

    def __init__(self, config: Optional[ServiceConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or ServiceConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(self.config.timeout_s),
        )

    async def __aenter__(self) -> "HttpVoiceClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(self, path: str, body: dict) -> httpx.Response:
        try:
            response = await self._client.post(path, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RequestFailedError(
                f"voice service returned {e.response.status_code}",
                {"path": path, "status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise RequestFailedError(f"voice service request failed: {e}", {"path": path}) from e
        debug(_LOG, "service_response", path=path, status=response.status_code, bytes=len(response.content))
        return response

    async def generate(self, request: GenerateRequest) -> bytes:
        response = await self._post(GENERATE_PATH, request.model_dump(exclude_none=True))
        return response.content

    async def generate_batch(self, request: BatchGenerateRequest) -> Any:
        response = await self._post(GENERATE_BATCH_PATH, request.model_dump(exclude_none=True))
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError("batch response is not JSON", {"bytes": len(response.content)}) from e
