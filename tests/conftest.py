"""Shared fixtures: WAV builders and a scriptable fake voice service."""
from __future__ import annotations

import asyncio
import base64
import io
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np
import pytest
import soundfile as sf

from tts_studio.client.schemas import BatchGenerateRequest, GenerateRequest
from tts_studio.errors import RequestFailedError
from tts_studio.timeline import Timeline, pseudo_ids


def make_wav(seconds: float, sample_rate: int = 24000, amplitude: float = 0.5) -> bytes:
    """Constant-amplitude mono WAV of the given length."""
    frames = int(round(seconds * sample_rate))
    samples = np.full(frames, amplitude, dtype=np.float32)
    buf = io.BytesIO()
    sf.write(buf, samples, sample_rate, format="WAV", subtype="PCM_16")
    return buf.getvalue()


def make_b64_wav(seconds: float, sample_rate: int = 24000) -> str:
    return base64.b64encode(make_wav(seconds, sample_rate)).decode("ascii")


BatchHandler = Callable[[BatchGenerateRequest], Any]


class FakeVoiceClient:
    """
    In-memory VoiceServiceClient.

    generate() answers with `single_audio` (bytes, or an exception to raise).
    generate_batch() answers with `batch_handler(request)`; by default one
    base64 WAV per text, each one second long.
    """

    def __init__(
        self,
        single_audio: Union[bytes, Exception, None] = None,
        batch_handler: Optional[BatchHandler] = None,
    ):
        self.single_audio = single_audio if single_audio is not None else make_wav(1.0)
        self.batch_handler = batch_handler or (lambda req: {"audio_files": [make_b64_wav(1.0) for _ in req.texts]})
        self.single_requests: List[GenerateRequest] = []
        self.batch_requests: List[BatchGenerateRequest] = []
        self.gate: Optional[asyncio.Event] = None
        self.in_flight = 0
        self.max_in_flight = 0

    async def _wait_gate(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if self.gate is not None:
                await self.gate.wait()
        finally:
            self.in_flight -= 1

    async def generate(self, request: GenerateRequest) -> bytes:
        self.single_requests.append(request)
        await self._wait_gate()
        if isinstance(self.single_audio, Exception):
            raise self.single_audio
        return self.single_audio

    async def generate_batch(self, request: BatchGenerateRequest) -> Any:
        self.batch_requests.append(request)
        await self._wait_gate()
        result = self.batch_handler(request)
        if isinstance(result, Exception):
            raise result
        return result


def failing(message: str = "service down") -> RequestFailedError:
    return RequestFailedError(message)


@pytest.fixture
def timeline() -> Timeline:
    return Timeline(global_voice="narrator", batch_limit=5, id_generator=pseudo_ids(seed=7))


@pytest.fixture
def fake_client() -> FakeVoiceClient:
    return FakeVoiceClient()


@pytest.fixture
def settings_dict() -> Dict[str, Any]:
    return {
        "service": {"base_url": "http://voice.test", "timeout_s": None},
        "generation": {"batch_limit": 3, "probe_timeout_s": 2.0, "decode_workers": 2},
        "timeline": {"reflow_tolerance_s": 0.05, "global_voice": "narrator"},
        "render": {"sample_rate": 8000, "max_workers": 2},
        "logging": {"level": 1},
    }
