"""
Audio Renderer: offline mixdown and WAV export of a project.

Pipeline:
    blocks ──► decode (concurrent, bounded) ──► schedule on OfflineMixer
           ──► render ──► 16-bit PCM WAV ──► voice_project_<date>.wav

Only blocks that are ``done`` and hold an asset contribute. A block whose
audio fails to decode is logged and left out; the rest of the mix goes on.
A missing mixer or an empty project aborts the export with an error.
"""
from __future__ import annotations

import asyncio
import math
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Optional, Sequence

import numpy as np

from tts_studio.audio.assets import AssetReleasedError
from tts_studio.audio.mixer import OfflineMixer
from tts_studio.core.config import RenderConfig
from tts_studio.core.logging import error, get_logger, info, success, verbose, warn
from tts_studio.errors import DecodeFailedError, EmptyProjectError, RenderingUnsupportedError
from tts_studio.timeline.models import BlockStatus, ScriptBlock
from tts_studio.timeline.timeline import Timeline
from tts_studio.utils.audio import decode_audio, wav_bytes_from_float32
from tts_studio.utils.timeit import timeit

_LOG = get_logger("tts-studio.renderer")

MixerFactory = Callable[[int, int], OfflineMixer]
Clock = Callable[[], datetime]


class AudioRenderer:
    """
    Mix a project down to one mono buffer and export it.

    Args:
        config: Render settings (sample rate, workers, output location).
        mixer_factory: Builds the offline mixer from (length, sample_rate).
            None means no offline rendering capability is available.
        clock: Source of "now" for the export filename.
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        mixer_factory: Optional[MixerFactory] = OfflineMixer,
        clock: Clock = datetime.now,
    ):
        self.config = config or RenderConfig()
        self._mixer_factory = mixer_factory
        self._clock = clock

    def export_filename(self, day: Optional[date] = None) -> str:
        day = day or self._clock().date()
        return f"{self.config.filename_prefix}_{day.isoformat()}.wav"

    def _create_mixer(self, length: int) -> OfflineMixer:
        if self._mixer_factory is None:
            raise RenderingUnsupportedError("offline rendering is not available")
        try:
            return self._mixer_factory(length, self.config.sample_rate)
        except (RuntimeError, ValueError, MemoryError) as e:
            raise RenderingUnsupportedError(
                f"cannot allocate offline mixer: {e}",
                {"length": length, "sample_rate": self.config.sample_rate},
            ) from e

    async def mixdown(self, blocks: Sequence[ScriptBlock], project_duration: float) -> np.ndarray:
        """
        Render every finished block into one float32 buffer.

        The buffer holds ceil(project_duration * sample_rate) samples;
        regions no block covers stay silent.

        Raises:
            EmptyProjectError: No blocks or a non-positive duration.
            RenderingUnsupportedError: The mixer cannot be created.
        """
        if not blocks or project_duration <= 0:
            raise EmptyProjectError(
                "nothing to render",
                {"blocks": len(blocks), "duration": project_duration},
            )

        length = math.ceil(project_duration * self.config.sample_rate)
        mixer = self._create_mixer(length)

        playable = [b for b in blocks if b.status is BlockStatus.DONE and b.audio_asset is not None]
        limit = asyncio.Semaphore(self.config.max_workers)

        with timeit("mixdown") as t:
            results = await asyncio.gather(*(self._schedule_block(mixer, b, limit) for b in playable))
            rendered = await asyncio.to_thread(mixer.render)

        info(
            _LOG, "mixdown_done",
            blocks=len(playable),
            scheduled=mixer.scheduled_count,
            failed=results.count(False),
            samples=len(rendered),
            seconds=t.seconds,
        )
        return rendered

    async def _schedule_block(self, mixer: OfflineMixer, block: ScriptBlock, limit: asyncio.Semaphore) -> bool:
        async with limit:
            try:
                samples, sample_rate = await asyncio.to_thread(decode_audio, block.audio_asset.read())
            except (DecodeFailedError, AssetReleasedError) as e:
                error(_LOG, "block_decode_failed", block=block.id, error=str(e))
                return False

        offset = block.start_time
        end = block.end_time or len(samples) / sample_rate
        span = end - offset
        if span <= 0:
            verbose(_LOG, "block_skipped_empty", block=block.id)
            return True

        try:
            mixer.schedule(
                samples,
                sample_rate,
                when=block.timeline_start,
                offset=offset,
                duration=span,
                playback_rate=block.speed,
            )
        except ValueError as e:
            error(_LOG, "block_schedule_failed", block=block.id, error=str(e))
            return False

        verbose(_LOG, "block_scheduled", block=block.id, when=block.timeline_start, span=round(span, 3))
        return True

    def encode(self, samples: np.ndarray) -> bytes:
        return wav_bytes_from_float32(samples, self.config.sample_rate)

    async def render_wav(self, timeline: Timeline) -> bytes:
        samples = await self.mixdown(timeline.blocks, timeline.project_duration)
        return self.encode(samples)

    async def export(self, timeline: Timeline, output_dir: Optional[str | Path] = None) -> Path:
        """
        Render the timeline and write voice_project_<date>.wav.

        Returns:
            Path of the written file.
        """
        try:
            wav = await self.render_wav(timeline)
        except (EmptyProjectError, RenderingUnsupportedError) as e:
            warn(_LOG, "export_aborted", code=e.code, error=e.message)
            raise

        target_dir = Path(output_dir if output_dir is not None else self.config.output_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / self.export_filename()
        path.write_bytes(wav)

        success(_LOG, "export_written", path=str(path), bytes=len(wav))
        return path
