"""
GenerationOrchestrator - drives the voice service and updates blocks.

Single generation:
    block ─► loading ─► POST generate ─► asset ─► probe ─► done ─► reflow(all)
                                 └─ any failure ─► error (timing untouched)

Batched generation:
    targets (selected, else all)
      └─ skip blocks without a voice
      └─ group by voice (first-seen order)
          └─ chunks of at most batch_limit, original order
              └─ loading ─► POST generate/batch ─► classify ─► per-entry
                 decode/probe (concurrent, bounded) ─► leftovers error
                 ─► reflow(chunk)

Chunks and voice groups run strictly one after another: chunk N+1 is not
sent until chunk N's request, parsing and reflow have finished. Failures are
contained to the block (bad entry) or the chunk (failed request); sibling
work always continues and nothing is retried.

A block removed from the timeline while its audio is in flight is never
resurrected: the completion sees it is gone and releases the new asset.

Example:
    >>> orchestrator = GenerationOrchestrator(timeline, client, AssetStore())
    >>> await orchestrator.generate_block(block.id)
    <BlockStatus.DONE: 'done'>
    >>> report = await orchestrator.generate_batch()
    >>> report.done, report.failed
    (12, 0)
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from tts_studio.audio.assets import AssetStore, AudioAsset
from tts_studio.audio.probe import DurationReader, probe_duration
from tts_studio.client.base import VoiceServiceClient
from tts_studio.client.schemas import BatchGenerateRequest, GenerateRequest
from tts_studio.core.config import Defaults, GenerationConfig
from tts_studio.core.logging import debug, error, get_logger, info, set_job_id, verbose, warn
from tts_studio.errors import DecodeFailedError, PreconditionUnmetError
from tts_studio.services.responses import classify_batch_response, extract_audio_payload
from tts_studio.timeline.models import BlockStatus, ScriptBlock
from tts_studio.timeline.reflow import reflow
from tts_studio.timeline.timeline import Timeline
from tts_studio.utils.audio import audio_duration, decode_base64_audio
from tts_studio.utils.timeit import timeit

_LOG = get_logger("tts-studio.generation")


@dataclass
class BatchReport:
    """Outcome of one generate_batch() call."""
    chunks: int = 0
    done: int = 0
    failed: int = 0
    skipped: int = 0  # targets without a voice


def chunk_targets(blocks: Sequence[ScriptBlock], batch_limit: int) -> List[Tuple[str, List[ScriptBlock]]]:
    """
    Split blocks into per-voice chunks of at most batch_limit.

    Blocks without a voice are dropped. Voices appear in first-seen order
    and blocks keep their relative order inside each voice.

    Returns:
        List of (voice_name, chunk) pairs in processing order.
    """
    if batch_limit <= 0:
        raise ValueError(f"batch_limit must be positive, got {batch_limit}")

    groups: Dict[str, List[ScriptBlock]] = {}
    for block in blocks:
        if not block.voice_name:
            continue
        groups.setdefault(block.voice_name, []).append(block)

    return [
        (voice, group[i:i + batch_limit])
        for voice, group in groups.items()
        for i in range(0, len(group), batch_limit)
    ]


class GenerationOrchestrator:
    """
    Runs single and batched generation against a voice service.

    Args:
        timeline: Timeline whose blocks are generated.
        client: Voice service implementation.
        assets: Store issuing the audio asset handles.
        config: Languages, probe timeout and decode worker limit.
        reflow_tolerance: Overlap tolerated by the reflow pass (seconds).
        duration_reader: Blocking bytes -> seconds function used by the probe.
    """

    def __init__(
        self,
        timeline: Timeline,
        client: VoiceServiceClient,
        assets: Optional[AssetStore] = None,
        config: Optional[GenerationConfig] = None,
        reflow_tolerance: float = Defaults.TIMELINE_REFLOW_TOLERANCE_S,
        duration_reader: DurationReader = audio_duration,
    ):
        self.timeline = timeline
        self.client = client
        self.assets = assets or AssetStore()
        self.config = config or GenerationConfig()
        self.reflow_tolerance = reflow_tolerance
        self.duration_reader = duration_reader

    # ─────────────────────────────────────────────────────────────────────────
    # Single generation
    # ─────────────────────────────────────────────────────────────────────────

    async def generate_block(self, block_id: str) -> Optional[BlockStatus]:
        """
        Generate audio for one block.

        Returns:
            The block's final status, or None when nothing was attempted
            (unknown block, missing text or voice) or the block was removed
            while its request was in flight.
        """
        try:
            block = self._require_generatable(block_id)
        except PreconditionUnmetError as e:
            debug(_LOG, "generate_skipped", block=block_id, reason=e.message)
            return None

        set_job_id(f"gen-{uuid4().hex[:8]}")
        block.status = BlockStatus.LOADING
        verbose(_LOG, "generate_started", block=block.id, voice=block.voice_name, chars=len(block.text))

        asset: Optional[AudioAsset] = None
        with timeit("generate") as t:
            try:
                request = GenerateRequest(
                    text=block.text,
                    voice_name=block.voice_name,
                    language=self.config.single_language,
                )
                audio = await self.client.generate(request)
                if not audio:
                    raise DecodeFailedError("voice service returned no audio")
                asset = self.assets.create(audio)
                duration = await self._probe(asset)
            except Exception as e:
                if asset is not None:
                    asset.release()
                error(_LOG, "generate_failed", block=block.id, error=str(e))
                block.status = BlockStatus.ERROR
                return BlockStatus.ERROR

        if not self._complete(block, asset, duration):
            return None

        moved = reflow(self.timeline.blocks, self.reflow_tolerance)
        info(
            _LOG, "generate_done",
            block=block.id,
            status=block.status.value,
            duration=round(duration, 3),
            reflowed=len(moved),
            seconds=t.seconds,
        )
        return block.status

    def _require_generatable(self, block_id: str) -> ScriptBlock:
        block = self.timeline.get(block_id)
        if block is None:
            raise PreconditionUnmetError("block not found", {"block": block_id})
        if not block.text or not block.voice_name:
            raise PreconditionUnmetError("block needs text and a voice", {"block": block_id})
        return block

    # ─────────────────────────────────────────────────────────────────────────
    # Batched generation
    # ─────────────────────────────────────────────────────────────────────────

    async def generate_batch(self) -> BatchReport:
        """Generate the selected blocks, or every block when none is selected."""
        targets = self.timeline.selected_blocks or list(self.timeline.blocks)
        chunks = chunk_targets(targets, self.timeline.batch_limit)

        set_job_id(f"batch-{uuid4().hex[:8]}")
        report = BatchReport(skipped=sum(1 for b in targets if not b.voice_name))
        info(_LOG, "batch_started", targets=len(targets), chunks=len(chunks), skipped=report.skipped)

        for index, (voice, chunk) in enumerate(chunks, start=1):
            await self._run_chunk(index, voice, chunk, report)

        info(_LOG, "batch_done", chunks=report.chunks, done=report.done, failed=report.failed)
        return report

    async def _run_chunk(self, index: int, voice: str, chunk: List[ScriptBlock], report: BatchReport) -> None:
        for block in chunk:
            block.status = BlockStatus.LOADING

        with timeit("chunk") as t:
            try:
                request = BatchGenerateRequest(
                    texts=[b.text for b in chunk],
                    voice_name=voice,
                    language=self.config.batch_language,
                )
                raw = await self.client.generate_batch(request)
            except Exception as e:
                error(_LOG, "chunk_request_failed", chunk=index, voice=voice, size=len(chunk), error=str(e))
                for block in chunk:
                    block.status = BlockStatus.ERROR
                report.chunks += 1
                report.failed += len(chunk)
                return

            await self._apply_response(index, chunk, raw)

        for block in chunk:
            if block.status is BlockStatus.LOADING:
                block.status = BlockStatus.ERROR

        live = [b for b in chunk if b in self.timeline]
        moved = reflow(live, self.reflow_tolerance)

        done = sum(1 for b in chunk if b.status is BlockStatus.DONE)
        report.chunks += 1
        report.done += done
        report.failed += len(chunk) - done
        info(
            _LOG, "chunk_done",
            chunk=index,
            voice=voice,
            size=len(chunk),
            failed=len(chunk) - done,
            reflowed=len(moved),
            seconds=t.seconds,
        )

    async def _apply_response(self, index: int, chunk: List[ScriptBlock], raw: Any) -> None:
        parsed = classify_batch_response(raw)
        if not parsed.recognized:
            warn(_LOG, "chunk_response_malformed", chunk=index, body_type=type(raw).__name__)
            return

        verbose(_LOG, "chunk_response", chunk=index, shape=parsed.shape.value, entries=len(parsed.entries))
        if len(parsed.entries) != len(chunk):
            warn(_LOG, "chunk_entry_mismatch", chunk=index, entries=len(parsed.entries), size=len(chunk))

        limit = asyncio.Semaphore(self.config.decode_workers)
        outcomes = await asyncio.gather(
            *(self._apply_entry(block, entry, limit) for block, entry in zip(chunk, parsed.entries)),
            return_exceptions=True,
        )
        for block, outcome in zip(chunk, outcomes):
            if isinstance(outcome, Exception):
                error(_LOG, "entry_failed", block=block.id, error=str(outcome))

    async def _apply_entry(self, block: ScriptBlock, entry: Any, limit: asyncio.Semaphore) -> None:
        async with limit:
            payload = extract_audio_payload(entry)
            if payload is None:
                warn(_LOG, "entry_unrecognized", block=block.id, entry_type=type(entry).__name__)
                block.status = BlockStatus.ERROR
                return

            try:
                data = decode_base64_audio(payload)
            except DecodeFailedError as e:
                error(_LOG, "entry_decode_failed", block=block.id, error=e.message)
                block.status = BlockStatus.ERROR
                return

            asset = self.assets.create(data)
            try:
                duration = await self._probe(asset)
            except Exception:
                asset.release()
                raise

        self._complete(block, asset, duration)

    async def _probe(self, asset: AudioAsset) -> float:
        return await probe_duration(asset, timeout=self.config.probe_timeout_s, reader=self.duration_reader)

    # ─────────────────────────────────────────────────────────────────────────
    # Completion
    # ─────────────────────────────────────────────────────────────────────────

    def _complete(self, block: ScriptBlock, asset: AudioAsset, duration: float) -> bool:
        """Attach a new asset to the block unless it left the timeline meanwhile."""
        if block not in self.timeline:
            asset.release()
            warn(_LOG, "block_removed_in_flight", block=block.id)
            return False

        previous = block.attach_audio(asset, duration)
        if previous is not None and previous is not asset:
            previous.release()
        debug(_LOG, "block_done", block=block.id, duration=round(duration, 3))
        return True
