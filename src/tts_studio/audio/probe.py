"""
Duration Probing.

Reads the true duration of an asset from its header, off the event loop.
If the metadata read does not finish within the timeout, or the header is
unreadable, the duration is reported as 0.0. Callers treat 0.0 as
"unknown, lay it out as zero-length", never as an error.
"""
from __future__ import annotations

import asyncio
from typing import Callable

from tts_studio.audio.assets import AudioAsset
from tts_studio.core.config import Defaults
from tts_studio.core.logging import get_logger, verbose, warn
from tts_studio.errors import DecodeFailedError
from tts_studio.utils.audio import audio_duration

_LOG = get_logger("tts-studio.probe")

DurationReader = Callable[[bytes], float]


async def probe_duration(
    asset: AudioAsset,
    timeout: float = Defaults.GENERATION_PROBE_TIMEOUT_S,
    reader: DurationReader = audio_duration,
) -> float:
    """
    Return the asset's duration in seconds, or 0.0 if it cannot be read in time.

    Args:
        asset: Asset to measure.
        timeout: Seconds to wait for the metadata read.
        reader: Function mapping audio bytes to seconds (blocking).
    """
    data = asset.read()
    try:
        duration = await asyncio.wait_for(asyncio.to_thread(reader, data), timeout)
    except asyncio.TimeoutError:
        warn(_LOG, "probe_timeout", asset=asset.asset_id, timeout_s=timeout)
        return 0.0
    except DecodeFailedError as e:
        warn(_LOG, "probe_unreadable", asset=asset.asset_id, error=e.message)
        return 0.0

    verbose(_LOG, "probe_done", asset=asset.asset_id, duration=round(duration, 3))
    return max(0.0, float(duration))
