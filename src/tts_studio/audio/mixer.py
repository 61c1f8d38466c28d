"""
Offline Mixer.

A fixed-length mono sample buffer into which sources are scheduled, then
rendered in one go. Scheduling follows the usual buffer-source semantics:

    schedule(samples, rate, when=1.5, offset=0.2, duration=2.0, playback_rate=1.25)

plays 2.0 seconds of *source* time starting 0.2 s into the source, begins at
1.5 s on the output, and occupies 2.0 / 1.25 = 1.6 s of output because the
playback rate speeds it up (pitch shifts with it). Sources at a different
sample rate are resampled with linear interpolation in the same step.
Overlapping sources are summed; anything past the buffer end is dropped.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np


@dataclass
class ScheduledSource:
    samples: np.ndarray
    sample_rate: int
    when: float
    offset: float
    duration: float
    playback_rate: float


class OfflineMixer:
    """
    Mono offline mixdown buffer.

    Args:
        length: Output length in samples.
        sample_rate: Output sample rate.
    """

    def __init__(self, length: int, sample_rate: int):
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.length = int(length)
        self.sample_rate = int(sample_rate)
        self._sources: List[ScheduledSource] = []

    @classmethod
    def for_duration(cls, seconds: float, sample_rate: int) -> "OfflineMixer":
        return cls(math.ceil(seconds * sample_rate), sample_rate)

    @property
    def scheduled_count(self) -> int:
        return len(self._sources)

    def schedule(
        self,
        samples: np.ndarray,
        sample_rate: int,
        when: float,
        offset: float = 0.0,
        duration: Optional[float] = None,
        playback_rate: float = 1.0,
    ) -> None:
        """
        Queue a source for rendering.

        Raises:
            ValueError: On a negative start/offset or non-positive rate.
        """
        if when < 0 or offset < 0:
            raise ValueError(f"when/offset must be non-negative, got {when}/{offset}")
        if playback_rate <= 0:
            raise ValueError(f"playback_rate must be positive, got {playback_rate}")
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")

        src = np.asarray(samples, dtype=np.float32).reshape(-1)
        available = len(src) / sample_rate - offset
        span = available if duration is None else min(duration, available)
        if span <= 0:
            return

        self._sources.append(ScheduledSource(src, sample_rate, when, offset, span, playback_rate))

    def render(self) -> np.ndarray:
        """Mix every scheduled source into a new float32 buffer."""
        out = np.zeros(self.length, dtype=np.float32)
        for source in self._sources:
            self._mix_into(out, source)
        return out

    def _mix_into(self, out: np.ndarray, source: ScheduledSource) -> None:
        start = int(round(source.when * self.sample_rate))
        if start >= self.length:
            return

        n_out = int(round(source.duration / source.playback_rate * self.sample_rate))
        n_out = min(n_out, self.length - start)
        if n_out <= 0:
            return

        # Position of every output sample, in source sample units
        step = source.playback_rate * source.sample_rate / self.sample_rate
        positions = source.offset * source.sample_rate + np.arange(n_out, dtype=np.float64) * step
        src_index = np.arange(len(source.samples), dtype=np.float64)
        chunk = np.interp(positions, src_index, source.samples, left=0.0, right=0.0)

        out[start:start + n_out] += chunk.astype(np.float32)
