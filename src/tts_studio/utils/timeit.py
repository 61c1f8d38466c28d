"""
Timing Utilities.

Example:
    with timeit("chunk") as t:
        await process_chunk(chunk)
    info(log, "chunk_done", seconds=t.seconds)
"""
from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, Optional


@dataclass
class Timing:
    """
    Timing measurement result.

    Attributes:
        name: Identifier for what was timed (e.g., "chunk", "mixdown").
        seconds: Duration in seconds.
        meta: Optional metadata dictionary for additional context.
    """
    name: str
    seconds: float
    meta: Optional[Dict[str, Any]] = None


class timeit:
    """
    Context manager measuring wall-clock time of its body.

    Works around awaits too: the measurement includes time spent suspended.
    """

    def __init__(self, name: str, meta: Optional[Dict[str, Any]] = None):
        self.name = name
        self.meta = meta
        self._t0: float | None = None
        self.timing: Timing | None = None

    def __enter__(self) -> "timeit":
        self._t0 = perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        t1 = perf_counter()
        assert self._t0 is not None
        self.timing = Timing(name=self.name, seconds=(t1 - self._t0), meta=self.meta)

    @property
    def seconds(self) -> float:
        """Elapsed seconds, or -1.0 if the block has not finished."""
        return self.timing.seconds if self.timing else -1.0
