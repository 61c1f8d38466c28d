"""
Reflow: push blocks later so none starts before its predecessor ends.

Single forward pass over the given order, one lane, no re-sort. A block is
only ever moved later, and only to the exact end of the block before it.
Overlaps smaller than the tolerance are left alone; they come from float
and duration-measurement jitter.
"""
from __future__ import annotations

from typing import List, Sequence

from tts_studio.core.config import Defaults
from tts_studio.timeline.models import ScriptBlock

DEFAULT_TOLERANCE_S = Defaults.TIMELINE_REFLOW_TOLERANCE_S


def reflow(blocks: Sequence[ScriptBlock], tolerance: float = DEFAULT_TOLERANCE_S) -> List[str]:
    """
    Resolve overlaps between adjacent blocks in place.

    Args:
        blocks: Blocks in timeline order (track_id is ignored).
        tolerance: Overlap in seconds that is tolerated without moving.

    Returns:
        Ids of the blocks that were moved, in pass order.
    """
    moved: List[str] = []
    for prev, curr in zip(blocks, blocks[1:]):
        prev_end = prev.timeline_start + prev.effective_duration
        if curr.timeline_start < prev_end - tolerance:
            curr.timeline_start = prev_end
            moved.append(curr.id)
    return moved
