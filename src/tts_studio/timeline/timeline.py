"""
Timeline: the ordered collection of ScriptBlocks plus project settings.

Insertion order is meaningful: new blocks are provisionally placed right
after the current last block, and batched generation walks blocks in this
order. sort_by_time() normalizes the order after repositioning.
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from tts_studio.core.config import Defaults
from tts_studio.core.logging import debug, get_logger
from tts_studio.timeline.ids import IdGenerator, default_id_generator
from tts_studio.timeline.models import ScriptBlock

_LOG = get_logger("tts-studio.timeline")


class Timeline:
    """
    Ordered blocks, selection state and derived durations.

    Args:
        global_voice: Voice assigned to newly created blocks.
        batch_limit: Maximum texts per batched generation request.
        user_duration_override: Optional floor on the project duration.
        id_generator: Source of block ids (see timeline.ids).
    """

    def __init__(
        self,
        global_voice: str = Defaults.TIMELINE_GLOBAL_VOICE,
        batch_limit: int = Defaults.GENERATION_BATCH_LIMIT,
        user_duration_override: float = 0.0,
        id_generator: Optional[IdGenerator] = None,
    ):
        if batch_limit <= 0:
            raise ValueError(f"batch_limit must be positive, got {batch_limit}")
        self.global_voice = global_voice
        self.batch_limit = batch_limit
        self.user_duration_override = user_duration_override
        self._new_id = id_generator or default_id_generator()
        self._blocks: List[ScriptBlock] = []

    # ─────────────────────────────────────────────────────────────────────────
    # Collection protocol
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def blocks(self) -> List[ScriptBlock]:
        """The live block list, in timeline order."""
        return self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[ScriptBlock]:
        return iter(self._blocks)

    def __contains__(self, block: object) -> bool:
        return any(b is block for b in self._blocks)

    def get(self, block_id: str) -> Optional[ScriptBlock]:
        for block in self._blocks:
            if block.id == block_id:
                return block
        return None

    # ─────────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────────

    def add_block(self, at_index: Optional[int] = None) -> ScriptBlock:
        """
        Create an idle block positioned after the current last block.

        The position is provisional: it uses the last block's effective
        duration, which is zero until that block has been generated.
        """
        start = 0.0
        if self._blocks:
            last = self._blocks[-1]
            last_duration = last.effective_duration if last.duration > 0 else 0.0
            start = last.timeline_start + last_duration

        block = ScriptBlock(
            id=self._new_id(),
            voice_name=self.global_voice or "",
            timeline_start=start,
        )
        if at_index is None:
            self._blocks.append(block)
        else:
            self._blocks.insert(at_index, block)

        debug(_LOG, "block_added", block=block.id, timeline_start=start, index=at_index)
        return block

    def remove_block(self, block_id: str) -> Optional[ScriptBlock]:
        """
        Remove a block by id; no-op if absent.

        The block's audio asset is not released here; use delete_block()
        for that, or release it before calling.
        """
        for idx, block in enumerate(self._blocks):
            if block.id == block_id:
                del self._blocks[idx]
                debug(_LOG, "block_removed", block=block_id)
                return block
        return None

    def delete_block(self, block_id: str) -> bool:
        """Release the block's audio asset and remove it."""
        block = self.get(block_id)
        if block is None:
            return False
        if block.audio_asset is not None:
            block.audio_asset.release()
            block.audio_asset = None
        self.remove_block(block_id)
        return True

    def toggle_selection(self, block_id: str, multi: bool = False) -> None:
        """
        Single-select clears every other selection and selects the block;
        multi-select flips only this block's flag.
        """
        if not multi:
            for block in self._blocks:
                if block.id != block_id:
                    block.selected = False

        block = self.get(block_id)
        if block is None:
            return
        block.selected = True if not multi else not block.selected

    def clear_selection(self) -> None:
        for block in self._blocks:
            block.selected = False

    def sort_by_time(self) -> None:
        """Stable sort by timeline_start."""
        self._blocks.sort(key=lambda b: b.timeline_start)

    # ─────────────────────────────────────────────────────────────────────────
    # Derived values
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def selected_blocks(self) -> List[ScriptBlock]:
        return [b for b in self._blocks if b.selected]

    @property
    def active_block(self) -> Optional[ScriptBlock]:
        """The selected block when exactly one is selected."""
        selected = self.selected_blocks
        return selected[0] if len(selected) == 1 else None

    @property
    def total_duration(self) -> float:
        """End of the latest-ending block."""
        return max((b.timeline_end for b in self._blocks), default=0.0)

    @property
    def project_duration(self) -> float:
        return max(self.total_duration, self.user_duration_override or 0.0)

    def snapshot(self) -> List[Dict[str, Any]]:
        return [b.to_dict() for b in self._blocks]
