"""
ScriptBlock: one clip on the project timeline.

Timing vocabulary:
    duration            raw length of the decoded audio asset (0 until measured)
    source_trim         (start_time, end_time) window played from the asset
    speed               playback-rate multiplier
    effective_duration  (end_time - start_time) / speed, time occupied on the timeline
    timeline_start      where the clip begins on the global timeline
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from tts_studio.audio.assets import AudioAsset


class BlockStatus(str, Enum):
    """Generation state of a block."""
    IDLE = "idle"
    LOADING = "loading"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class SourceTrim:
    """Window within the underlying audio asset that is actually played."""
    start_time: float = 0.0
    end_time: float = 0.0

    def __post_init__(self) -> None:
        if self.start_time < 0 or self.end_time < self.start_time:
            raise ValueError(
                f"invalid trim: start={self.start_time} end={self.end_time}"
            )

    @property
    def span(self) -> float:
        return self.end_time - self.start_time


@dataclass(eq=False)
class ScriptBlock:
    """
    One script/audio unit placed on the timeline.

    Blocks compare by identity: two blocks with identical fields are still
    different clips. The audio asset is owned exclusively by the block;
    whoever replaces or drops it is responsible for releasing it.
    """
    id: str
    text: str = ""
    voice_name: str = ""
    status: BlockStatus = BlockStatus.IDLE
    audio_asset: Optional["AudioAsset"] = None
    source_trim: SourceTrim = field(default_factory=SourceTrim)
    duration: float = 0.0
    speed: float = 1.0
    timeline_start: float = 0.0
    track_id: int = 0
    selected: bool = False

    def __post_init__(self) -> None:
        if self.speed <= 0:
            raise ValueError(f"speed must be positive, got {self.speed}")
        if self.timeline_start < 0:
            raise ValueError(f"timeline_start must be non-negative, got {self.timeline_start}")

    @property
    def start_time(self) -> float:
        return self.source_trim.start_time

    @property
    def end_time(self) -> float:
        return self.source_trim.end_time

    @property
    def effective_duration(self) -> float:
        """Time the block occupies on the timeline."""
        return self.source_trim.span / self.speed

    @property
    def timeline_end(self) -> float:
        return self.timeline_start + self.effective_duration

    def set_speed(self, speed: float) -> None:
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self.speed = float(speed)

    def set_trim(self, start_time: float, end_time: float) -> None:
        """Set the played window; it must lie inside [0, duration]."""
        if end_time > self.duration:
            raise ValueError(f"trim end {end_time} exceeds duration {self.duration}")
        self.source_trim = SourceTrim(float(start_time), float(end_time))

    def move_to(self, timeline_start: float) -> None:
        if timeline_start < 0:
            raise ValueError(f"timeline_start must be non-negative, got {timeline_start}")
        self.timeline_start = float(timeline_start)

    def attach_audio(self, asset: "AudioAsset", duration: float) -> Optional["AudioAsset"]:
        """
        Install a freshly generated asset and reset the trim to cover it.

        Returns the asset previously held (if any) so the caller can
        release it.
        """
        previous = self.audio_asset
        self.audio_asset = asset
        self.duration = max(0.0, float(duration))
        self.source_trim = SourceTrim(0.0, self.duration)
        self.status = BlockStatus.DONE
        return previous

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "voice_name": self.voice_name,
            "status": self.status.value,
            "has_audio": self.audio_asset is not None,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "speed": self.speed,
            "timeline_start": self.timeline_start,
            "track_id": self.track_id,
            "selected": self.selected,
        }
