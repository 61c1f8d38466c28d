"""
Audio Handling.

    - assets.py: AudioAsset handles and the AssetStore that issues them
    - probe.py: Bounded-time duration probing
    - mixer.py: OfflineMixer (scheduling, resampling, summing)
    - renderer.py: AudioRenderer (mixdown, WAV encoding, export)
"""
from .assets import AssetReleasedError, AssetStore, AudioAsset
from .mixer import OfflineMixer
from .probe import probe_duration
from .renderer import AudioRenderer

__all__ = [
    "AssetReleasedError",
    "AssetStore",
    "AudioAsset",
    "AudioRenderer",
    "OfflineMixer",
    "probe_duration",
]
