"""
Audio Asset Handles.

An AudioAsset is an opaque handle to decoded-from-the-wire audio bytes,
issued by an AssetStore. Exactly one block owns each live asset; when the
block's audio is replaced or the block is deleted the asset must be
released, after which its bytes are dropped and reads fail.

Usage:
    store = AssetStore()
    asset = store.create(wav_bytes)
    ...
    asset.release()
    assert store.live_count == 0
"""
from __future__ import annotations

import itertools
from typing import Dict, Optional

from tts_studio.core.logging import debug, get_logger

_LOG = get_logger("tts-studio.assets")

DEFAULT_MEDIA_TYPE = "audio/wav"


class AssetReleasedError(ValueError):
    """Raised when reading an asset that has already been released."""


class AudioAsset:
    """Handle to one audio resource held by an AssetStore."""

    __slots__ = ("asset_id", "media_type", "_data", "_store")

    def __init__(self, asset_id: str, data: bytes, media_type: str, store: "AssetStore"):
        self.asset_id = asset_id
        self.media_type = media_type
        self._data: Optional[bytes] = data
        self._store = store

    @property
    def released(self) -> bool:
        return self._data is None

    @property
    def size(self) -> int:
        return len(self._data) if self._data is not None else 0

    def read(self) -> bytes:
        if self._data is None:
            raise AssetReleasedError(f"asset {self.asset_id} has been released")
        return self._data

    def release(self) -> None:
        """Release the asset; releasing twice is a no-op."""
        self._store.release(self)

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self.size}B"
        return f"AudioAsset({self.asset_id!r}, {self.media_type!r}, {state})"


class AssetStore:
    """Issues and tracks live audio assets."""

    def __init__(self, prefix: str = "asset"):
        self._prefix = prefix
        self._counter = itertools.count(1)
        self._live: Dict[str, AudioAsset] = {}

    def create(self, data: bytes, media_type: str = DEFAULT_MEDIA_TYPE) -> AudioAsset:
        asset = AudioAsset(f"{self._prefix}-{next(self._counter)}", bytes(data), media_type, self)
        self._live[asset.asset_id] = asset
        debug(_LOG, "asset_created", asset=asset.asset_id, bytes=asset.size)
        return asset

    def release(self, asset: AudioAsset) -> None:
        if self._live.pop(asset.asset_id, None) is None:
            return
        asset._data = None
        debug(_LOG, "asset_released", asset=asset.asset_id)

    def resolve(self, asset_id: str) -> Optional[AudioAsset]:
        return self._live.get(asset_id)

    @property
    def live_count(self) -> int:
        return len(self._live)

    def __contains__(self, asset: object) -> bool:
        return isinstance(asset, AudioAsset) and self._live.get(asset.asset_id) is asset
