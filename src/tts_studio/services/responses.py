"""
Batch Response Classification.

The batch endpoint has answered in three shapes over time. The raw body is
classified exactly once, then every shape goes through the same extraction:

    FIELD_LIST    {"audio_files": [e0, e1, ...]}
    BARE_LIST     [e0, e1, ...]
    NUMERIC_KEYS  {"0": e0, "1": e1, ...}   (ordered by numeric key value)
    UNRECOGNIZED  anything else

Each entry is either a base64 string or an object {"data": "<base64>"}.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

AUDIO_LIST_FIELD = "audio_files"
ENTRY_DATA_FIELD = "data"


class ResponseShape(str, Enum):
    FIELD_LIST = "field_list"
    BARE_LIST = "bare_list"
    NUMERIC_KEYS = "numeric_keys"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class BatchResponse:
    """A classified batch body: its shape and its entries in chunk order."""
    shape: ResponseShape
    entries: Tuple[Any, ...] = ()

    @property
    def recognized(self) -> bool:
        return self.shape is not ResponseShape.UNRECOGNIZED


_NUMERIC_KEY = re.compile(r"-?[0-9]+")


def _numeric_key(key: Any) -> Optional[int]:
    text = str(key)
    if not _NUMERIC_KEY.fullmatch(text):
        return None
    return int(text)


def classify_batch_response(raw: Any) -> BatchResponse:
    """Detect the shape of a batch response body."""
    if isinstance(raw, dict) and isinstance(raw.get(AUDIO_LIST_FIELD), list):
        return BatchResponse(ResponseShape.FIELD_LIST, tuple(raw[AUDIO_LIST_FIELD]))

    if isinstance(raw, list):
        return BatchResponse(ResponseShape.BARE_LIST, tuple(raw))

    if isinstance(raw, dict):
        keyed = [(_numeric_key(k), v) for k, v in raw.items()]
        numeric = sorted(((n, v) for n, v in keyed if n is not None), key=lambda kv: kv[0])
        if numeric:
            return BatchResponse(ResponseShape.NUMERIC_KEYS, tuple(v for _, v in numeric))

    return BatchResponse(ResponseShape.UNRECOGNIZED)


def extract_audio_payload(entry: Any) -> Optional[str]:
    """
    Pull the base64 string out of one entry.

    Returns None for entries that are neither a non-empty string nor an
    object with a string ``data`` field.
    """
    if isinstance(entry, str):
        return entry or None
    if isinstance(entry, dict):
        data = entry.get(ENTRY_DATA_FIELD)
        if isinstance(data, str) and data:
            return data
    return None
