"""
Audio Processing Utilities.

Decoding goes through soundfile (libsndfile), so any container it reads is
accepted from the voice service. Export always produces the same format:

    - RIFF/WAVE container with the canonical 44-byte header
    - PCM 16-bit signed little-endian
    - Mono

Quantization to int16 happens here in numpy so the rounding rule is ours;
libsndfile only writes the already-quantized samples.

Example:
    >>> samples = np.zeros(44100, dtype=np.float32)
    >>> wav = wav_bytes_from_float32(samples, 44100)
    >>> len(wav)
    88244
"""
from __future__ import annotations

import base64
import binascii
import io
from typing import Tuple

import numpy as np
import soundfile as sf

from tts_studio.errors import DecodeFailedError

WAV_HEADER_SIZE = 44


def float32_to_pcm16(samples: np.ndarray) -> np.ndarray:
    """
    Quantize float samples to int16.

    Samples are clamped to [-1, 1]; positives scale by 32767 and negatives
    by 32768, then truncate toward zero.
    """
    s = np.clip(np.asarray(samples, dtype=np.float32).reshape(-1), -1.0, 1.0)
    scaled = np.where(s < 0, s * 32768.0, s * 32767.0)
    return np.trunc(scaled).astype(np.int16)


def wav_bytes_from_float32(samples: np.ndarray, sample_rate: int) -> bytes:
    """
    Encode mono float samples as a 16-bit PCM WAV file.

    The result is exactly 44 + 2 * len(samples) bytes.
    """
    pcm = float32_to_pcm16(samples)

    buf = io.BytesIO()
    sf.write(buf, pcm, sample_rate, format="WAV", subtype="PCM_16")
    return buf.getvalue()


def decode_audio(data: bytes) -> Tuple[np.ndarray, int]:
    """
    Decode audio bytes to mono float32 samples.

    Multi-channel input is averaged down to mono.

    Returns:
        Tuple of (samples, sample_rate).

    Raises:
        DecodeFailedError: If libsndfile cannot read the data.
    """
    try:
        wav, sr = sf.read(io.BytesIO(data), dtype="float32", always_2d=False)
    except (RuntimeError, TypeError, ValueError) as e:
        raise DecodeFailedError(f"cannot decode audio: {e}", {"bytes": len(data)}) from e

    if wav.ndim > 1:
        wav = wav.mean(axis=1)

    return np.asarray(wav, dtype=np.float32), int(sr)


def audio_duration(data: bytes) -> float:
    """
    Read the duration (seconds) from the audio header without decoding samples.

    Raises:
        DecodeFailedError: If the header cannot be read.
    """
    try:
        meta = sf.info(io.BytesIO(data))
    except (RuntimeError, TypeError, ValueError) as e:
        raise DecodeFailedError(f"cannot read audio metadata: {e}", {"bytes": len(data)}) from e
    return float(meta.duration)


def decode_base64_audio(payload: str) -> bytes:
    """
    Decode a base64 audio payload from a batch response.

    Raises:
        DecodeFailedError: If the payload is not valid base64 or is empty.
    """
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailedError(f"invalid base64 audio payload: {e}") from e
    if not data:
        raise DecodeFailedError("empty audio payload")
    return data
