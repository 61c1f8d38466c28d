"""
Tests for offline mixing, mixdown and WAV export.

Tests cover:
- OfflineMixer scheduling: offset, span, playback rate, resampling, summing
- AudioRenderer: placement on the timeline, per-block failure isolation
- Fatal conditions: no mixer, empty project
- Export filename and file contents
"""
import asyncio
from datetime import datetime

import numpy as np
import pytest
import soundfile as sf

from conftest import make_wav
from tts_studio.audio.assets import AssetStore
from tts_studio.audio.mixer import OfflineMixer
from tts_studio.audio.renderer import AudioRenderer
from tts_studio.core.config import RenderConfig
from tts_studio.errors import EmptyProjectError, ErrorCode, RenderingUnsupportedError
from tts_studio.utils.audio import WAV_HEADER_SIZE

SR = 8000


def _renderer(**kwargs):
    return AudioRenderer(RenderConfig(sample_rate=SR), **kwargs)


def _voiced(timeline, store, seconds, at=0.0, sample_rate=SR, data=None):
    block = timeline.add_block()
    block.text = "line"
    block.attach_audio(store.create(data if data is not None else make_wav(seconds, sample_rate)), seconds)
    block.move_to(at)
    return block


def _nonzero_span(samples):
    idx = np.flatnonzero(np.abs(samples) > 1e-4)
    return (int(idx[0]), int(idx[-1]) + 1) if len(idx) else None


class TestOfflineMixer:
    def test_unscheduled_buffer_is_silent(self):
        out = OfflineMixer(100, SR).render()
        assert out.dtype == np.float32
        assert not out.any()

    def test_offset_and_duration(self):
        mixer = OfflineMixer(SR, SR)
        ramp = np.linspace(0.0, 1.0, SR, endpoint=False, dtype=np.float32)
        mixer.schedule(ramp, SR, when=0.0, offset=0.5, duration=0.25)
        out = mixer.render()

        assert _nonzero_span(out) == (0, SR // 4)
        assert out[0] == pytest.approx(0.5, abs=1e-4)

    def test_playback_rate_shortens_output(self):
        mixer = OfflineMixer(SR, SR)
        mixer.schedule(np.full(SR, 0.5, dtype=np.float32), SR, when=0.0, playback_rate=2.0)
        assert _nonzero_span(mixer.render()) == (0, SR // 2)

    def test_resamples_to_mix_rate(self):
        mixer = OfflineMixer(SR, SR)
        mixer.schedule(np.full(2 * SR, 0.25, dtype=np.float32), 2 * SR, when=0.0)
        out = mixer.render()
        assert _nonzero_span(out) == (0, SR)
        assert out[SR // 2] == pytest.approx(0.25)

    def test_overlaps_are_summed_and_tail_dropped(self):
        mixer = OfflineMixer(SR, SR)
        tone = np.full(SR, 0.25, dtype=np.float32)
        mixer.schedule(tone, SR, when=0.0)
        mixer.schedule(tone, SR, when=0.5)
        out = mixer.render()

        assert len(out) == SR
        assert out[SR // 4] == pytest.approx(0.25)
        assert out[3 * SR // 4] == pytest.approx(0.5)

    @pytest.mark.parametrize("kwargs", [
        {"when": -1.0}, {"when": 0.0, "offset": -0.1}, {"when": 0.0, "playback_rate": 0.0},
    ])
    def test_rejects_invalid_schedule(self, kwargs):
        with pytest.raises(ValueError):
            OfflineMixer(SR, SR).schedule(np.zeros(10, dtype=np.float32), SR, **kwargs)

    def test_for_duration_rounds_up(self):
        assert OfflineMixer.for_duration(1.00001, SR).length == SR + 1


class TestMixdownPlacement:
    """Blocks land where the timeline says."""

    def test_one_second_clip_at_one_second(self, timeline):
        store = AssetStore()
        _voiced(timeline, store, 1.0, at=1.0)
        timeline.user_duration_override = 3.0

        out = asyncio.run(_renderer().mixdown(timeline.blocks, timeline.project_duration))

        assert len(out) == 3 * SR
        assert _nonzero_span(out) == (SR, 2 * SR)

    def test_speed_and_trim(self, timeline):
        store = AssetStore()
        block = _voiced(timeline, store, 1.0)
        block.set_trim(0.25, 0.75)
        block.set_speed(2.0)
        timeline.user_duration_override = 1.0

        out = asyncio.run(_renderer().mixdown(timeline.blocks, timeline.project_duration))

        assert _nonzero_span(out) == (0, SR // 4)

    def test_only_done_blocks_are_rendered(self, timeline):
        from tts_studio.timeline import BlockStatus

        store = AssetStore()
        _voiced(timeline, store, 1.0)
        pending = _voiced(timeline, store, 1.0, at=1.0)
        pending.status = BlockStatus.LOADING

        out = asyncio.run(_renderer().mixdown(timeline.blocks, 2.0))

        assert _nonzero_span(out) == (0, SR)

    def test_decode_failure_skips_only_that_block(self, timeline):
        store = AssetStore()
        _voiced(timeline, store, 1.0, data=b"definitely not audio")
        _voiced(timeline, store, 1.0, at=1.0)

        out = asyncio.run(_renderer().mixdown(timeline.blocks, 2.0))

        assert _nonzero_span(out) == (SR, 2 * SR)

    def test_released_asset_is_skipped(self, timeline):
        store = AssetStore()
        gone = _voiced(timeline, store, 1.0)
        gone.audio_asset.release()
        _voiced(timeline, store, 1.0, at=1.0)

        out = asyncio.run(_renderer().mixdown(timeline.blocks, 2.0))

        assert _nonzero_span(out) == (SR, 2 * SR)


class TestMixdownFatal:
    def test_no_mixer_available(self, timeline):
        _voiced(timeline, AssetStore(), 1.0)
        with pytest.raises(RenderingUnsupportedError) as exc:
            asyncio.run(_renderer(mixer_factory=None).mixdown(timeline.blocks, 1.0))
        assert exc.value.code == ErrorCode.RENDERING_UNSUPPORTED

    def test_mixer_factory_failure(self, timeline):
        def broken(length, sample_rate):
            raise MemoryError("no room")

        _voiced(timeline, AssetStore(), 1.0)
        with pytest.raises(RenderingUnsupportedError):
            asyncio.run(_renderer(mixer_factory=broken).mixdown(timeline.blocks, 1.0))

    def test_empty_project(self, timeline):
        with pytest.raises(EmptyProjectError):
            asyncio.run(_renderer().render_wav(timeline))

    def test_zero_duration_project(self, timeline):
        timeline.add_block()
        with pytest.raises(EmptyProjectError):
            asyncio.run(_renderer().render_wav(timeline))


class TestExport:
    def test_filename_uses_clock_date(self):
        renderer = _renderer(clock=lambda: datetime(2026, 3, 1, 23, 59))
        assert renderer.export_filename() == "voice_project_2026-03-01.wav"

    def test_writes_wav_file(self, timeline, tmp_path):
        store = AssetStore()
        _voiced(timeline, store, 1.0)
        _voiced(timeline, store, 0.5, at=1.0)
        renderer = _renderer(clock=lambda: datetime(2026, 3, 1))

        path = asyncio.run(renderer.export(timeline, tmp_path / "out"))

        assert path == tmp_path / "out" / "voice_project_2026-03-01.wav"
        data = path.read_bytes()
        meta = sf.info(str(path))
        assert meta.samplerate == SR
        assert meta.channels == 1
        assert meta.frames == int(1.5 * SR)
        assert len(data) == WAV_HEADER_SIZE + 2 * int(1.5 * SR)

    def test_export_aborts_without_file(self, timeline, tmp_path):
        with pytest.raises(EmptyProjectError):
            asyncio.run(_renderer().export(timeline, tmp_path))
        assert list(tmp_path.iterdir()) == []
