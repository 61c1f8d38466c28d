"""
Tests for batched generation.

Tests cover:
- Chunking: per-voice grouping, first-seen order, batch_limit sized runs
- Requests: one per chunk, strictly sequential, language "auto"
- Response shapes: field list, bare list, numeric keys, unrecognized
- Failure containment per entry and per chunk
- Reflow scoped to the chunk
"""
import asyncio

import pytest

from conftest import FakeVoiceClient, failing, make_b64_wav
from tts_studio.audio.assets import AssetStore
from tts_studio.services.generation import BatchReport, GenerationOrchestrator, chunk_targets
from tts_studio.timeline import BlockStatus


def _fill(timeline, texts, voices=None):
    blocks = []
    for i, text in enumerate(texts):
        block = timeline.add_block()
        block.text = text
        if voices is not None:
            block.voice_name = voices[i]
        blocks.append(block)
    return blocks


def _run_batch(timeline, client, store=None) -> BatchReport:
    orchestrator = GenerationOrchestrator(timeline, client, store or AssetStore())
    return asyncio.run(orchestrator.generate_batch())


class TestChunkTargets:
    """Pure chunking helper."""

    def test_twelve_blocks_limit_five(self, timeline):
        blocks = _fill(timeline, [f"t{i}" for i in range(12)])
        chunks = chunk_targets(blocks, 5)
        assert [len(c) for _, c in chunks] == [5, 5, 2]
        assert [b for _, c in chunks for b in c] == blocks

    def test_groups_by_voice_in_first_seen_order(self, timeline):
        blocks = _fill(timeline, list("abcde"), voices=["B", "A", "B", "A", "B"])
        chunks = chunk_targets(blocks, 2)
        assert [(v, [b.text for b in c]) for v, c in chunks] == [
            ("B", ["a", "c"]),
            ("B", ["e"]),
            ("A", ["b", "d"]),
        ]

    def test_blocks_without_voice_are_dropped(self, timeline):
        blocks = _fill(timeline, ["x", "y"], voices=["", "A"])
        assert [(v, len(c)) for v, c in chunk_targets(blocks, 5)] == [("A", 1)]

    def test_rejects_non_positive_limit(self, timeline):
        with pytest.raises(ValueError):
            chunk_targets([], 0)


class TestBatchRequests:
    """What gets sent, and when."""

    def test_one_request_per_chunk(self, timeline):
        client = FakeVoiceClient()
        _fill(timeline, [f"line {i}" for i in range(12)])

        report = _run_batch(timeline, client)

        assert [len(r.texts) for r in client.batch_requests] == [5, 5, 2]
        assert all(r.voice_name == "narrator" for r in client.batch_requests)
        assert all(r.language == "auto" for r in client.batch_requests)
        assert client.batch_requests[0].texts == [f"line {i}" for i in range(5)]
        assert report == BatchReport(chunks=3, done=12, failed=0, skipped=0)
        assert all(b.status is BlockStatus.DONE for b in timeline)

    def test_chunks_are_sequential(self, timeline):
        client = FakeVoiceClient()
        _fill(timeline, [f"t{i}" for i in range(7)])
        _run_batch(timeline, client)
        assert len(client.batch_requests) == 2
        assert client.max_in_flight == 1

    def test_only_selected_blocks_when_any_selected(self, timeline):
        client = FakeVoiceClient()
        a, b, c, d = _fill(timeline, ["a", "b", "c", "d"])
        timeline.toggle_selection(b.id)
        timeline.toggle_selection(d.id, multi=True)

        report = _run_batch(timeline, client)

        assert [r.texts for r in client.batch_requests] == [["b", "d"]]
        assert report.done == 2
        assert a.status is BlockStatus.IDLE
        assert c.status is BlockStatus.IDLE

    def test_blocks_without_voice_are_skipped(self, timeline):
        client = FakeVoiceClient()
        a, b = _fill(timeline, ["a", "b"], voices=["", "narrator"])

        report = _run_batch(timeline, client)

        assert report.skipped == 1
        assert a.status is BlockStatus.IDLE
        assert b.status is BlockStatus.DONE


class TestBatchResponseShapes:
    """Each accepted response shape fills blocks in chunk order."""

    def test_field_list_with_tiny_payloads(self, timeline):
        """Entries that decode but carry no readable header still count as done."""
        client = FakeVoiceClient(batch_handler=lambda req: {"audio_files": ["QQ==", "Qg=="]})
        a, b = _fill(timeline, ["a", "b"])

        report = _run_batch(timeline, client)

        assert report.done == 2
        assert a.status is BlockStatus.DONE and b.status is BlockStatus.DONE
        assert a.audio_asset.read() == b"A"
        assert b.audio_asset.read() == b"B"
        assert a.duration == 0.0

    def test_numeric_keys_follow_numeric_order(self, timeline):
        client = FakeVoiceClient(batch_handler=lambda req: {
            "10": make_b64_wav(3.0),
            "2": make_b64_wav(2.0),
            "0": make_b64_wav(1.0),
        })
        blocks = _fill(timeline, ["a", "b", "c"])

        _run_batch(timeline, client)

        assert [b.duration for b in blocks] == pytest.approx([1.0, 2.0, 3.0])

    def test_bare_list_of_data_objects(self, timeline):
        client = FakeVoiceClient(batch_handler=lambda req: [{"data": make_b64_wav(0.5)} for _ in req.texts])
        blocks = _fill(timeline, ["a", "b"])

        _run_batch(timeline, client)

        assert [b.duration for b in blocks] == pytest.approx([0.5, 0.5])

    def test_unrecognized_response_marks_chunk_error(self, timeline):
        client = FakeVoiceClient(batch_handler=lambda req: {"unexpected": True})
        blocks = _fill(timeline, ["a", "b"])

        report = _run_batch(timeline, client)

        assert all(b.status is BlockStatus.ERROR for b in blocks)
        assert report.failed == 2
        assert all(b.audio_asset is None for b in blocks)


class TestBatchFailures:
    """Failures stay with their block or chunk."""

    def test_missing_entries_become_errors(self, timeline):
        client = FakeVoiceClient(batch_handler=lambda req: {"audio_files": [make_b64_wav(1.0)]})
        a, b, c = _fill(timeline, ["a", "b", "c"])

        report = _run_batch(timeline, client)

        assert a.status is BlockStatus.DONE
        assert b.status is BlockStatus.ERROR
        assert c.status is BlockStatus.ERROR
        assert report.done == 1 and report.failed == 2

    def test_bad_entry_does_not_affect_siblings(self, timeline):
        client = FakeVoiceClient(batch_handler=lambda req: {
            "audio_files": [make_b64_wav(1.0), "%%%not-base64", 42],
        })
        a, b, c = _fill(timeline, ["a", "b", "c"])

        _run_batch(timeline, client)

        assert a.status is BlockStatus.DONE
        assert b.status is BlockStatus.ERROR
        assert c.status is BlockStatus.ERROR

    def test_failed_chunk_does_not_stop_later_chunks(self, timeline):
        calls = []

        def handler(req):
            calls.append(req)
            if len(calls) == 1:
                return failing()
            return {"audio_files": [make_b64_wav(1.0) for _ in req.texts]}

        client = FakeVoiceClient(batch_handler=handler)
        blocks = _fill(timeline, [f"t{i}" for i in range(7)])

        report = _run_batch(timeline, client)

        assert len(calls) == 2
        assert all(b.status is BlockStatus.ERROR for b in blocks[:5])
        assert all(b.status is BlockStatus.DONE for b in blocks[5:])
        assert report == BatchReport(chunks=2, done=2, failed=5, skipped=0)

    def test_failed_request_leaves_timing_untouched(self, timeline):
        client = FakeVoiceClient(batch_handler=lambda req: failing())
        a, b = _fill(timeline, ["a", "b"])
        b.move_to(4.0)

        _run_batch(timeline, client)

        assert a.timeline_start == 0.0
        assert b.timeline_start == 4.0
        assert b.duration == 0.0

    def test_block_removed_during_chunk_is_not_resurrected(self, timeline):
        store = AssetStore()
        client = FakeVoiceClient()
        a, b = _fill(timeline, ["a", "b"])
        orchestrator = GenerationOrchestrator(timeline, client, store)

        async def scenario():
            client.gate = asyncio.Event()
            task = asyncio.create_task(orchestrator.generate_batch())
            await asyncio.sleep(0.01)
            timeline.remove_block(b.id)
            client.gate.set()
            return await task

        asyncio.run(scenario())

        assert list(timeline) == [a]
        assert a.status is BlockStatus.DONE
        assert b.audio_asset is None
        assert store.live_count == 1


class TestBatchReflow:
    """Reflow after a chunk only touches that chunk."""

    def test_chunk_blocks_are_laid_end_to_end(self, timeline):
        client = FakeVoiceClient()
        blocks = _fill(timeline, ["a", "b", "c"])
        assert all(b.timeline_start == 0.0 for b in blocks)

        _run_batch(timeline, client)

        assert [b.timeline_start for b in blocks] == pytest.approx([0.0, 1.0, 2.0])
        assert timeline.total_duration == pytest.approx(3.0)

    def test_blocks_outside_the_chunk_stay_put(self, timeline):
        client = FakeVoiceClient()
        a, b, c, d = _fill(timeline, ["a", "b", "c", "d"])
        timeline.toggle_selection(a.id)
        timeline.toggle_selection(b.id, multi=True)
        timeline.toggle_selection(c.id, multi=True)

        _run_batch(timeline, client)

        assert [x.timeline_start for x in (a, b, c)] == pytest.approx([0.0, 1.0, 2.0])
        assert d.timeline_start == 0.0
