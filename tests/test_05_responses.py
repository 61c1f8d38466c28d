"""
Tests for batch response classification.

Tests cover:
- The three recognized shapes and their entry order
- Unrecognized bodies
- Entry payload extraction (string vs {"data": ...})
"""
import pytest

from tts_studio.services.responses import (
    ResponseShape,
    classify_batch_response,
    extract_audio_payload,
)


class TestClassify:
    """Tests for classify_batch_response()."""

    def test_field_list(self):
        parsed = classify_batch_response({"audio_files": ["QQ==", "Qg=="]})
        assert parsed.shape is ResponseShape.FIELD_LIST
        assert parsed.entries == ("QQ==", "Qg==")
        assert parsed.recognized

    def test_bare_list(self):
        parsed = classify_batch_response([{"data": "QQ=="}, "Qg=="])
        assert parsed.shape is ResponseShape.BARE_LIST
        assert len(parsed.entries) == 2

    def test_numeric_keys_sorted_numerically(self):
        """"10" sorts after "2", non-numeric keys are ignored."""
        parsed = classify_batch_response({"10": "c", "2": "b", "0": "a", "meta": "x"})
        assert parsed.shape is ResponseShape.NUMERIC_KEYS
        assert parsed.entries == ("a", "b", "c")

    @pytest.mark.parametrize("key", ["1_0", " 3 ", "+1", "1.0", "0x1", "٣"])
    def test_only_plain_digit_keys_count(self, key):
        parsed = classify_batch_response({key: "QQ=="})
        assert parsed.shape is ResponseShape.UNRECOGNIZED

    def test_plain_keys_next_to_lookalikes(self):
        parsed = classify_batch_response({"1": "b", "1_0": "x", "0": "a"})
        assert parsed.shape is ResponseShape.NUMERIC_KEYS
        assert parsed.entries == ("a", "b")

    def test_audio_files_not_a_list_falls_through(self):
        parsed = classify_batch_response({"audio_files": "QQ==", "0": "Qg=="})
        assert parsed.shape is ResponseShape.NUMERIC_KEYS
        assert parsed.entries == ("Qg==",)

    @pytest.mark.parametrize("raw", [None, "QQ==", 42, {}, {"status": "ok"}, {"audio_files": None}])
    def test_unrecognized(self, raw):
        parsed = classify_batch_response(raw)
        assert parsed.shape is ResponseShape.UNRECOGNIZED
        assert parsed.entries == ()
        assert not parsed.recognized

    def test_empty_list_is_recognized(self):
        parsed = classify_batch_response([])
        assert parsed.shape is ResponseShape.BARE_LIST
        assert parsed.entries == ()


class TestExtractPayload:
    """Tests for extract_audio_payload()."""

    def test_string_entry(self):
        assert extract_audio_payload("QQ==") == "QQ=="

    def test_object_entry(self):
        assert extract_audio_payload({"data": "QQ==", "sr": 24000}) == "QQ=="

    @pytest.mark.parametrize("entry", ["", None, 5, [], {"data": 5}, {"audio": "QQ=="}, {"data": ""}])
    def test_unusable_entries(self, entry):
        assert extract_audio_payload(entry) is None
