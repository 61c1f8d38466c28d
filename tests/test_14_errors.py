"""Tests for the error taxonomy and the timing helper."""
import pytest

from tts_studio.errors import (
    DecodeFailedError,
    EmptyProjectError,
    ErrorCode,
    MalformedResponseError,
    PreconditionUnmetError,
    RenderingUnsupportedError,
    RequestFailedError,
    StudioError,
)
from tts_studio.utils.timeit import timeit


class TestStudioError:
    @pytest.mark.parametrize("cls,code", [
        (PreconditionUnmetError, ErrorCode.PRECONDITION_UNMET),
        (RequestFailedError, ErrorCode.REQUEST_FAILED),
        (MalformedResponseError, ErrorCode.MALFORMED_RESPONSE),
        (DecodeFailedError, ErrorCode.DECODE_FAILED),
        (RenderingUnsupportedError, ErrorCode.RENDERING_UNSUPPORTED),
        (EmptyProjectError, ErrorCode.EMPTY_PROJECT),
    ])
    def test_subclass_codes(self, cls, code):
        err = cls("boom")
        assert isinstance(err, StudioError)
        assert err.code == code
        assert str(err) == "boom"

    def test_to_dict(self):
        err = RequestFailedError("voice service returned 503", {"status": 503})
        assert err.to_dict() == {
            "ok": False,
            "error": "REQUEST_FAILED",
            "message": "voice service returned 503",
            "details": {"status": 503},
        }

    def test_to_dict_without_details(self):
        assert "details" not in StudioError("x").to_dict()


class TestTimeit:
    def test_seconds_after_block(self):
        with timeit("work") as t:
            pass
        assert t.seconds >= 0.0

    def test_seconds_inside_block(self):
        with timeit("work") as t:
            assert t.seconds == -1.0
