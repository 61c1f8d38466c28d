"""
Error taxonomy for tts-studio.

Generation-path errors are contained per block or per chunk: the
orchestrator catches them, marks the affected blocks ``error`` and logs.
Render-path errors are contained per block, except RenderingUnsupportedError
and EmptyProjectError which abort the whole export.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ErrorCode:
    """Standardized error codes carried by StudioError."""
    PRECONDITION_UNMET = "PRECONDITION_UNMET"       # Missing text or voice
    REQUEST_FAILED = "REQUEST_FAILED"               # Network/service error
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"       # Unrecognized batch shape
    DECODE_FAILED = "DECODE_FAILED"                 # Audio cannot be decoded
    RENDERING_UNSUPPORTED = "RENDERING_UNSUPPORTED" # No offline mixer
    EMPTY_PROJECT = "EMPTY_PROJECT"                 # Nothing to export
    INTERNAL_ERROR = "INTERNAL_ERROR"


class StudioError(Exception):
    """
    Base exception for tts-studio errors.

    Attributes:
        message: Human-readable error message.
        code: Error code from ErrorCode.
        details: Optional dictionary with additional context.
    """
    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "ok": False,
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class PreconditionUnmetError(StudioError):
    """A block lacks text or a voice; generation is skipped silently."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.PRECONDITION_UNMET, details)


class RequestFailedError(StudioError):
    """The voice service could not be reached or answered with an error."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.REQUEST_FAILED, details)


class MalformedResponseError(StudioError):
    """A batch response has no recognizable shape or an unusable entry."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.MALFORMED_RESPONSE, details)


class DecodeFailedError(StudioError):
    """Audio bytes could not be decoded."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.DECODE_FAILED, details)


class RenderingUnsupportedError(StudioError):
    """No offline rendering capability is available; fatal to export."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.RENDERING_UNSUPPORTED, details)


class EmptyProjectError(StudioError):
    """The project has no blocks or no duration to render."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.EMPTY_PROJECT, details)
