"""
Logging Context and Module State.

The job id lives in a ContextVar so that every log line emitted while a
generation or export is running can be correlated, including lines from
tasks spawned with asyncio.gather (tasks copy the current context).

Environment Variables:
    - TTS_STUDIO_LOG_LEVEL: Log level (1-4 or name)
    - TTS_STUDIO_LOG_DIR: Directory for the JSONL log file
    - TTS_STUDIO_JSONL_FILE: JSONL filename (default: tts-studio.jsonl)
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Dict

from .levels import LEVEL_NAMES, LogLevel

_job_id: ContextVar[str] = ContextVar("job_id", default="-")

_configured: bool = False
_log_config: Dict[str, Any] = {}
_current_level: LogLevel = LogLevel.NORMAL


def get_job_id() -> str:
    """Return the job id of the current context, or "-" outside a job."""
    return _job_id.get()


def set_job_id(job_id: str) -> None:
    """Bind a job id to the current context."""
    _job_id.set(job_id)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    return LEVEL_NAMES.get(_current_level, "NORMAL")


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def get_log_config() -> Dict[str, Any]:
    return _log_config


def set_log_config(config: Dict[str, Any]) -> None:
    global _log_config
    _log_config = config


def read_logging_config() -> Dict[str, Any]:
    """
    Resolve logging options from the environment.

    The settings file is not consulted here; callers that loaded one pass
    its level to configure_logging() explicitly.
    """
    cfg: Dict[str, Any] = {}

    if os.getenv("TTS_STUDIO_LOG_LEVEL"):
        cfg["level"] = os.environ["TTS_STUDIO_LOG_LEVEL"]
    if os.getenv("TTS_STUDIO_LOG_DIR"):
        cfg["log_dir"] = os.environ["TTS_STUDIO_LOG_DIR"]
    if os.getenv("TTS_STUDIO_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["TTS_STUDIO_JSONL_FILE"]

    return cfg
