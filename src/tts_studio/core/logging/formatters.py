"""
Log Formatters for Console and JSONL Output.

    ColoredConsoleFormatter:
        14:30:05 [ INFO  ] (job-3f2a) chunk_done voice=narrator size=5 0.812s

    JsonlFormatter:
        {"ts":"2026-01-15T14:30:05+03:00","level":2,"tag":"INFO","message":"chunk_done",...}

Colors are dropped when stdout is not a TTY or NO_COLOR /
TTS_STUDIO_NO_COLOR=1 is set.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict


class Colors:
    """ANSI escape codes used by the console formatter."""
    RESET = "\033[0m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    GRAY = "\033[90m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"


_TAG_COLORS = {
    "SUCCESS": Colors.BRIGHT_GREEN,
    "FAIL": Colors.BRIGHT_RED,
    "ERROR": Colors.BRIGHT_RED,
    "WARN": Colors.BRIGHT_YELLOW,
    "INFO": Colors.BRIGHT_CYAN,
    "DEBUG": Colors.GRAY,
}

# Block status values get the same palette the UI uses for them
_STATUS_COLORS = {
    "done": Colors.GREEN,
    "error": Colors.RED,
    "loading": Colors.YELLOW,
    "idle": Colors.DIM,
}


def supports_color() -> bool:
    """Return True when ANSI colors should be written to stdout."""
    if os.getenv("TTS_STUDIO_NO_COLOR", "0") == "1":
        return False
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


USE_COLORS = supports_color()


def colorize(text: str, color: str) -> str:
    if not USE_COLORS:
        return text
    return f"{color}{text}{Colors.RESET}"


def get_tag_color(tag: str) -> str:
    return _TAG_COLORS.get(tag.upper(), Colors.WHITE)


class JsonlFormatter(logging.Formatter):
    """One JSON object per line, for machine consumption."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).astimezone().isoformat()

        payload: Dict[str, Any] = {
            "ts": ts,
            "level": getattr(record, "numeric_level", 2),
            "tag": getattr(record, "tag", record.levelname),
            "message": record.getMessage(),
            "job_id": getattr(record, "job_id", "-"),
        }

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            payload["seconds"] = seconds

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            payload["extra"] = extra_data

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """
    Human-readable console lines.

    Format: HH:MM:SS [ TAG ] (job) message key=value 0.123s
    """

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        tag = getattr(record, "tag", record.levelname)
        job_id = getattr(record, "job_id", "-")

        parts = [colorize(ts, Colors.DIM), colorize(f"[{tag:^7}]", get_tag_color(tag))]
        if job_id != "-":
            parts.append(colorize(f"({job_id})", Colors.DIM + Colors.CYAN))
        parts.append(record.getMessage())

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            for key, value in extra_data.items():
                parts.append(colorize(f"{key}={value}", self._field_color(key, value)))

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            if seconds < 0.1:
                color = Colors.GREEN
            elif seconds < 1.0:
                color = Colors.YELLOW
            else:
                color = Colors.RED
            parts.append(colorize(f"{seconds:.3f}s", color))

        return " ".join(parts)

    @staticmethod
    def _field_color(key: str, value: Any) -> str:
        if key == "status":
            return _STATUS_COLORS.get(str(value), Colors.DIM)
        if key in ("failed", "errors") and isinstance(value, int) and value > 0:
            return Colors.RED
        if key == "voice":
            return Colors.BLUE
        return Colors.DIM
