"""
Log Level Definitions.

tts-studio uses four numeric verbosity levels instead of Python's five
named ones. They map onto the standard logging levels so the records still
flow through ordinary handlers:

    MINIMAL (1) -> logging.WARNING
    NORMAL (2)  -> logging.INFO
    VERBOSE (3) -> logging.DEBUG
    DEBUG (4)   -> logging.DEBUG - 5
"""
from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Numeric verbosity levels (higher is chattier)."""
    MINIMAL = 1  # Export results and failures only
    NORMAL = 2   # Generation and export lifecycle (default)
    VERBOSE = 3  # Per-chunk and per-block detail
    DEBUG = 4    # Reflow moves, probe timings, raw shapes


LEVEL_MAP = {
    LogLevel.MINIMAL: logging.WARNING,
    LogLevel.NORMAL: logging.INFO,
    LogLevel.VERBOSE: logging.DEBUG,
    LogLevel.DEBUG: logging.DEBUG - 5,
}

LEVEL_NAMES = {
    1: "MINIMAL",
    2: "NORMAL",
    3: "VERBOSE",
    4: "DEBUG",
}

_NAME_MAP = {
    "MINIMAL": LogLevel.MINIMAL,
    "NORMAL": LogLevel.NORMAL,
    "VERBOSE": LogLevel.VERBOSE,
    "DEBUG": LogLevel.DEBUG,
    "TRACE": LogLevel.DEBUG,
    "CRITICAL": LogLevel.MINIMAL,
    "ERROR": LogLevel.MINIMAL,
    "WARNING": LogLevel.MINIMAL,
    "WARN": LogLevel.MINIMAL,
    "INFO": LogLevel.NORMAL,
    "1": LogLevel.MINIMAL,
    "2": LogLevel.NORMAL,
    "3": LogLevel.VERBOSE,
    "4": LogLevel.DEBUG,
}


def coerce_level(value: Any) -> LogLevel:
    """
    Convert an int, a level name or a LogLevel into a LogLevel.

    Integers 1-4 are taken as-is; larger integers are read as Python
    logging levels (WARNING -> MINIMAL, INFO -> NORMAL, below -> DEBUG).
    Anything unparseable falls back to NORMAL.

    Examples:
        >>> coerce_level(3)
        <LogLevel.VERBOSE: 3>
        >>> coerce_level("info")
        <LogLevel.NORMAL: 2>
    """
    if isinstance(value, LogLevel):
        return value

    if isinstance(value, bool):
        return LogLevel.NORMAL

    if isinstance(value, int):
        if 1 <= value <= 4:
            return LogLevel(value)
        if value >= logging.WARNING:
            return LogLevel.MINIMAL
        if value >= logging.INFO:
            return LogLevel.NORMAL
        return LogLevel.DEBUG

    if isinstance(value, str):
        return _NAME_MAP.get(value.upper().strip(), LogLevel.NORMAL)

    return LogLevel.NORMAL
