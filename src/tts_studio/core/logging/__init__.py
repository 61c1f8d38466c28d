"""
tts-studio Structured Logging.

Numeric verbosity levels (1-4), colored console output, optional JSONL file
output and job-id correlation across asyncio tasks.

Usage:
    from tts_studio.core.logging import get_logger, info, warn, error

    log = get_logger("tts-studio.mymodule")
    info(log, "chunk_done", voice="narrator", size=5, seconds=0.81)
    verbose(log, "block_probed", block="3f2a", duration=2.04)

Configuration:
    export TTS_STUDIO_LOG_LEVEL=3   # VERBOSE
    export TTS_STUDIO_LOG_DIR=logs  # also write logs/tts-studio.jsonl
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from . import formatters
from .context import (
    get_job_id,
    get_level,
    get_level_name,
    is_configured,
    read_logging_config,
    set_configured,
    set_job_id,
    set_level,
    set_log_config,
)
from .formatters import ColoredConsoleFormatter, JsonlFormatter
from .levels import LEVEL_MAP, LEVEL_NAMES, LogLevel, coerce_level


def configure_logging(level: Optional[int | str | LogLevel] = None, force: bool = False) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level (1-4, level name, or LogLevel). Environment wins
            over the default but an explicit argument wins over both.
        force: Reconfigure even if logging was already set up.
    """
    if is_configured() and not force:
        return

    formatters.USE_COLORS = formatters.supports_color()

    log_config = read_logging_config()
    set_log_config(log_config)

    current_level = coerce_level(level if level is not None else log_config.get("level", LogLevel.NORMAL))
    set_level(current_level)
    python_level = LEVEL_MAP.get(current_level, logging.INFO)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG - 5)
    root.handlers = []

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(python_level)
    console.setFormatter(ColoredConsoleFormatter())
    root.addHandler(console)

    log_dir = log_config.get("log_dir")
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            Path(log_dir) / str(log_config.get("jsonl_file", "tts-studio.jsonl")),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
            delay=True,
        )
        file_handler.setLevel(logging.DEBUG - 5)
        file_handler.setFormatter(JsonlFormatter())
        root.addHandler(file_handler)

    set_configured(True)


def _log(
    logger: logging.Logger,
    level: int,
    tag: str,
    msg: str,
    numeric_level: int = 2,
    **fields: Any
) -> None:
    if numeric_level > get_level():
        return

    seconds = fields.pop("seconds", None)
    logger.log(
        level,
        msg,
        extra={
            "tag": tag,
            "job_id": get_job_id(),
            "seconds": seconds,
            "extra_data": fields or None,
            "numeric_level": numeric_level,
        },
    )


def get_logger(name: str = "tts-studio") -> logging.Logger:
    """Get a logger instance, configuring logging if needed."""
    configure_logging()
    return logging.getLogger(name)


def info(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.INFO, "INFO", msg, numeric_level=2, **fields)


def warn(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.WARNING, "WARN", msg, numeric_level=2, **fields)


def error(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.ERROR, "ERROR", msg, numeric_level=1, **fields)


def success(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.INFO, "SUCCESS", msg, numeric_level=2, **fields)


def fail(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.ERROR, "FAIL", msg, numeric_level=1, **fields)


def verbose(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.DEBUG, "INFO", msg, numeric_level=3, **fields)


def debug(logger: logging.Logger, msg: str, **fields: Any) -> None:
    _log(logger, logging.DEBUG - 5, "DEBUG", msg, numeric_level=4, **fields)


__all__ = [
    "LogLevel",
    "LEVEL_MAP",
    "LEVEL_NAMES",
    "coerce_level",
    "get_job_id",
    "set_job_id",
    "get_level",
    "get_level_name",
    "JsonlFormatter",
    "ColoredConsoleFormatter",
    "configure_logging",
    "get_logger",
    "info",
    "warn",
    "error",
    "success",
    "fail",
    "verbose",
    "debug",
]
