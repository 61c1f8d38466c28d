"""
Configuration Management for tts-studio.

Configuration Hierarchy (highest priority first):
    1. Environment variables (TTS_STUDIO_BASE_URL, TTS_STUDIO_BATCH_LIMIT,
       TTS_STUDIO_LOG_LEVEL)
    2. YAML config file (config/settings.yaml)
    3. Defaults class values

Example settings.yaml:
    service:
      base_url: http://localhost:8000
      timeout_s: null        # no request timeout

    generation:
      batch_limit: 5
      single_language: korean
      batch_language: auto

    render:
      sample_rate: 44100
      output_dir: exports

    logging:
      level: 2  # NORMAL
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import os
import yaml


class ConfigValidationError(Exception):
    """Raised when a configuration value is out of bounds or of the wrong type."""
    pass


class Defaults:
    """
    Centralized default configuration values.

    Sections:
        - Service: Voice-synthesis backend location
        - Generation: Batching and duration probing
        - Timeline: Reflow tolerance and default voice
        - Render: Mixdown and export
        - Logging: Verbosity
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Voice Service
    # ─────────────────────────────────────────────────────────────────────────
    SERVICE_BASE_URL = "http://localhost:8000"
    SERVICE_TIMEOUT_S = None            # Generation requests never time out

    # ─────────────────────────────────────────────────────────────────────────
    # Generation
    # ─────────────────────────────────────────────────────────────────────────
    GENERATION_BATCH_LIMIT = 5          # Texts per batched request
    GENERATION_SINGLE_LANGUAGE = "korean"
    GENERATION_BATCH_LANGUAGE = "auto"
    GENERATION_PROBE_TIMEOUT_S = 5.0    # Metadata probe fallback -> duration 0
    GENERATION_DECODE_WORKERS = 4       # Concurrent decodes within one chunk

    # ─────────────────────────────────────────────────────────────────────────
    # Timeline
    # ─────────────────────────────────────────────────────────────────────────
    TIMELINE_REFLOW_TOLERANCE_S = 0.05  # Overlap jitter absorbed by reflow
    TIMELINE_GLOBAL_VOICE = ""

    # ─────────────────────────────────────────────────────────────────────────
    # Render / Export
    # ─────────────────────────────────────────────────────────────────────────
    RENDER_SAMPLE_RATE = 44100
    RENDER_MAX_WORKERS = 4              # Concurrent block decodes during mixdown
    RENDER_OUTPUT_DIR = "."
    RENDER_FILENAME_PREFIX = "voice_project"

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_LEVEL = 2                   # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG


@dataclass
class ServiceConfig:
    """Where the voice-synthesis backend lives."""
    base_url: str = Defaults.SERVICE_BASE_URL
    timeout_s: Optional[float] = Defaults.SERVICE_TIMEOUT_S


@dataclass
class GenerationConfig:
    """
    Generation orchestration settings.

    batch_limit caps how many texts share one batched request;
    decode_workers caps concurrent decode/probe work inside one chunk.
    """
    batch_limit: int = Defaults.GENERATION_BATCH_LIMIT
    single_language: str = Defaults.GENERATION_SINGLE_LANGUAGE
    batch_language: str = Defaults.GENERATION_BATCH_LANGUAGE
    probe_timeout_s: float = Defaults.GENERATION_PROBE_TIMEOUT_S
    decode_workers: int = Defaults.GENERATION_DECODE_WORKERS


@dataclass
class TimelineConfig:
    reflow_tolerance_s: float = Defaults.TIMELINE_REFLOW_TOLERANCE_S
    global_voice: str = Defaults.TIMELINE_GLOBAL_VOICE


@dataclass
class RenderConfig:
    """Offline mixdown and export settings."""
    sample_rate: int = Defaults.RENDER_SAMPLE_RATE
    max_workers: int = Defaults.RENDER_MAX_WORKERS
    output_dir: str = Defaults.RENDER_OUTPUT_DIR
    filename_prefix: str = Defaults.RENDER_FILENAME_PREFIX


@dataclass
class LoggingConfig:
    level: int = Defaults.LOGGING_LEVEL


@dataclass
class StudioConfig:
    """
    Validated configuration for the studio engine.

    Usage:
        settings = load_settings("config/settings.yaml")
        config = StudioConfig.from_settings(settings)
        print(config.generation.batch_limit)
    """
    service: ServiceConfig = field(default_factory=ServiceConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    timeline: TimelineConfig = field(default_factory=TimelineConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "StudioConfig":
        """
        Create StudioConfig from Settings with validation.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw

        # ─────────────────────────────────────────────────────────────────────
        # Service
        # ─────────────────────────────────────────────────────────────────────
        service_raw = raw.get("service", {}) or {}
        timeout_raw = service_raw.get("timeout_s", Defaults.SERVICE_TIMEOUT_S)
        service = ServiceConfig(
            base_url=str(service_raw.get("base_url", Defaults.SERVICE_BASE_URL)),
            timeout_s=None if timeout_raw is None else float(timeout_raw),
        )
        if not service.base_url:
            raise ConfigValidationError("service.base_url must not be empty")
        if service.timeout_s is not None:
            cls._validate_positive("service.timeout_s", service.timeout_s)

        # ─────────────────────────────────────────────────────────────────────
        # Generation
        # ─────────────────────────────────────────────────────────────────────
        generation_raw = raw.get("generation", {}) or {}
        generation = GenerationConfig(
            batch_limit=int(generation_raw.get("batch_limit", Defaults.GENERATION_BATCH_LIMIT)),
            single_language=str(generation_raw.get("single_language", Defaults.GENERATION_SINGLE_LANGUAGE)),
            batch_language=str(generation_raw.get("batch_language", Defaults.GENERATION_BATCH_LANGUAGE)),
            probe_timeout_s=float(generation_raw.get("probe_timeout_s", Defaults.GENERATION_PROBE_TIMEOUT_S)),
            decode_workers=int(generation_raw.get("decode_workers", Defaults.GENERATION_DECODE_WORKERS)),
        )
        cls._validate_positive("generation.batch_limit", generation.batch_limit)
        cls._validate_positive("generation.probe_timeout_s", generation.probe_timeout_s)
        cls._validate_positive("generation.decode_workers", generation.decode_workers)

        # ─────────────────────────────────────────────────────────────────────
        # Timeline
        # ─────────────────────────────────────────────────────────────────────
        timeline_raw = raw.get("timeline", {}) or {}
        timeline = TimelineConfig(
            reflow_tolerance_s=float(timeline_raw.get("reflow_tolerance_s", Defaults.TIMELINE_REFLOW_TOLERANCE_S)),
            global_voice=str(timeline_raw.get("global_voice", Defaults.TIMELINE_GLOBAL_VOICE) or ""),
        )
        cls._validate_non_negative("timeline.reflow_tolerance_s", timeline.reflow_tolerance_s)

        # ─────────────────────────────────────────────────────────────────────
        # Render
        # ─────────────────────────────────────────────────────────────────────
        render_raw = raw.get("render", {}) or {}
        render = RenderConfig(
            sample_rate=int(render_raw.get("sample_rate", Defaults.RENDER_SAMPLE_RATE)),
            max_workers=int(render_raw.get("max_workers", Defaults.RENDER_MAX_WORKERS)),
            output_dir=str(render_raw.get("output_dir", Defaults.RENDER_OUTPUT_DIR)),
            filename_prefix=str(render_raw.get("filename_prefix", Defaults.RENDER_FILENAME_PREFIX)),
        )
        cls._validate_positive("render.sample_rate", render.sample_rate)
        cls._validate_positive("render.max_workers", render.max_workers)

        # ─────────────────────────────────────────────────────────────────────
        # Logging (string names accepted, e.g. "VERBOSE")
        # ─────────────────────────────────────────────────────────────────────
        logging_raw = raw.get("logging", {}) or {}
        log_level_raw = logging_raw.get("level", Defaults.LOGGING_LEVEL)
        if isinstance(log_level_raw, str):
            level_map = {
                "MINIMAL": 1, "1": 1,
                "NORMAL": 2, "INFO": 2, "2": 2,
                "VERBOSE": 3, "3": 3,
                "DEBUG": 4, "4": 4,
            }
            log_level = level_map.get(log_level_raw.strip().upper(), Defaults.LOGGING_LEVEL)
        else:
            log_level = int(log_level_raw)
        logging_cfg = LoggingConfig(level=log_level)
        cls._validate_range("logging.level", logging_cfg.level, 1, 4)

        return cls(
            service=service,
            generation=generation,
            timeline=timeline,
            render=render,
            logging=logging_cfg,
        )

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_negative(name: str, value: int | float) -> None:
        if value < 0:
            raise ConfigValidationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_range(name: str, value: int | float, min_val: int | float, max_val: int | float) -> None:
        if not (min_val <= value <= max_val):
            raise ConfigValidationError(f"{name} must be between {min_val} and {max_val}, got {value}")


@dataclass(frozen=True)
class Settings:
    """
    Immutable raw settings loaded from YAML.

    Use get_studio_config() for the validated, typed view.
    """
    raw: Dict[str, Any]

    @property
    def base_url(self) -> str:
        return str((self.raw.get("service", {}) or {}).get("base_url", Defaults.SERVICE_BASE_URL))

    @property
    def batch_limit(self) -> int:
        return int((self.raw.get("generation", {}) or {}).get("batch_limit", Defaults.GENERATION_BATCH_LIMIT))

    @property
    def sample_rate(self) -> int:
        return int((self.raw.get("render", {}) or {}).get("sample_rate", Defaults.RENDER_SAMPLE_RATE))

    def get_studio_config(self) -> StudioConfig:
        return StudioConfig.from_settings(self)


def apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Overlay TTS_STUDIO_* environment variables onto raw settings.

    Environment variable overrides:
        - TTS_STUDIO_BASE_URL: Override service.base_url
        - TTS_STUDIO_BATCH_LIMIT: Override generation.batch_limit
        - TTS_STUDIO_LOG_LEVEL: Override logging.level

    Sections present but empty in YAML (``service:``) load as None and are
    treated as empty.
    """
    raw = dict(raw)

    base_url = os.getenv("TTS_STUDIO_BASE_URL")
    if base_url:
        raw["service"] = {**(raw.get("service") or {}), "base_url": base_url}

    batch_limit = os.getenv("TTS_STUDIO_BATCH_LIMIT")
    if batch_limit:
        raw["generation"] = {**(raw.get("generation") or {}), "batch_limit": batch_limit}

    log_level = os.getenv("TTS_STUDIO_LOG_LEVEL")
    if log_level:
        raw["logging"] = {**(raw.get("logging") or {}), "level": log_level}

    return raw


def load_settings(path: str = "config/settings.yaml") -> Settings:
    """
    Load settings from a YAML configuration file.

    Environment overrides are applied on top, see apply_env_overrides().

    Raises:
        FileNotFoundError: If the settings file doesn't exist.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    with p.open("r", encoding="utf-8") as f:
        raw: Dict[str, Any] = yaml.safe_load(f) or {}

    return Settings(raw=apply_env_overrides(raw))
