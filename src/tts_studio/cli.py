"""
Command-Line Interface for tts-studio.

Builds a timeline from a script file, voices it through the voice service
and exports the mixdown.

Usage Examples:
    # Generate every block in batches and export to ./exports
    tts-studio script.yaml --out exports

    # One request per block instead of batches
    tts-studio script.yaml --single

    # Show the chunk plan without contacting the service
    tts-studio script.yaml --dry-run --json

Script file (YAML):
    voice: narrator          # default voice for blocks without one
    batch_limit: 5           # optional, overrides settings
    duration: 30             # optional floor on project length (seconds)
    blocks:
      - text: "Welcome back."
      - text: "Today we talk about tides."
        voice: guest
        speed: 1.1

Environment Variables:
    TTS_STUDIO_BASE_URL: Voice service base URL
    TTS_STUDIO_BATCH_LIMIT: Texts per batched request
    TTS_STUDIO_LOG_LEVEL: Log verbosity (1-4)
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from tts_studio.audio.assets import AssetStore
from tts_studio.audio.renderer import AudioRenderer
from tts_studio.client.http import HttpVoiceClient
from tts_studio.core.config import (
    ConfigValidationError,
    Settings,
    StudioConfig,
    apply_env_overrides,
    load_settings,
)
from tts_studio.core.logging import configure_logging, get_logger, info, verbose
from tts_studio.errors import StudioError
from tts_studio.services.generation import GenerationOrchestrator, chunk_targets
from tts_studio.timeline.timeline import Timeline

_LOG = get_logger("tts-studio.cli")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="tts-studio CLI (generate and export a voice project)")

    parser.add_argument("script", help="Script file (YAML) describing the blocks")
    parser.add_argument("--config", default="config/settings.yaml",
                        help="Settings file (ignored if missing)")
    parser.add_argument("--out", help="Output directory for the exported WAV")
    parser.add_argument("--base-url", help="Voice service base URL override")

    parser.add_argument("--single", action="store_true",
                        help="Generate blocks one request at a time")
    parser.add_argument("--dry-run", action="store_true",
                        help="Build the timeline and show the chunk plan only")
    parser.add_argument("--json", action="store_true",
                        help="Print JSON summary")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-v, -vv)")

    return parser.parse_args(argv)


def _load_settings(path: str, base_url: Optional[str]) -> Settings:
    try:
        settings = load_settings(path)
    except FileNotFoundError:
        settings = Settings(raw=apply_env_overrides({}))

    if base_url:
        raw = dict(settings.raw)
        raw["service"] = {**(raw.get("service") or {}), "base_url": base_url}
        settings = Settings(raw=raw)

    return settings


def load_script(path: str | Path, config: StudioConfig) -> Timeline:
    """
    Build a Timeline from a YAML script file.

    Raises:
        SystemExit: If the file is missing or has no blocks.
    """
    p = Path(path)
    if not p.exists():
        raise SystemExit(f"Script file not found: {p}")

    data: Dict[str, Any] = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    entries = data.get("blocks") or []
    if not entries:
        raise SystemExit("Script has no blocks.")

    timeline = Timeline(
        global_voice=str(data.get("voice") or config.timeline.global_voice),
        batch_limit=int(data.get("batch_limit") or config.generation.batch_limit),
        user_duration_override=float(data.get("duration") or 0.0),
    )
    for entry in entries:
        if isinstance(entry, str):
            entry = {"text": entry}
        block = timeline.add_block()
        block.text = str(entry.get("text", "")).strip()
        if entry.get("voice"):
            block.voice_name = str(entry["voice"])
        if entry.get("speed") is not None:
            block.set_speed(float(entry["speed"]))
    return timeline


def _plan(timeline: Timeline) -> List[Dict[str, Any]]:
    return [
        {"voice": voice, "size": len(chunk), "blocks": [b.id for b in chunk]}
        for voice, chunk in chunk_targets(timeline.blocks, timeline.batch_limit)
    ]


async def _run(timeline: Timeline, config: StudioConfig, args: argparse.Namespace) -> Dict[str, Any]:
    summary: Dict[str, Any] = {}
    async with HttpVoiceClient(config.service) as client:
        orchestrator = GenerationOrchestrator(
            timeline,
            client,
            AssetStore(),
            config=config.generation,
            reflow_tolerance=config.timeline.reflow_tolerance_s,
        )
        if args.single:
            for block in list(timeline.blocks):
                await orchestrator.generate_block(block.id)
        else:
            report = await orchestrator.generate_batch()
            summary["chunks"] = report.chunks

    timeline.sort_by_time()
    statuses = [b.status.value for b in timeline.blocks]
    summary.update(
        done=statuses.count("done"),
        failed=statuses.count("error"),
        duration=round(timeline.project_duration, 3),
    )

    renderer = AudioRenderer(config.render)
    path = await renderer.export(timeline, args.out)
    summary["output"] = str(path)
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = _parse_args(argv)

    settings = _load_settings(args.config, args.base_url)
    try:
        config = settings.get_studio_config()
    except (ConfigValidationError, ValueError) as e:
        raise SystemExit(f"Invalid settings: {e}")

    configure_logging(min(4, config.logging.level + args.verbose), force=True)
    verbose(
        _LOG, "settings_loaded",
        base_url=settings.base_url,
        batch_limit=settings.batch_limit,
        sample_rate=settings.sample_rate,
    )

    timeline = load_script(args.script, config)
    info(_LOG, "script_loaded", blocks=len(timeline), batch_limit=timeline.batch_limit)

    if args.dry_run:
        summary: Dict[str, Any] = {"blocks": timeline.snapshot(), "chunks": _plan(timeline)}
    else:
        try:
            summary = asyncio.run(_run(timeline, config, args))
        except StudioError as e:
            if args.json:
                print(json.dumps(e.to_dict(), ensure_ascii=False))
            raise SystemExit(f"Export failed: {e.message}")

    if args.json:
        print(json.dumps(summary, ensure_ascii=False, indent=2))
    elif args.dry_run:
        for i, chunk in enumerate(summary["chunks"], start=1):
            print(f"chunk {i}: voice={chunk['voice']} size={chunk['size']}")
    else:
        print(f"{summary['done']} done, {summary['failed']} failed -> {summary['output']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
