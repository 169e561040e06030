"""Replay recorded sample logs through a monitor for offline analysis.

A sample log is JSONL, one reading per line, each with a timestamp ``t``
(POSIX seconds) and a ``type``:

    {"t": 1700000000.0, "type": "start"}
    {"t": 1700000012.5, "type": "motion", "magnitude": 0.42}
    {"t": 1700000013.0, "type": "accel", "x": 0.1, "y": -0.3, "z": 0.05}
    {"t": 1700000020.0, "type": "audio", "db": 63.1}
    {"t": 1700000030.0, "type": "env", "room_temperature": 21.5}
    {"t": 1700028800.0, "type": "stop"}

``start``/``stop`` are optional; without them the session spans the first
to the last reading.  Classifier ticks fire every ``stage_update_interval``
seconds of log time; a tick due at or before a reading's timestamp runs
before that reading is applied.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Iterable

from sleepcore.analytics.signals import ENVIRONMENT_FIELDS, motion_magnitude
from sleepcore.config import MonitorConfig
from sleepcore.models import AnalysisResult
from sleepcore.monitor import SleepMonitor

logger = logging.getLogger(__name__)

SAMPLE_TYPES = {"start", "stop", "motion", "accel", "audio", "env"}


class ReplayClock:
    """Manually advanced clock for driving a monitor with log timestamps."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now

    def set(self, now: float) -> None:
        self.now = now


def load_samples(path: str | Path) -> list[dict[str, Any]]:
    """Read a JSONL sample log, skipping blank, malformed and unknown lines.

    Returned entries are sorted by timestamp (stable for equal timestamps).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample log not found: {path}")

    entries: list[dict[str, Any]] = []
    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("[line %d] Invalid JSON, skipping", line_num)
                continue
            if not isinstance(entry, dict) or entry.get("type") not in SAMPLE_TYPES:
                logger.debug("[line %d] Unknown sample type, skipping", line_num)
                continue
            try:
                t = float(entry["t"])
            except (KeyError, TypeError, ValueError):
                t = math.nan
            if not math.isfinite(t):
                logger.debug("[line %d] Missing or bad timestamp, skipping", line_num)
                continue
            entry["t"] = t
            entries.append(entry)

    entries.sort(key=lambda e: e["t"])
    return entries


def _apply(monitor: SleepMonitor, entry: dict[str, Any]) -> None:
    kind = entry["type"]
    if kind == "motion":
        monitor.record_motion_sample(entry.get("magnitude"))
    elif kind == "accel":
        try:
            magnitude = motion_magnitude(entry["x"], entry["y"], entry["z"])
        except (KeyError, TypeError, ValueError):
            logger.debug("Incomplete accel sample at %.3f, skipping", entry["t"])
            return
        monitor.record_motion_sample(magnitude)
    elif kind == "audio":
        monitor.record_audio_level(entry.get("db"))
    elif kind == "env":
        readings = {k: entry[k] for k in ENVIRONMENT_FIELDS if k in entry}
        if readings:
            monitor.record_environment(**readings)


def replay_samples(
    entries: Iterable[dict[str, Any]],
    config: MonitorConfig | None = None,
) -> AnalysisResult | None:
    """Drive a fresh monitor through *entries* (sorted by ``t``).

    Entries whose ``t`` is not a finite number are skipped.

    Returns:
        The session report, or ``None`` when there is nothing to replay.
    """
    entries = [e for e in entries if math.isfinite(e["t"])]
    if not entries:
        return None

    clock = ReplayClock()
    monitor = SleepMonitor(config=config, clock=clock)
    interval = monitor.config.stage_update_interval

    starts = [e["t"] for e in entries if e["type"] == "start"]
    stops = [e["t"] for e in entries if e["type"] == "stop"]
    start_time = starts[0] if starts else entries[0]["t"]
    stop_time = stops[-1] if stops else entries[-1]["t"]
    stop_time = max(stop_time, start_time)

    clock.set(start_time)
    monitor.start()
    next_tick = start_time + interval

    def run_ticks_until(t: float) -> None:
        nonlocal next_tick
        while next_tick <= t:
            clock.set(next_tick)
            monitor.tick()
            next_tick += interval

    applied = 0
    for entry in entries:
        if entry["type"] in ("start", "stop"):
            continue
        t = entry["t"]
        if t < start_time or t > stop_time:
            continue
        run_ticks_until(t)
        clock.set(t)
        _apply(monitor, entry)
        applied += 1

    run_ticks_until(stop_time)
    clock.set(stop_time)
    result = monitor.stop()

    logger.info(
        "Replayed %d samples over %.0fs (%d dropped)",
        applied, stop_time - start_time, monitor.dropped_samples,
    )
    return result


def replay_file(
    sample_path: str | Path,
    output_path: str | Path | None = None,
    config: MonitorConfig | None = None,
) -> AnalysisResult | None:
    """Replay a JSONL sample log and optionally write the report as JSON."""
    result = replay_samples(load_samples(sample_path), config=config)
    if result is not None and output_path:
        with open(output_path, "w") as out:
            out.write(result.to_json())
        logger.info("Report written to %s", output_path)
    return result
