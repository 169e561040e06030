"""Shared fixtures and helpers for the sleepcore test suite."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sleepcore.config import MonitorConfig
from sleepcore.models import Cycle, SleepStage
from sleepcore.monitor import SleepMonitor
from sleepcore.replay import ReplayClock

T0 = 1_700_000_000.0  # arbitrary session start (POSIX seconds)
HOUR = 3600.0


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_cycles(*spans: tuple[SleepStage, float], start: float = T0) -> list[Cycle]:
    """Build back-to-back cycles from ``(stage, duration_seconds)`` pairs."""
    cycles: list[Cycle] = []
    t = start
    for stage, duration in spans:
        cycles.append(Cycle(stage=stage, start_time=t, duration=duration))
        t += duration
    return cycles


def write_jsonl(path: Path, entries: list[dict]) -> Path:
    """Write a list of dicts as JSONL to the given path."""
    with open(path, "w") as f:
        for entry in entries:
            f.write(json.dumps(entry) + "\n")
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> ReplayClock:
    return ReplayClock(T0)


@pytest.fixture
def monitor(clock: ReplayClock) -> SleepMonitor:
    return SleepMonitor(config=MonitorConfig(), clock=clock)
