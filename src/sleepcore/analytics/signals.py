"""Signal aggregation for motion and audio samples.

Sensor callbacks push raw readings into a :class:`SignalAggregator`, which
keeps two bounded accumulators (movement and snoring).  Each sample above
its threshold adds one fixed step; the level is the number of steps taken,
capped at 1.0.  Accumulators never decrease within a session.

Samples can arrive from independent capture threads while the periodic
classifier reads a snapshot, so every read-modify-write happens under one
lock that is held only for that single update or copy.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import replace
from typing import Sequence

import numpy as np

from sleepcore.config import (
    MOVEMENT_STEP,
    MOVEMENT_THRESHOLD,
    SNORING_STEP,
    SNORING_THRESHOLD_DB,
)
from sleepcore.models import QualityFactors

logger = logging.getLogger(__name__)

ENVIRONMENT_FIELDS = (
    "room_temperature",
    "room_noise",
    "room_light",
    "heart_rate",
    "respiratory_rate",
)


# ---------------------------------------------------------------------------
# Sensor-side helpers
# ---------------------------------------------------------------------------


def motion_magnitude(x: float, y: float, z: float) -> float:
    """Euclidean magnitude of a 3-axis accelerometer reading."""
    return float(np.linalg.norm([x, y, z]))


def peak_decibels(buffer: Sequence[float] | np.ndarray) -> float:
    """Peak level of a PCM buffer in dB: ``20 * log10(max |sample|)``.

    Returns ``-inf`` for an empty or silent buffer.
    """
    samples = np.abs(np.asarray(buffer, dtype=np.float64))
    if samples.size == 0:
        return float("-inf")
    peak = float(samples.max())
    if peak <= 0.0:
        return float("-inf")
    return 20.0 * math.log10(peak)


def _as_finite(value: object) -> float | None:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------


class SignalAggregator:
    """Thread-safe movement/snoring accumulators plus latest room readings."""

    def __init__(
        self,
        movement_threshold: float = MOVEMENT_THRESHOLD,
        movement_step: float = MOVEMENT_STEP,
        snoring_threshold_db: float = SNORING_THRESHOLD_DB,
        snoring_step: float = SNORING_STEP,
    ) -> None:
        self.movement_threshold = movement_threshold
        self.movement_step = movement_step
        self.snoring_threshold_db = snoring_threshold_db
        self.snoring_step = snoring_step

        self._lock = threading.Lock()
        self._movement_hits = 0
        self._snoring_hits = 0
        self._environment = QualityFactors()
        self._closed = False
        self.dropped = 0

    @staticmethod
    def _level(hits: int, step: float) -> float:
        return min(1.0, hits * step)

    def _saturated(self, hits: int, step: float) -> bool:
        return hits * step >= 1.0

    def record_motion_sample(self, magnitude: float) -> None:
        """Count one movement step if *magnitude* exceeds the threshold.

        NaN, infinite, negative and non-numeric magnitudes are dropped.
        """
        value = _as_finite(magnitude)
        with self._lock:
            if self._closed or value is None or value < 0.0:
                self.dropped += 1
                return
            if value > self.movement_threshold and not self._saturated(
                self._movement_hits, self.movement_step
            ):
                self._movement_hits += 1

    def record_audio_level(self, decibels: float) -> None:
        """Count one snoring step if *decibels* exceeds the threshold.

        NaN, infinite and non-numeric levels are dropped.  Negative dB values
        are valid readings (quiet room) and simply never cross the threshold.
        """
        value = _as_finite(decibels)
        with self._lock:
            if self._closed or value is None:
                self.dropped += 1
                return
            if value > self.snoring_threshold_db and not self._saturated(
                self._snoring_hits, self.snoring_step
            ):
                self._snoring_hits += 1

    def record_environment(self, **readings: float | None) -> None:
        """Store the latest room/body readings (``room_temperature=21.5`` ...).

        Passing ``None`` clears a reading.  Non-finite values are dropped.
        """
        unknown = set(readings) - set(ENVIRONMENT_FIELDS)
        if unknown:
            raise TypeError(f"unknown environment reading(s): {', '.join(sorted(unknown))}")

        accepted: dict[str, float | None] = {}
        for name, raw in readings.items():
            if raw is None:
                accepted[name] = None
                continue
            value = _as_finite(raw)
            if value is None:
                logger.debug("Dropping non-finite %s reading: %r", name, raw)
                continue
            accepted[name] = value

        with self._lock:
            if self._closed:
                self.dropped += 1
                return
            self._environment = replace(self._environment, **accepted)

    def close(self) -> None:
        """Stop accepting samples; later calls to ``record_*`` are dropped."""
        with self._lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def snapshot(self) -> QualityFactors:
        """Return an immutable copy of the current signal state."""
        with self._lock:
            return replace(
                self._environment,
                movement=self._level(self._movement_hits, self.movement_step),
                snoring=self._level(self._snoring_hits, self.snoring_step),
            )
