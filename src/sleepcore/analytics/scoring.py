"""Sleep score and derived session metrics.

The sleep score starts at 100 and loses points for:

- sleep efficiency below 85%: ``int((0.85 - efficiency) * 100)``
- accumulated movement: ``int(movement * 20)``
- accumulated snoring: ``int(snoring * 20)``

Deductions are truncated toward zero (``int``), not rounded, so that scores
stay reproducible across implementations.  A session with no recorded time
has no defined efficiency and takes no efficiency deduction.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from sleepcore.models import Cycle, QualityFactors, SleepStage

EFFICIENCY_TARGET = 0.85
MOVEMENT_WEIGHT = 20
SNORING_WEIGHT = 20

# Conditions score (QualityFactors.quality_score)
ENV_SNORING_WEIGHT = 20
ENV_MOVEMENT_WEIGHT = 15
ROOM_TEMP_RANGE_C = (16.0, 24.0)
ROOM_TEMP_PENALTY = 10
ROOM_NOISE_LIMIT_DB = 50.0
ROOM_NOISE_DB_PER_POINT = 5.0


def total_sleep_time(cycles: Iterable[Cycle]) -> float:
    """Sum of all cycle durations, in seconds."""
    return float(sum(c.duration for c in cycles))


def time_in_stage(cycles: Iterable[Cycle]) -> dict[SleepStage, float]:
    """Seconds spent in each stage that appears in *cycles*."""
    totals: dict[SleepStage, float] = {}
    for c in cycles:
        totals[c.stage] = totals.get(c.stage, 0.0) + c.duration
    return totals


def sleep_efficiency(cycles: Sequence[Cycle]) -> float | None:
    """Fraction of recorded time not spent Awake.

    Returns ``None`` when no time was recorded, so callers can tell an
    empty session apart from a 0% night.
    """
    total = total_sleep_time(cycles)
    if total <= 0:
        return None
    awake = sum(c.duration for c in cycles if c.stage == SleepStage.AWAKE)
    return (total - awake) / total


def _clamp_score(score: int) -> int:
    return max(0, min(100, score))


def score_sleep(cycles: Sequence[Cycle], factors: QualityFactors) -> int:
    """Compute the 0-100 sleep score for a finished session.

    Args:
        cycles: Sealed cycles of the session.
        factors: Final signal snapshot.

    Returns:
        Integer score clamped to [0, 100].
    """
    score = 100

    efficiency = sleep_efficiency(cycles)
    if efficiency is not None and efficiency < EFFICIENCY_TARGET:
        score -= int((EFFICIENCY_TARGET - efficiency) * 100)

    score -= int(factors.movement * MOVEMENT_WEIGHT)
    score -= int(factors.snoring * SNORING_WEIGHT)

    return _clamp_score(score)


def environment_quality_score(factors: QualityFactors) -> int:
    """0-100 score of the sleeping conditions alone.

    Uses the accumulators plus whichever room readings are present; absent
    readings neither help nor hurt.
    """
    score = 100
    score -= int(factors.snoring * ENV_SNORING_WEIGHT)
    score -= int(factors.movement * ENV_MOVEMENT_WEIGHT)

    if factors.room_temperature is not None:
        low, high = ROOM_TEMP_RANGE_C
        if factors.room_temperature < low or factors.room_temperature > high:
            score -= ROOM_TEMP_PENALTY

    if factors.room_noise is not None and factors.room_noise > ROOM_NOISE_LIMIT_DB:
        score -= int((factors.room_noise - ROOM_NOISE_LIMIT_DB) / ROOM_NOISE_DB_PER_POINT)

    return _clamp_score(score)
