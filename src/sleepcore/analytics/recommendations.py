"""Rule-based sleep recommendations.

Each rule is evaluated independently, in a fixed order, and contributes at
most one :class:`Recommendation`.  Output order is rule order, not priority.
"""

from __future__ import annotations

from typing import Callable, Sequence

from sleepcore.analytics.scoring import (
    EFFICIENCY_TARGET,
    ROOM_TEMP_RANGE_C,
    sleep_efficiency,
    total_sleep_time,
)
from sleepcore.models import (
    Cycle,
    QualityFactors,
    Recommendation,
    RecommendationCategory,
)

MIN_SLEEP_SECONDS = 7 * 3600
SNORING_LIMIT = 0.3


def _sleep_duration(cycles: Sequence[Cycle], factors: QualityFactors) -> Recommendation | None:
    if total_sleep_time(cycles) >= MIN_SLEEP_SECONDS:
        return None
    return Recommendation(
        category=RecommendationCategory.SCHEDULE,
        title="Increase Sleep Duration",
        description=(
            "You're getting less than 7 hours of sleep. Try to gradually adjust "
            "your schedule to allow for 7-9 hours of sleep."
        ),
        priority=5,
    )


def _sleep_efficiency(cycles: Sequence[Cycle], factors: QualityFactors) -> Recommendation | None:
    efficiency = sleep_efficiency(cycles)
    # No recorded time: efficiency is undefined, not 0%
    if efficiency is None or efficiency >= EFFICIENCY_TARGET:
        return None
    return Recommendation(
        category=RecommendationCategory.HABITS,
        title="Improve Sleep Efficiency",
        description=(
            "Your sleep efficiency is below 85%. Consider relaxation techniques "
            "before bed and maintaining a consistent sleep schedule."
        ),
        priority=4,
    )


def _room_temperature(cycles: Sequence[Cycle], factors: QualityFactors) -> Recommendation | None:
    temp = factors.room_temperature
    low, high = ROOM_TEMP_RANGE_C
    if temp is None or low <= temp <= high:
        return None
    return Recommendation(
        category=RecommendationCategory.ENVIRONMENT,
        title="Optimize Room Temperature",
        description="Keep your bedroom temperature between 16-24°C (60-75°F) for optimal sleep.",
        priority=3,
    )


def _snoring(cycles: Sequence[Cycle], factors: QualityFactors) -> Recommendation | None:
    if factors.snoring <= SNORING_LIMIT:
        return None
    return Recommendation(
        category=RecommendationCategory.MEDICAL,
        title="Address Snoring",
        description=(
            "Significant snoring detected. Consider consulting a healthcare "
            "provider to rule out sleep apnea."
        ),
        priority=4,
    )


Rule = Callable[[Sequence[Cycle], QualityFactors], "Recommendation | None"]

RULES: list[Rule] = [
    _sleep_duration,
    _sleep_efficiency,
    _room_temperature,
    _snoring,
]


def recommend(cycles: Sequence[Cycle], factors: QualityFactors) -> list[Recommendation]:
    """Evaluate every rule in order and collect the recommendations that fire."""
    results: list[Recommendation] = []
    for rule in RULES:
        rec = rule(cycles, factors)
        if rec is not None:
            results.append(rec)
    return results
