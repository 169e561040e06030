"""Value types shared by the monitoring core and the session report.

Everything here is immutable once built: the aggregator hands out
:class:`QualityFactors` snapshots, the cycle tracker seals :class:`Cycle`
values, and a finished session is a single :class:`AnalysisResult`.
Timestamps are POSIX seconds (floats) throughout.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def new_id() -> str:
    return str(uuid.uuid4())


class SleepStage(str, Enum):
    """Discrete sleep classification assigned per classifier tick."""

    AWAKE = "Awake"
    LIGHT = "Light Sleep"
    DEEP = "Deep Sleep"
    REM = "REM Sleep"

    @property
    def description(self) -> str:
        return _STAGE_DESCRIPTIONS[self]


_STAGE_DESCRIPTIONS = {
    SleepStage.AWAKE: "You are awake or in very light sleep",
    SleepStage.LIGHT: "Light sleep stage where you can be easily awakened",
    SleepStage.DEEP: "Deep sleep stage important for physical recovery",
    SleepStage.REM: "REM sleep stage important for mental recovery and dreams",
}


class RecommendationCategory(str, Enum):
    """Advisory area a recommendation belongs to."""

    SCHEDULE = "Sleep Schedule"
    ENVIRONMENT = "Sleep Environment"
    HABITS = "Sleep Habits"
    LIFESTYLE = "Lifestyle"
    MEDICAL = "Medical"


@dataclass(frozen=True)
class Cycle:
    """A maximal span during which the classified stage did not change."""

    stage: SleepStage
    start_time: float
    duration: float  # seconds
    id: str = field(default_factory=new_id)

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "stage": self.stage.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
        }


@dataclass(frozen=True)
class QualityFactors:
    """Accumulated signals and optional room/body readings for one session.

    ``snoring`` and ``movement`` are accumulators in [0, 1].  Every other
    field is an independent optional reading; ``None`` means "not measured"
    and is never treated as zero.
    """

    snoring: float = 0.0
    movement: float = 0.0
    room_temperature: float | None = None  # °C
    room_noise: float | None = None  # dB
    room_light: float | None = None  # 0-1
    heart_rate: float | None = None  # BPM
    respiratory_rate: float | None = None  # breaths/min

    @property
    def quality_score(self) -> int:
        """0-100 conditions score (see :func:`environment_quality_score`)."""
        from sleepcore.analytics.scoring import environment_quality_score

        return environment_quality_score(self)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Recommendation:
    """A single advisory item produced by a recommendation rule."""

    category: RecommendationCategory
    title: str
    description: str
    priority: int  # 1-5, 5 is most urgent
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """The finished report for one monitoring session."""

    session_id: str
    date: datetime
    cycles: tuple[Cycle, ...]
    quality_factors: QualityFactors
    sleep_score: int
    recommendations: tuple[Recommendation, ...]
    id: str = field(default_factory=new_id)

    @property
    def total_sleep_time(self) -> float:
        from sleepcore.analytics.scoring import total_sleep_time

        return total_sleep_time(self.cycles)

    @property
    def time_in_stage(self) -> dict[SleepStage, float]:
        from sleepcore.analytics.scoring import time_in_stage

        return time_in_stage(self.cycles)

    @property
    def efficiency(self) -> float:
        from sleepcore.analytics.scoring import sleep_efficiency

        eff = sleep_efficiency(self.cycles)
        return eff if eff is not None else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "date": self.date.isoformat(),
            "sleep_score": self.sleep_score,
            "total_sleep_time": self.total_sleep_time,
            "efficiency": round(self.efficiency, 3),
            "time_in_stage": {
                stage.value: seconds for stage, seconds in self.time_in_stage.items()
            },
            "cycles": [c.to_dict() for c in self.cycles],
            "quality_factors": self.quality_factors.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"AnalysisResult(score={self.sleep_score}, "
            f"sleep={self.total_sleep_time / 60:.0f}min, "
            f"eff={self.efficiency:.0%}, "
            f"cycles={len(self.cycles)}, "
            f"recs={len(self.recommendations)})"
        )


@dataclass
class SleepSession:
    """Bookkeeping record for a monitoring interval, open until ``end_time`` is set."""

    start_time: float
    end_time: float | None = None
    quality_factors: QualityFactors | None = None
    id: str = field(default_factory=new_id)

    def duration(self, now: float | None = None) -> float:
        """Session length in seconds; open sessions are measured up to *now*."""
        if self.end_time is not None:
            return self.end_time - self.start_time
        if now is None:
            raise ValueError("open session needs 'now' to measure its duration")
        return now - self.start_time

    def duration_formatted(self, now: float | None = None) -> str:
        interval = int(self.duration(now))
        hours = interval // 3600
        minutes = (interval % 3600) // 60
        seconds = interval % 60
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    @property
    def is_valid(self) -> bool:
        if self.end_time is None:
            return True
        return self.end_time > self.start_time

    @property
    def quality_score(self) -> int:
        if self.quality_factors is None:
            return 0
        return self.quality_factors.quality_score

    @property
    def date(self) -> datetime:
        return datetime.fromtimestamp(self.start_time, tz=timezone.utc)
