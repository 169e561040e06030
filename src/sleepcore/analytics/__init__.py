"""Analytics engine for turning sleep-session samples into a report.

Modules:
    signals         -- Motion/audio accumulation and sensor-side helpers
    stages          -- Movement + elapsed-time stage classification
    cycles          -- Stage stream → sealed, time-ordered cycles
    scoring         -- Sleep score, efficiency and conditions score
    recommendations -- Rule-based advisory items
"""

from sleepcore.analytics.signals import (
    SignalAggregator,
    motion_magnitude,
    peak_decibels,
)
from sleepcore.analytics.stages import classify_stage, cycle_position
from sleepcore.analytics.cycles import CycleTracker
from sleepcore.analytics.scoring import (
    score_sleep,
    sleep_efficiency,
    total_sleep_time,
    time_in_stage,
    environment_quality_score,
)
from sleepcore.analytics.recommendations import recommend

__all__ = [
    # signals
    "SignalAggregator",
    "motion_magnitude",
    "peak_decibels",
    # stages
    "classify_stage",
    "cycle_position",
    # cycles
    "CycleTracker",
    # scoring
    "score_sleep",
    "sleep_efficiency",
    "total_sleep_time",
    "time_in_stage",
    "environment_quality_score",
    # recommendations
    "recommend",
]
