"""sleepcore — sleep session monitoring, staging, scoring and recommendations."""

from sleepcore.config import MonitorConfig, ConfigError
from sleepcore.models import (
    AnalysisResult,
    Cycle,
    QualityFactors,
    Recommendation,
    RecommendationCategory,
    SleepSession,
    SleepStage,
)
from sleepcore.monitor import SleepMonitor, MonitorState, MonitorStateError

__all__ = [
    "MonitorConfig",
    "ConfigError",
    "AnalysisResult",
    "Cycle",
    "QualityFactors",
    "Recommendation",
    "RecommendationCategory",
    "SleepSession",
    "SleepStage",
    "SleepMonitor",
    "MonitorState",
    "MonitorStateError",
]

__version__ = "0.1.0"
