"""Tunable constants for the monitoring heuristic."""

from __future__ import annotations

from dataclasses import dataclass, fields

# Motion: unitless acceleration magnitude above which a sample counts as movement
MOVEMENT_THRESHOLD = 0.1
MOVEMENT_STEP = 0.1

# Audio: peak level (dB) above which a buffer counts as snoring
SNORING_THRESHOLD_DB = 60.0
SNORING_STEP = 0.1

STAGE_UPDATE_INTERVAL = 300.0  # seconds between classifier ticks
CYCLE_MIN_DURATION = 900.0  # declared only; the tracker does not merge short cycles
NOMINAL_CYCLE = 90 * 60.0  # one light → deep → REM → light pass
AWAKE_MOVEMENT_LEVEL = 0.7  # movement above this forces Awake


class ConfigError(ValueError):
    """Raised for a configuration the monitor cannot run with."""


@dataclass(frozen=True)
class MonitorConfig:
    """All knobs of a :class:`~sleepcore.monitor.SleepMonitor` in one place."""

    movement_threshold: float = MOVEMENT_THRESHOLD
    movement_step: float = MOVEMENT_STEP
    snoring_threshold_db: float = SNORING_THRESHOLD_DB
    snoring_step: float = SNORING_STEP
    stage_update_interval: float = STAGE_UPDATE_INTERVAL
    cycle_min_duration: float = CYCLE_MIN_DURATION
    nominal_cycle: float = NOMINAL_CYCLE
    awake_movement_level: float = AWAKE_MOVEMENT_LEVEL

    def validate(self) -> "MonitorConfig":
        for name in ("movement_step", "snoring_step", "stage_update_interval", "nominal_cycle"):
            value = getattr(self, name)
            if not value > 0:
                raise ConfigError(f"{name} must be positive, got {value!r}")
        if not 0.0 <= self.awake_movement_level <= 1.0:
            raise ConfigError(
                f"awake_movement_level must be within [0, 1], got {self.awake_movement_level!r}"
            )
        return self

    def to_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
