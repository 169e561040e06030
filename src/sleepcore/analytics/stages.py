"""Stage classification from accumulated movement and elapsed session time.

This is a deliberately simple, explainable heuristic rather than true
actigraphy staging: heavy accumulated movement means Awake, otherwise the
stage follows a fixed 90-minute template.

Position within the nominal cycle (seconds):

    [0, 2700)     Light
    [2700, 3600)  Deep
    [3600, 4500)  REM
    [4500, 5400)  Light

Windows are half-open, so a boundary second belongs to the window it
opens.
"""

from __future__ import annotations

from sleepcore.config import AWAKE_MOVEMENT_LEVEL, NOMINAL_CYCLE
from sleepcore.models import QualityFactors, SleepStage

# (window end in seconds of the default 90-minute cycle, stage)
STAGE_WINDOWS = [
    (45 * 60.0, SleepStage.LIGHT),
    (60 * 60.0, SleepStage.DEEP),
    (75 * 60.0, SleepStage.REM),
]


def cycle_position(
    session_start: float,
    now: float,
    nominal_cycle: float = NOMINAL_CYCLE,
) -> float:
    """Seconds into the current nominal cycle.  Negative elapsed time clamps to 0."""
    elapsed = max(0.0, now - session_start)
    return elapsed % nominal_cycle


def stage_for_position(position: float, nominal_cycle: float = NOMINAL_CYCLE) -> SleepStage:
    """Map a position within the nominal cycle to its template stage."""
    scale = nominal_cycle / NOMINAL_CYCLE
    for window_end, stage in STAGE_WINDOWS:
        if position < window_end * scale:
            return stage
    return SleepStage.LIGHT


def classify_stage(
    signals: QualityFactors,
    session_start: float,
    now: float,
    nominal_cycle: float = NOMINAL_CYCLE,
    awake_movement_level: float = AWAKE_MOVEMENT_LEVEL,
) -> SleepStage:
    """Classify the current sleep stage.

    Args:
        signals: Snapshot of the accumulated signals.
        session_start: Session start timestamp (seconds).
        now: Timestamp of this tick (seconds).
        nominal_cycle: Length of one template sleep cycle (seconds).
        awake_movement_level: Movement level above which the sleeper is Awake.

    Returns:
        The stage for this tick.  Pure and deterministic.
    """
    if signals.movement > awake_movement_level:
        return SleepStage.AWAKE
    return stage_for_position(cycle_position(session_start, now, nominal_cycle), nominal_cycle)
