"""Cycle tracking: turn a stream of stage classifications into sealed cycles.

The tracker is a two-state machine.  With no open cycle, the first
observation opens one.  An observation of the same stage leaves the open
cycle running; a different stage seals it (``duration = now - start``) and
opens the next one at ``now``.  :meth:`CycleTracker.finish` seals whatever is
open at session end.

Short cycles are kept as-is: ``cycle_min_duration`` exists in the config
but no merging happens here.

Start times strictly increase as long as ticks move forward in time.  A tick
earlier than the last one is clamped to the last one's time, so a
transition on the clamped path can seal a zero-length cycle whose start
equals the next cycle's start.  Cycles still never overlap and durations
are never negative.

The tracker itself is not locked; :class:`~sleepcore.monitor.SleepMonitor`
serializes access to it.
"""

from __future__ import annotations

import logging

from sleepcore.models import Cycle, SleepStage

logger = logging.getLogger(__name__)


class CycleTracker:
    """Append-only, time-ordered sequence of sealed :class:`Cycle` values."""

    def __init__(self) -> None:
        self._sealed: list[Cycle] = []
        self._stage: SleepStage | None = None
        self._start: float = 0.0
        self._last_time: float | None = None

    @property
    def active(self) -> bool:
        return self._stage is not None

    @property
    def current_stage(self) -> SleepStage | None:
        return self._stage

    @property
    def cycles(self) -> tuple[Cycle, ...]:
        """Sealed cycles so far, oldest first."""
        return tuple(self._sealed)

    def _clamp(self, now: float) -> float:
        # A tick earlier than one already seen is treated as arriving at that time
        if self._last_time is not None and now < self._last_time:
            logger.debug("Clamping out-of-order timestamp %.3f to %.3f", now, self._last_time)
            now = self._last_time
        self._last_time = now
        return now

    def _seal(self, stage: SleepStage, now: float) -> Cycle:
        cycle = Cycle(stage=stage, start_time=self._start, duration=now - self._start)
        self._sealed.append(cycle)
        logger.debug(
            "Sealed %s cycle at %.0f (%.0fs)", cycle.stage.value, cycle.start_time, cycle.duration
        )
        return cycle

    def observe(self, stage: SleepStage, now: float) -> Cycle | None:
        """Feed one classifier result.  Returns the cycle sealed by this tick, if any."""
        now = self._clamp(now)

        current = self._stage
        if current is None:
            self._stage = stage
            self._start = now
            return None

        if stage == current:
            return None

        sealed = self._seal(current, now)
        self._stage = stage
        self._start = now
        return sealed

    def current_cycle(self, now: float) -> Cycle | None:
        """The open cycle with a provisional duration measured to *now*."""
        if self._stage is None:
            return None
        end = now if self._last_time is None else max(now, self._last_time)
        return Cycle(stage=self._stage, start_time=self._start, duration=end - self._start)

    def finish(self, now: float) -> tuple[Cycle, ...]:
        """Seal the open cycle (if any) and return every sealed cycle."""
        now = self._clamp(now)
        if self._stage is not None:
            self._seal(self._stage, now)
            self._stage = None
        return self.cycles
