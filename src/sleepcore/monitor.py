"""Sleep monitoring session: wires the aggregator, classifier and tracker together.

A :class:`SleepMonitor` owns one session's state.  Sensor producers push
samples through ``record_*`` from any thread; a periodic driver (the
:meth:`SleepMonitor.run` coroutine, or any external timer calling
:meth:`SleepMonitor.tick`) classifies the stage; :meth:`SleepMonitor.stop`
seals the last cycle and builds the :class:`AnalysisResult`.

Time comes from an injectable ``clock`` so tests and replays can supply
synthetic timestamps.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from sleepcore.analytics.cycles import CycleTracker
from sleepcore.analytics.recommendations import recommend
from sleepcore.analytics.scoring import score_sleep
from sleepcore.analytics.signals import SignalAggregator
from sleepcore.analytics.stages import classify_stage
from sleepcore.config import MonitorConfig
from sleepcore.models import (
    AnalysisResult,
    Cycle,
    QualityFactors,
    SleepSession,
    SleepStage,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class MonitorState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class MonitorStateError(RuntimeError):
    """Raised when a lifecycle call does not fit the monitor's current state."""


def build_analysis(
    session_id: str,
    cycles: tuple[Cycle, ...],
    factors: QualityFactors,
    finished_at: float,
) -> AnalysisResult:
    """Score a finished session and assemble its report."""
    return AnalysisResult(
        session_id=session_id,
        date=datetime.fromtimestamp(finished_at, tz=timezone.utc),
        cycles=cycles,
        quality_factors=factors,
        sleep_score=score_sleep(cycles, factors),
        recommendations=tuple(recommend(cycles, factors)),
    )


class SleepMonitor:
    """One monitoring session, from :meth:`start` to :meth:`stop`."""

    def __init__(
        self,
        config: MonitorConfig | None = None,
        clock: Clock = time.time,
    ) -> None:
        self.config = (config or MonitorConfig()).validate()
        self.clock = clock

        self._lock = threading.Lock()
        self._state = MonitorState.IDLE
        self._aggregator: SignalAggregator | None = None
        self._tracker = CycleTracker()
        self._session: SleepSession | None = None
        self._result: AnalysisResult | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state == MonitorState.RUNNING

    @property
    def session(self) -> SleepSession | None:
        return self._session

    def start(self) -> SleepSession:
        """Open the session and classify its first stage at the start time."""
        with self._lock:
            if self._state != MonitorState.IDLE:
                raise MonitorStateError(f"cannot start a monitor that is {self._state.value}")
            cfg = self.config
            now = self.clock()
            session = SleepSession(start_time=now)
            aggregator = SignalAggregator(
                movement_threshold=cfg.movement_threshold,
                movement_step=cfg.movement_step,
                snoring_threshold_db=cfg.snoring_threshold_db,
                snoring_step=cfg.snoring_step,
            )
            self._session, self._aggregator = session, aggregator
            self._state = MonitorState.RUNNING
            self._classify(aggregator, session, now)
            logger.info("Session %s started", session.id)
            return session

    def tick(self) -> SleepStage:
        """Classify the current stage and feed it to the cycle tracker."""
        with self._lock:
            aggregator, session = self._require_running("tick")
            return self._classify(aggregator, session, self.clock())

    def stop(self) -> AnalysisResult:
        """End the session: drop further samples, seal the open cycle, build the report."""
        with self._lock:
            aggregator, session = self._require_running("stop")
            now = self.clock()

            # Close first so no sample after the stop timestamp reaches the report
            aggregator.close()
            factors = aggregator.snapshot()
            cycles = self._tracker.finish(now)

            session.end_time = now
            session.quality_factors = factors
            self._state = MonitorState.STOPPED
            result = build_analysis(session.id, cycles, factors, now)
            self._result = result

        logger.info("Session %s stopped: %r", session.id, result)
        return result

    @property
    def result(self) -> AnalysisResult | None:
        """The report, once :meth:`stop` has run."""
        return self._result

    def _require_running(self, action: str) -> tuple[SignalAggregator, SleepSession]:
        aggregator, session = self._aggregator, self._session
        if self._state != MonitorState.RUNNING or aggregator is None or session is None:
            raise MonitorStateError(f"cannot {action} a monitor that is {self._state.value}")
        return aggregator, session

    def _classify(
        self, aggregator: SignalAggregator, session: SleepSession, now: float
    ) -> SleepStage:
        signals = aggregator.snapshot()
        stage = classify_stage(
            signals,
            session.start_time,
            now,
            nominal_cycle=self.config.nominal_cycle,
            awake_movement_level=self.config.awake_movement_level,
        )
        sealed = self._tracker.observe(stage, now)
        if sealed is not None:
            logger.debug("Stage change → %s", stage.value)
        return stage

    # ------------------------------------------------------------------
    # Sample ingestion (sensor collaborators)
    # ------------------------------------------------------------------

    def record_motion_sample(self, magnitude: float) -> None:
        aggregator = self._aggregator
        if aggregator is None:
            logger.debug("Motion sample before start, ignoring")
            return
        aggregator.record_motion_sample(magnitude)

    def record_audio_level(self, decibels: float) -> None:
        aggregator = self._aggregator
        if aggregator is None:
            logger.debug("Audio sample before start, ignoring")
            return
        aggregator.record_audio_level(decibels)

    def record_environment(self, **readings: float | None) -> None:
        aggregator = self._aggregator
        if aggregator is None:
            logger.debug("Environment reading before start, ignoring")
            return
        aggregator.record_environment(**readings)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def snapshot(self) -> QualityFactors:
        aggregator = self._aggregator
        if aggregator is None:
            return QualityFactors()
        return aggregator.snapshot()

    @property
    def dropped_samples(self) -> int:
        return self._aggregator.dropped if self._aggregator is not None else 0

    @property
    def current_stage(self) -> SleepStage | None:
        with self._lock:
            return self._tracker.current_stage

    def current_cycle(self) -> Cycle | None:
        """The open cycle with its duration measured up to now."""
        with self._lock:
            return self._tracker.current_cycle(self.clock())

    @property
    def cycles(self) -> tuple[Cycle, ...]:
        with self._lock:
            return self._tracker.cycles

    # ------------------------------------------------------------------
    # Periodic driver
    # ------------------------------------------------------------------

    async def run(self, interval: float | None = None) -> None:
        """Tick every *interval* seconds until the monitor stops or the task is cancelled."""
        period = interval if interval is not None else self.config.stage_update_interval
        if period <= 0:
            raise ValueError(f"interval must be positive, got {period!r}")

        while self.running:
            await asyncio.sleep(period)
            try:
                stage = self.tick()
            except MonitorStateError:
                # stop() landed while we were sleeping
                break
            logger.debug("Tick: %s", stage.value)
