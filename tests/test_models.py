"""Tests for sleepcore.models -- value types and the session record."""

import pytest

from sleepcore.config import ConfigError, MonitorConfig
from sleepcore.models import (
    AnalysisResult,
    Cycle,
    QualityFactors,
    RecommendationCategory,
    SleepSession,
    SleepStage,
)

from tests.conftest import T0


class TestEnums:
    def test_stage_labels_and_descriptions(self):
        assert SleepStage.REM.value == "REM Sleep"
        assert "physical recovery" in SleepStage.DEEP.description
        assert all(stage.description for stage in SleepStage)

    def test_category_labels(self):
        assert RecommendationCategory.ENVIRONMENT.value == "Sleep Environment"
        assert len(RecommendationCategory) == 5


class TestCycle:
    def test_end_time(self):
        c = Cycle(stage=SleepStage.LIGHT, start_time=100.0, duration=50.0)
        assert c.end_time == 150.0
        assert c.to_dict()["stage"] == "Light Sleep"

    def test_ids_unique(self):
        a = Cycle(SleepStage.LIGHT, 0.0, 1.0)
        b = Cycle(SleepStage.LIGHT, 0.0, 1.0)
        assert a.id != b.id


class TestQualityFactors:
    def test_defaults_absent(self):
        f = QualityFactors()
        assert f.snoring == 0.0 and f.movement == 0.0
        assert f.room_temperature is None
        assert f.respiratory_rate is None

    def test_frozen(self):
        with pytest.raises(AttributeError):
            QualityFactors().snoring = 1.0  # type: ignore[misc]


class TestSleepSession:
    def test_open_session_duration(self):
        s = SleepSession(start_time=T0)
        assert s.duration(T0 + 90) == 90
        assert s.duration_formatted(T0 + 3725) == "01:02:05"
        assert s.is_valid
        with pytest.raises(ValueError):
            s.duration()

    def test_closed_session(self):
        s = SleepSession(start_time=T0, end_time=T0 + 8 * 3600)
        assert s.duration() == 8 * 3600
        assert s.duration_formatted() == "08:00:00"
        assert s.is_valid

    def test_invalid_when_end_not_after_start(self):
        assert not SleepSession(start_time=T0, end_time=T0).is_valid

    def test_quality_score(self):
        assert SleepSession(start_time=T0).quality_score == 0
        s = SleepSession(start_time=T0, quality_factors=QualityFactors(snoring=1.0))
        assert s.quality_score == 80

    def test_date(self):
        assert SleepSession(start_time=0.0).date.year == 1970


class TestAnalysisResultEmpty:
    def test_efficiency_zero_when_no_time(self):
        s = SleepSession(start_time=T0)
        result = AnalysisResult(
            session_id=s.id,
            date=s.date,
            cycles=(),
            quality_factors=QualityFactors(),
            sleep_score=100,
            recommendations=(),
        )
        assert result.efficiency == 0.0
        assert result.total_sleep_time == 0.0
        assert result.to_dict()["time_in_stage"] == {}


class TestMonitorConfig:
    def test_defaults(self):
        cfg = MonitorConfig()
        assert cfg.stage_update_interval == 300.0
        assert cfg.cycle_min_duration == 900.0
        assert cfg.validate() is cfg
        assert cfg.to_dict()["snoring_threshold_db"] == 60.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"movement_step": 0},
            {"snoring_step": -0.1},
            {"nominal_cycle": 0},
            {"awake_movement_level": 1.5},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigError):
            MonitorConfig(**kwargs).validate()
