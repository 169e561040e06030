"""Tests for sleepcore.analytics.signals -- movement/snoring accumulation."""

import math
import threading

import numpy as np
import pytest

from sleepcore.analytics.signals import (
    SignalAggregator,
    motion_magnitude,
    peak_decibels,
)


class TestMotionSamples:
    def test_below_threshold_ignored(self):
        agg = SignalAggregator()
        agg.record_motion_sample(0.05)
        agg.record_motion_sample(0.1)  # not strictly above
        assert agg.snapshot().movement == 0.0

    def test_one_step_per_sample(self):
        agg = SignalAggregator()
        agg.record_motion_sample(0.5)
        assert agg.snapshot().movement == pytest.approx(0.1)
        agg.record_motion_sample(2.0)
        assert agg.snapshot().movement == pytest.approx(0.2)

    def test_ten_samples_saturate_at_one(self):
        agg = SignalAggregator()
        for _ in range(10):
            agg.record_motion_sample(0.5)
        assert agg.snapshot().movement == 1.0

    def test_clamped_after_many_samples(self):
        agg = SignalAggregator()
        for _ in range(50):
            agg.record_motion_sample(3.0)
        assert agg.snapshot().movement == 1.0

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), -0.5, None, "loud"])
    def test_invalid_magnitude_dropped(self, bad):
        agg = SignalAggregator()
        agg.record_motion_sample(bad)
        assert agg.snapshot().movement == 0.0
        assert agg.dropped == 1


class TestAudioSamples:
    def test_above_threshold_counts(self):
        agg = SignalAggregator()
        agg.record_audio_level(65.0)
        assert agg.snapshot().snoring == pytest.approx(0.1)

    def test_at_threshold_ignored(self):
        agg = SignalAggregator()
        agg.record_audio_level(60.0)
        assert agg.snapshot().snoring == 0.0

    def test_negative_db_is_valid_but_quiet(self):
        agg = SignalAggregator()
        agg.record_audio_level(-20.0)
        assert agg.snapshot().snoring == 0.0
        assert agg.dropped == 0

    def test_nan_dropped(self):
        agg = SignalAggregator()
        agg.record_audio_level(float("nan"))
        assert agg.dropped == 1

    def test_five_samples_give_half(self):
        agg = SignalAggregator()
        for _ in range(5):
            agg.record_audio_level(70.0)
        assert agg.snapshot().snoring == 0.5


class TestMonotonicAndBounded:
    def test_random_sequence_stays_in_range(self):
        rng = np.random.default_rng(7)
        agg = SignalAggregator()
        prev_move, prev_snore = 0.0, 0.0
        for magnitude, db in zip(rng.uniform(-1, 1, 300), rng.uniform(0, 100, 300)):
            agg.record_motion_sample(float(magnitude))
            agg.record_audio_level(float(db))
            snap = agg.snapshot()
            assert 0.0 <= snap.movement <= 1.0
            assert 0.0 <= snap.snoring <= 1.0
            assert snap.movement >= prev_move
            assert snap.snoring >= prev_snore
            prev_move, prev_snore = snap.movement, snap.snoring

    def test_concurrent_producers(self):
        agg = SignalAggregator(movement_step=0.001, snoring_step=0.001)

        def motion():
            for _ in range(200):
                agg.record_motion_sample(1.0)

        def audio():
            for _ in range(200):
                agg.record_audio_level(80.0)

        threads = [threading.Thread(target=motion) for _ in range(2)]
        threads += [threading.Thread(target=audio) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        snap = agg.snapshot()
        assert snap.movement == pytest.approx(0.4)
        assert snap.snoring == pytest.approx(0.4)


class TestEnvironmentAndClose:
    def test_environment_readings_in_snapshot(self):
        agg = SignalAggregator()
        agg.record_environment(room_temperature=21.5, heart_rate=58.0)
        snap = agg.snapshot()
        assert snap.room_temperature == 21.5
        assert snap.heart_rate == 58.0
        assert snap.room_noise is None

    def test_none_clears_reading(self):
        agg = SignalAggregator()
        agg.record_environment(room_noise=40.0)
        agg.record_environment(room_noise=None)
        assert agg.snapshot().room_noise is None

    def test_non_finite_reading_ignored(self):
        agg = SignalAggregator()
        agg.record_environment(room_temperature=20.0)
        agg.record_environment(room_temperature=float("nan"))
        assert agg.snapshot().room_temperature == 20.0

    def test_unknown_reading_rejected(self):
        agg = SignalAggregator()
        with pytest.raises(TypeError):
            agg.record_environment(humidity=0.4)

    def test_closed_aggregator_drops_samples(self):
        agg = SignalAggregator()
        agg.record_motion_sample(1.0)
        agg.close()
        agg.record_motion_sample(1.0)
        agg.record_audio_level(90.0)
        snap = agg.snapshot()
        assert snap.movement == pytest.approx(0.1)
        assert snap.snoring == 0.0
        assert agg.closed
        assert agg.dropped == 2

    def test_snapshot_is_a_copy(self):
        agg = SignalAggregator()
        before = agg.snapshot()
        agg.record_motion_sample(1.0)
        assert before.movement == 0.0


class TestSensorHelpers:
    def test_motion_magnitude(self):
        assert motion_magnitude(3.0, 4.0, 0.0) == pytest.approx(5.0)
        assert motion_magnitude(0.0, 0.0, 0.0) == 0.0

    def test_peak_decibels(self):
        assert peak_decibels([0.1, -1.0, 0.5]) == pytest.approx(0.0)
        assert peak_decibels(np.array([0.01, -0.001])) == pytest.approx(-40.0)

    def test_peak_decibels_silence(self):
        assert peak_decibels([]) == float("-inf")
        assert math.isinf(peak_decibels([0.0, 0.0]))
