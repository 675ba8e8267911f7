"""Tests for shiftsleep.analytics.scoring -- durations, quality and vitals."""

import pytest

from shiftsleep.analytics.intervals import SleepStage, SleepStageInterval
from shiftsleep.analytics.scoring import (
    clamp_duration,
    is_normal_sleep,
    quality_percent,
    round_half_up,
    sleep_efficiency,
    sleep_quality,
    stage_durations,
    time_in_bed,
    total_sleep_time,
    vital_stats,
    StageDurations,
    VitalStats,
    NORMAL_SLEEP_SECONDS,
    QUALITY_WEIGHTS,
)
from shiftsleep.exceptions import InvariantViolation

HOUR = 3600.0


class TestStageDurations:
    def test_empty(self):
        assert stage_durations([]) == StageDurations()

    def test_sums_per_stage(self):
        intervals = [
            SleepStageInterval(0, 7_200_000, SleepStage.DEEP_SLEEP),
            SleepStageInterval(7_200_000, 21_600_000, SleepStage.LIGHT_SLEEP),
            SleepStageInterval(21_600_000, 23_400_000, SleepStage.EYE_MOVEMENT),
            SleepStageInterval(23_400_000, 24_000_000, SleepStage.AWAKE),
            SleepStageInterval(24_000_000, 24_600_000, SleepStage.AWAKE),
        ]
        d = stage_durations(intervals)
        assert d.deep_sleep == 7200.0
        assert d.light_sleep == 14400.0
        assert d.eye_movement == 1800.0
        assert d.awake == 1200.0

    def test_for_stage(self):
        d = StageDurations(awake=1, eye_movement=2, light_sleep=3, deep_sleep=4)
        assert [d.for_stage(s) for s in SleepStage] == [1, 2, 3, 4]


class TestTotals:
    def test_total_excludes_awake(self):
        d = StageDurations(awake=HOUR, eye_movement=HOUR, light_sleep=2 * HOUR, deep_sleep=HOUR)
        assert total_sleep_time(d) == 4 * HOUR
        assert time_in_bed(d) == 5 * HOUR

    def test_efficiency(self):
        assert sleep_efficiency(4 * HOUR, 5 * HOUR) == pytest.approx(0.8)
        assert sleep_efficiency(0.0, 0.0) == 0.0

    def test_normal_threshold_inclusive(self):
        assert NORMAL_SLEEP_SECONDS == 21600
        assert is_normal_sleep(21600)
        assert not is_normal_sleep(21599.9)


class TestSleepQuality:
    def test_weights(self):
        assert sum(QUALITY_WEIGHTS.values()) == 1.0

    def test_zero_sleep_guard(self):
        assert sleep_quality(StageDurations()) == 0.0
        assert sleep_quality(StageDurations(awake=HOUR)) == 0.0

    def test_deep_and_light(self):
        d = StageDurations(deep_sleep=2 * HOUR, light_sleep=4 * HOUR)
        expected = (7200 / 21600) * 0.25 + (14400 / 21600) * 0.5
        assert sleep_quality(d) == pytest.approx(expected)
        assert sleep_quality(d) == pytest.approx(0.4167, abs=1e-4)

    def test_all_light_scores_half(self):
        assert sleep_quality(StageDurations(light_sleep=HOUR)) == pytest.approx(0.5)

    def test_all_deep_scores_quarter(self):
        assert sleep_quality(StageDurations(deep_sleep=HOUR)) == pytest.approx(0.25)

    def test_awake_does_not_change_score(self):
        base = StageDurations(deep_sleep=HOUR, light_sleep=HOUR)
        with_awake = StageDurations(awake=5 * HOUR, deep_sleep=HOUR, light_sleep=HOUR)
        assert sleep_quality(base) == sleep_quality(with_awake)

    @pytest.mark.parametrize("awake,rem,light,deep", [
        (0, 1, 0, 0),
        (1, 1, 1, 1),
        (10, 0, 3, 7),
        (0, 0.5, 100, 0.25),
    ])
    def test_bounds(self, awake, rem, light, deep):
        q = sleep_quality(StageDurations(awake, rem, light, deep))
        assert 0.0 <= q <= 1.0

    def test_quality_percent(self):
        assert quality_percent(0.416666) == 41.67
        assert quality_percent(0.0) == 0.0


class TestVitalStats:
    def test_filters_non_positive(self):
        stats = vital_stats([72, 0, 88, -5, 95])
        assert stats == VitalStats(min=72.0, max=95.0, avg=85)

    def test_empty(self):
        assert vital_stats([]) == VitalStats(0.0, 0.0, 0)

    def test_all_invalid(self):
        assert vital_stats([0, -1, 0]) == VitalStats()

    def test_min_max_not_rounded(self):
        stats = vital_stats([96.5, 97.25])
        assert stats.min == 96.5
        assert stats.max == 97.25
        assert stats.avg == 97

    def test_avg_rounds_half_up(self):
        assert vital_stats([60, 61]).avg == 61
        assert vital_stats([62, 63]).avg == 63

    def test_round_half_up(self):
        assert round_half_up(84.5) == 85
        assert round_half_up(84.49) == 84
        assert round_half_up(2.5) == 3


class TestClampDuration:
    def test_non_negative_passthrough(self):
        assert clamp_duration(12.5) == 12.5
        assert clamp_duration(0.0) == 0.0

    def test_negative_clamped(self, caplog):
        assert clamp_duration(-3.0) == 0.0
        assert "Clamping negative duration" in caplog.text

    def test_negative_strict_raises(self):
        with pytest.raises(InvariantViolation):
            clamp_duration(-3.0, strict=True)

    def test_stage_durations_clamps_inverted_interval(self):
        bad = SleepStageInterval(2000, 1000, SleepStage.LIGHT_SLEEP)
        assert stage_durations([bad]).light_sleep == 0.0
        with pytest.raises(InvariantViolation):
            stage_durations([bad], strict=True)
