"""Stage-duration aggregation, sleep-quality scoring and vital statistics.

Sleep quality rewards a night that matches an idealised phase split of
50% light, 25% deep and 25% eye-movement sleep:

    quality = 0.25 * deep/total + 0.25 * rem/total + 0.5 * light/total

where ``total`` excludes awake time.  The score stays a full-precision
fraction in [0, 1]; :func:`quality_percent` is for display only.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Iterable, Sequence

import numpy as np

from shiftsleep import config
from shiftsleep.analytics.intervals import SleepStage, SleepStageInterval
from shiftsleep.exceptions import InvariantViolation

logger = config.get_logger()


# Weights of each sleep stage's share of total sleep time
QUALITY_WEIGHTS = {
    SleepStage.DEEP_SLEEP: 0.25,
    SleepStage.EYE_MOVEMENT: 0.25,
    SleepStage.LIGHT_SLEEP: 0.5,
}

# Total sleep at or above this (6 h) counts as normal
NORMAL_SLEEP_SECONDS = 21600


@dataclass(frozen=True)
class StageDurations:
    """Seconds spent in each stage."""

    awake: float = 0.0
    eye_movement: float = 0.0
    light_sleep: float = 0.0
    deep_sleep: float = 0.0

    def for_stage(self, stage: SleepStage) -> float:
        return {
            SleepStage.AWAKE: self.awake,
            SleepStage.EYE_MOVEMENT: self.eye_movement,
            SleepStage.LIGHT_SLEEP: self.light_sleep,
            SleepStage.DEEP_SLEEP: self.deep_sleep,
        }[stage]

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class VitalStats:
    """Min / max / average of a vital-sign series (0 when no data)."""

    min: float = 0.0
    max: float = 0.0
    avg: int = 0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def clamp_duration(seconds: float, strict: bool = False) -> float:
    """Guard against negative durations.

    Raises InvariantViolation when *strict*; otherwise logs and returns 0.
    """
    if seconds >= 0:
        return seconds
    if strict:
        raise InvariantViolation(f"Negative duration {seconds}s after interval math")
    logger.warning("Clamping negative duration %.3fs to zero", seconds)
    return 0.0


def stage_durations(
    intervals: Iterable[SleepStageInterval],
    strict: bool = False,
) -> StageDurations:
    """Sum interval durations (seconds) per stage."""
    totals = {stage: 0.0 for stage in SleepStage}
    for interval in intervals:
        totals[interval.stage] += clamp_duration(interval.duration_sec, strict=strict)
    return StageDurations(
        awake=totals[SleepStage.AWAKE],
        eye_movement=totals[SleepStage.EYE_MOVEMENT],
        light_sleep=totals[SleepStage.LIGHT_SLEEP],
        deep_sleep=totals[SleepStage.DEEP_SLEEP],
    )


def total_sleep_time(durations: StageDurations) -> float:
    """Light + deep + eye-movement seconds; awake time is not sleep."""
    return durations.light_sleep + durations.deep_sleep + durations.eye_movement


def time_in_bed(durations: StageDurations) -> float:
    """All recorded stage time, awake included."""
    return total_sleep_time(durations) + durations.awake


def sleep_quality(durations: StageDurations) -> float:
    """Weighted phase-distribution score in [0, 1]; 0 with no sleep."""
    total = total_sleep_time(durations)
    if total <= 0:
        return 0.0
    return sum(
        weight * durations.for_stage(stage) / total
        for stage, weight in QUALITY_WEIGHTS.items()
    )


def quality_percent(quality: float) -> float:
    """Quality fraction as a percentage rounded to 2 decimals."""
    return round(quality * 100.0, 2)


def sleep_efficiency(total_sleep: float, in_bed: float) -> float:
    """Fraction of time in bed spent asleep (0 when nothing was recorded)."""
    if in_bed <= 0:
        return 0.0
    return total_sleep / in_bed


def is_normal_sleep(total_sleep: float) -> bool:
    """True when total sleep reaches :data:`NORMAL_SLEEP_SECONDS`."""
    return total_sleep >= NORMAL_SLEEP_SECONDS


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def vital_stats(values: Sequence[float]) -> VitalStats:
    """Min, max and rounded mean of the positive values.

    Zero and negative values are sensor dropouts and are ignored.  With no
    positive values every statistic is 0.
    """
    arr = np.asarray(values, dtype=np.float64)
    arr = arr[arr > 0]
    if arr.size == 0:
        return VitalStats()
    return VitalStats(
        min=float(np.min(arr)),
        max=float(np.max(arr)),
        avg=round_half_up(float(np.mean(arr))),
    )
