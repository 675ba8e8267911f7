"""Sleep-stage intervals built from motion readings.

Each motion reading becomes one interval labelled with a sleep stage.
Readings with an unknown stage or a non-positive duration are dropped,
and a session longer than :data:`MAX_SESSION_SEC` is truncated at that
length from its first start.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

from shiftsleep import config
from shiftsleep.analytics.normalizer import Reading

logger = config.get_logger()


class SleepStage(IntEnum):
    """Sleep stage as stored by the device (1-4)."""

    AWAKE = 1
    EYE_MOVEMENT = 2
    LIGHT_SLEEP = 3
    DEEP_SLEEP = 4

    @property
    def label(self) -> str:
        return STAGE_LABELS[self]


STAGE_LABELS = {
    SleepStage.AWAKE: "awake",
    SleepStage.EYE_MOVEMENT: "eye movement",
    SleepStage.LIGHT_SLEEP: "light sleep",
    SleepStage.DEEP_SLEEP: "deep sleep",
}

# Longest plausible single sleep session (12 h)
MAX_SESSION_SEC = 12 * 60 * 60

MAPPINGS = ("direct", "magnitude")


@dataclass(frozen=True)
class SleepStageInterval:
    """A contiguous span of one sleep stage (epoch milliseconds)."""

    start_ms: int
    end_ms: int
    stage: SleepStage

    @property
    def duration_sec(self) -> float:
        return (self.end_ms - self.start_ms) / 1000.0

    def __repr__(self) -> str:
        return (
            f"SleepStageInterval({self.stage.name}, "
            f"{self.start_ms}-{self.end_ms}, {self.duration_sec:.0f}s)"
        )


# ---------------------------------------------------------------------------
# Stage mapping
# ---------------------------------------------------------------------------


def stage_from_value(value: float) -> SleepStage | None:
    """Map a stored stage code (1-4) onto :class:`SleepStage`.

    Non-integer codes and codes outside 1-4 give None.
    """
    if not value.is_integer():
        return None
    try:
        return SleepStage(int(value))
    except ValueError:
        return None


def stage_from_magnitude(value: float) -> SleepStage:
    """Bucket a raw motion magnitude into a stage.

    ``<8`` awake, ``<9`` eye movement, ``<10`` light, otherwise deep.

    Suspect: this heuristic appeared in a single report path and disagrees
    with the stage codes every chart uses.  It is kept only so that reports
    produced that way can be reproduced; prefer :func:`stage_from_value`.
    """
    if value < 8:
        return SleepStage.AWAKE
    if value < 9:
        return SleepStage.EYE_MOVEMENT
    if value < 10:
        return SleepStage.LIGHT_SLEEP
    return SleepStage.DEEP_SLEEP


def _mapper(mapping: str):
    if mapping == "direct":
        return stage_from_value
    if mapping == "magnitude":
        return stage_from_magnitude
    raise ValueError(f"mapping must be one of {MAPPINGS}, got {mapping!r}")


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


def build_intervals(
    motion: Sequence[Reading],
    mapping: str = "direct",
    max_session_sec: float | None = MAX_SESSION_SEC,
    drops: Counter | None = None,
) -> list[SleepStageInterval]:
    """Convert motion readings into sorted sleep-stage intervals.

    Args:
        motion: Motion readings (any order; the output is sorted).
        mapping: ``"direct"`` for stage codes 1-4, ``"magnitude"`` for the
            legacy bucket heuristic.
        max_session_sec: Session length cap measured from the first valid
            interval's start.  None disables the cap.
        drops: Optional counter that receives drop reasons.

    Returns:
        One interval per surviving reading, sorted by start time.
    """
    to_stage = _mapper(mapping)
    if drops is None:
        drops = Counter()

    intervals: list[SleepStageInterval] = []
    for reading in sorted(motion, key=lambda r: (r.start_ms, r.end_ms)):
        if reading.end_ms <= reading.start_ms:
            drops["non_positive_duration"] += 1
            continue
        stage = to_stage(reading.value)
        if stage is None:
            drops["unknown_stage"] += 1
            continue
        intervals.append(SleepStageInterval(reading.start_ms, reading.end_ms, stage))

    if intervals and max_session_sec is not None:
        intervals = _cap_session(intervals, max_session_sec, drops)

    return intervals


def _cap_session(
    intervals: list[SleepStageInterval],
    max_session_sec: float,
    drops: Counter,
) -> list[SleepStageInterval]:
    """Truncate a sorted interval list to *max_session_sec* after its first start."""
    cap_ms = intervals[0].start_ms + int(max_session_sec * 1000)
    if all(i.end_ms <= cap_ms for i in intervals):
        return intervals

    kept: list[SleepStageInterval] = []
    for interval in intervals:
        if interval.start_ms >= cap_ms:
            drops["beyond_session_cap"] += 1
            continue
        if interval.end_ms > cap_ms:
            interval = SleepStageInterval(interval.start_ms, cap_ms, interval.stage)
        kept.append(interval)

    logger.info(
        "Motion data spans past the %.1fh session cap; kept %d of %d intervals",
        max_session_sec / 3600.0, len(kept), len(intervals),
    )
    return kept


def merge_adjacent(intervals: Sequence[SleepStageInterval]) -> list[SleepStageInterval]:
    """Coalesce touching or overlapping intervals of the same stage.

    Expects input sorted by start time.  Per-stage totals are preserved
    as long as same-stage intervals do not overlap.
    """
    merged: list[SleepStageInterval] = []
    for interval in intervals:
        if merged:
            last = merged[-1]
            if last.stage == interval.stage and interval.start_ms <= last.end_ms:
                merged[-1] = SleepStageInterval(
                    last.start_ms, max(last.end_ms, interval.end_ms), last.stage
                )
                continue
        merged.append(interval)
    return merged
