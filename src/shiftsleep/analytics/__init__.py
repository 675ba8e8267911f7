"""Sleep-stage analytics engine for wearable motion and vital-sign samples.

Modules:
    normalizer -- Group raw samples by metric and coerce their values
    intervals  -- Motion readings to sleep-stage intervals, 12 h session cap
    shift      -- Day/night shift sleep windows and interval filtering
    scoring    -- Stage durations, sleep quality, vital statistics
    report     -- compute_sleep_report, the end-to-end entry point
    fleet      -- Roll-ups over many reports
"""

from shiftsleep.analytics.normalizer import (
    normalize_samples,
    NormalizedSamples,
    Reading,
)
from shiftsleep.analytics.intervals import (
    build_intervals,
    merge_adjacent,
    SleepStage,
    SleepStageInterval,
    MAX_SESSION_SEC,
)
from shiftsleep.analytics.shift import (
    shift_window,
    filter_intervals,
    filter_readings,
    parse_shift,
    ShiftType,
    ShiftWindow,
)
from shiftsleep.analytics.scoring import (
    stage_durations,
    total_sleep_time,
    sleep_quality,
    sleep_efficiency,
    vital_stats,
    is_normal_sleep,
    StageDurations,
    VitalStats,
    NORMAL_SLEEP_SECONDS,
)
from shiftsleep.analytics.report import compute_sleep_report, SleepReport
from shiftsleep.analytics.fleet import (
    summarize_fleet,
    recent_averages,
    FleetSummary,
    RecentAverages,
)

__all__ = [
    # normalizer
    "normalize_samples",
    "NormalizedSamples",
    "Reading",
    # intervals
    "build_intervals",
    "merge_adjacent",
    "SleepStage",
    "SleepStageInterval",
    "MAX_SESSION_SEC",
    # shift
    "shift_window",
    "filter_intervals",
    "filter_readings",
    "parse_shift",
    "ShiftType",
    "ShiftWindow",
    # scoring
    "stage_durations",
    "total_sleep_time",
    "sleep_quality",
    "sleep_efficiency",
    "vital_stats",
    "is_normal_sleep",
    "StageDurations",
    "VitalStats",
    "NORMAL_SLEEP_SECONDS",
    # report
    "compute_sleep_report",
    "SleepReport",
    # fleet
    "summarize_fleet",
    "recent_averages",
    "FleetSummary",
    "RecentAverages",
]
