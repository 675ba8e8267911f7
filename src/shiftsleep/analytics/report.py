"""Sleep report: run the engine stages over one device-day of samples.

    raw samples -> normalized readings -> stage intervals
                -> shift-filtered intervals -> SleepReport

The result is plain data.  Persisting it, caching it and drawing it are the
caller's business; :meth:`SleepReport.to_record` gives the row shape the
report store upserts on ``(device_id, date)``.
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Any, Iterable, Mapping

from shiftsleep import config
from shiftsleep.analytics.intervals import (
    MAX_SESSION_SEC,
    SleepStageInterval,
    build_intervals,
)
from shiftsleep.analytics.normalizer import Reading, normalize_samples
from shiftsleep.analytics.scoring import (
    StageDurations,
    VitalStats,
    is_normal_sleep,
    sleep_efficiency,
    sleep_quality,
    stage_durations,
    time_in_bed,
    total_sleep_time,
    vital_stats,
)
from shiftsleep.analytics.shift import (
    ShiftType,
    filter_intervals,
    filter_readings,
    parse_date,
    parse_shift,
    shift_window,
)
from shiftsleep.samples import RawSample

logger = config.get_logger()


@dataclass
class SleepReport:
    """Sleep stages and vitals for one device on one reference date."""

    device_id: str | None
    date: str  # ISO date, e.g. "2025-01-15"
    shift: str | None = None
    intervals: list[SleepStageInterval] = field(default_factory=list)
    stage_durations: StageDurations = field(default_factory=StageDurations)
    total_sleep_time: float = 0.0  # seconds, awake excluded
    time_in_bed: float = 0.0  # seconds, awake included
    sleep_quality: float = 0.0  # fraction 0-1
    sleep_efficiency: float = 0.0  # fraction 0-1
    heart_rate: VitalStats = field(default_factory=VitalStats)
    blood_oxygen: VitalStats = field(default_factory=VitalStats)
    heart_rate_readings: tuple[Reading, ...] = ()  # readings behind the stats
    blood_oxygen_readings: tuple[Reading, ...] = ()
    dropped: dict[str, int] = field(default_factory=dict)

    @property
    def is_normal_sleep(self) -> bool:
        return is_normal_sleep(self.total_sleep_time)

    @property
    def report_id(self) -> str:
        return f"{self.device_id}_{self.date.replace('-', '')}"

    def sleep_logs(self) -> list[dict[str, Any]]:
        """Per-interval log entries with the stage label."""
        return [
            {
                "start_ms": i.start_ms,
                "end_ms": i.end_ms,
                "duration": i.duration_sec,
                "quality": i.stage.label,
            }
            for i in self.intervals
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        return {
            "device_id": self.device_id,
            "date": self.date,
            "shift": self.shift,
            "intervals": [
                {"start_ms": i.start_ms, "end_ms": i.end_ms, "stage": int(i.stage)}
                for i in self.intervals
            ],
            "stage_durations": self.stage_durations.to_dict(),
            "total_sleep_time": self.total_sleep_time,
            "time_in_bed": self.time_in_bed,
            "sleep_quality": self.sleep_quality,
            "sleep_efficiency": self.sleep_efficiency,
            "heart_rate": self.heart_rate.to_dict(),
            "blood_oxygen": self.blood_oxygen.to_dict(),
            "dropped": dict(sorted(self.dropped.items())),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def to_record(self) -> dict[str, Any]:
        """Row for the report store, keyed by ``id`` (device + date)."""
        day = date.fromisoformat(self.date)
        d = self.stage_durations
        return {
            "id": self.report_id,
            "device_id": self.device_id,
            "recordDay": day.day,
            "recordMonth": day.month,
            "recordYear": day.year,
            "sleepQuality": self.sleep_quality,
            "sleepTotalTime": self.total_sleep_time,
            "clearTotalTime": round(d.awake),
            "fastEyeTotalTime": round(d.eye_movement),
            "simpleSleepTotalTime": round(d.light_sleep),
            "deepSleepTotalTime": round(d.deep_sleep),
            "maxHeartRate": self.heart_rate.max,
            "minHeartRate": self.heart_rate.min,
            "avgHeartRate": self.heart_rate.avg,
            "maxBloodOxygen": self.blood_oxygen.max,
            "minBloodOxygen": self.blood_oxygen.min,
            "avgBloodOxygen": self.blood_oxygen.avg,
            "sleepMotion": [
                {"value": int(i.stage), "startTime": i.start_ms, "endTime": i.end_ms}
                for i in self.intervals
            ],
            "heartRatePeriod": _periods(self.heart_rate_readings),
            "bloodOxygenPeriod": _periods(self.blood_oxygen_readings),
        }

    def __repr__(self) -> str:
        return (
            f"SleepReport({self.device_id} {self.date}: "
            f"sleep={self.total_sleep_time / 60:.0f}min, "
            f"quality={self.sleep_quality:.0%}, "
            f"hr={self.heart_rate.min:.0f}-{self.heart_rate.max:.0f}, "
            f"intervals={len(self.intervals)})"
        )


def _periods(readings: Iterable[Reading]) -> list[dict[str, int]]:
    return [{"value": int(r.value), "time": r.end_ms} for r in readings]


def _first_device_id(samples) -> str | None:
    for item in samples:
        if isinstance(item, Mapping):
            item = RawSample.from_record(item)
        if isinstance(item, RawSample) and item.device_id is not None:
            return item.device_id
    return None


def compute_sleep_report(
    samples: Iterable[RawSample | Mapping[str, Any]] | None,
    reference_date: date | datetime | str,
    shift: ShiftType | str | None = None,
    device_id: str | None = None,
    tz: str | tzinfo | None = "UTC",
    mapping: str = "direct",
    max_session_sec: float | None = MAX_SESSION_SEC,
    filter_vitals: bool = True,
    clip: bool = True,
    drop_empty: bool = False,
    strict: bool = False,
) -> SleepReport | None:
    """Compute the sleep report for one device and reference date.

    Args:
        samples: Raw samples (or store rows) for the device's reporting window.
        reference_date: Date the report is for; anchors the shift window.
        shift: Shift designation; None, fullday, off and unknown values
            apply no window.
        device_id: Device the report is for.  Defaults to the first sample's
            device; samples for other devices are dropped.
        tz: Time zone for the shift window's wall-clock times.
        mapping: Motion value to stage mapping (``"direct"`` or ``"magnitude"``).
        max_session_sec: Session length cap; None disables it.
        filter_vitals: Apply the shift window to heart-rate and blood-oxygen
            readings as well.
        clip: Trim intervals that straddle a window edge.
        drop_empty: Return None instead of a zero report when the shift
            window leaves no intervals.
        strict: Raise on internal invariant violations instead of clamping.

    Returns:
        A SleepReport, or None when *drop_empty* applies.

    Raises:
        InvalidSamplesError: if *samples* is None or malformed as a whole.
        InvalidDateError: if *reference_date* or *tz* cannot be read.
    """
    day = parse_date(reference_date)
    shift_type = parse_shift(shift)

    if samples is not None and not isinstance(samples, (list, tuple)):
        samples = list(samples)
    if device_id is None and samples:
        device_id = _first_device_id(samples)

    normalized = normalize_samples(samples, device_id=device_id)
    drops: Counter = Counter(normalized.dropped)

    intervals = build_intervals(
        normalized.motion,
        mapping=mapping,
        max_session_sec=max_session_sec,
        drops=drops,
    )

    window = shift_window(shift_type, day, tz=tz)
    filtered = filter_intervals(intervals, window, clip=clip)
    if window is not None:
        drops["outside_shift_window"] += len(intervals) - len(filtered)

    if drop_empty and window is not None and not filtered:
        logger.info("No intervals in %s shift window for %s on %s, dropping report",
                    shift_type.value, device_id, day.isoformat())
        return None

    heart_rate = normalized.heart_rate
    blood_oxygen = normalized.blood_oxygen
    if filter_vitals:
        heart_rate = filter_readings(heart_rate, window)
        blood_oxygen = filter_readings(blood_oxygen, window)

    durations = stage_durations(filtered, strict=strict)
    total = total_sleep_time(durations)
    in_bed = time_in_bed(durations)

    report = SleepReport(
        device_id=device_id,
        date=day.isoformat(),
        shift=shift_type.value if shift_type is not None else None,
        intervals=filtered,
        stage_durations=durations,
        total_sleep_time=total,
        time_in_bed=in_bed,
        sleep_quality=sleep_quality(durations),
        sleep_efficiency=sleep_efficiency(total, in_bed),
        heart_rate=vital_stats([r.value for r in heart_rate]),
        blood_oxygen=vital_stats([r.value for r in blood_oxygen]),
        heart_rate_readings=tuple(heart_rate),
        blood_oxygen_readings=tuple(blood_oxygen),
        dropped={k: v for k, v in drops.items() if v},
    )
    logger.debug("Computed %r", report)
    return report
