"""Shift-aware sleep windows.

A day-shift worker sleeps overnight, a night-shift worker sleeps through
the day.  For a reference date the window is:

    day    previous day 17:00  ->  reference day 05:30
    night  reference day 05:00 ->  reference day 17:30

Any other designation (fullday, off, other, none, or something unknown)
means no window: intervals pass through untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum
from typing import Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from shiftsleep import config
from shiftsleep.analytics.intervals import SleepStageInterval
from shiftsleep.analytics.normalizer import Reading
from shiftsleep.exceptions import InvalidDateError
from shiftsleep.samples import to_epoch_ms

logger = config.get_logger()


class ShiftType(str, Enum):
    """Work schedule designation for a wearer on a given date."""

    DAY = "day"
    NIGHT = "night"
    FULLDAY = "fullday"
    OFF = "off"
    OTHER = "other"


# (days offset from the reference date, wall-clock time)
DAY_SHIFT_WINDOW = ((-1, time(17, 0)), (0, time(5, 30)))
NIGHT_SHIFT_WINDOW = ((0, time(5, 0)), (0, time(17, 30)))

_WINDOWS = {
    ShiftType.DAY: DAY_SHIFT_WINDOW,
    ShiftType.NIGHT: NIGHT_SHIFT_WINDOW,
}


@dataclass(frozen=True)
class ShiftWindow:
    """Expected sleep period for a shift on a date (epoch ms, inclusive)."""

    start_ms: int
    end_ms: int

    def contains(self, ms: int) -> bool:
        return self.start_ms <= ms <= self.end_ms

    def overlaps(self, start_ms: int, end_ms: int) -> bool:
        """True if ``[start_ms, end_ms]`` shares any time with the window."""
        return start_ms < self.end_ms and end_ms > self.start_ms


def parse_shift(value: ShiftType | str | None) -> ShiftType | None:
    """Read a shift designation; unknown names become ``OTHER``.

    ``"all"`` (the dashboard's "no filter" choice) and empty strings are
    treated like None.
    """
    if value is None or isinstance(value, ShiftType):
        return value
    name = str(value).strip().lower()
    if name in ("", "all", "none"):
        return None
    try:
        return ShiftType(name)
    except ValueError:
        logger.warning("Unknown shift type %r, not filtering", value)
        return ShiftType.OTHER


def parse_date(value: date | datetime | str) -> date:
    """Reduce a reference date given as date, datetime or ISO string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise InvalidDateError(f"Cannot read reference date {value!r}")


def resolve_tz(tz: str | tzinfo | None) -> tzinfo:
    """Time zone used to anchor window wall-clock times (default UTC)."""
    if tz is None:
        return timezone.utc
    if isinstance(tz, tzinfo):
        return tz
    if tz.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidDateError(f"Unknown time zone {tz!r}") from exc


def shift_window(
    shift: ShiftType | str | None,
    reference_date: date | datetime | str,
    tz: str | tzinfo | None = "UTC",
) -> ShiftWindow | None:
    """Sleep window for *shift* on *reference_date*, or None when unrestricted."""
    shift = parse_shift(shift)
    bounds = _WINDOWS.get(shift)
    if bounds is None:
        return None

    day = parse_date(reference_date)
    zone = resolve_tz(tz)
    (start_offset, start_time), (end_offset, end_time) = bounds
    start = datetime.combine(day + timedelta(days=start_offset), start_time, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=end_offset), end_time, tzinfo=zone)
    return ShiftWindow(start_ms=to_epoch_ms(start), end_ms=to_epoch_ms(end))


def filter_intervals(
    intervals: Sequence[SleepStageInterval],
    window: ShiftWindow | None,
    clip: bool = True,
) -> list[SleepStageInterval]:
    """Keep intervals overlapping *window*.

    Args:
        intervals: Sorted sleep-stage intervals.
        window: The shift window, or None for no filtering.
        clip: Trim kept intervals at the window edges.

    Returns:
        A new list; with no window it holds the input intervals unchanged.
    """
    if window is None:
        return list(intervals)

    kept: list[SleepStageInterval] = []
    for interval in intervals:
        if not window.overlaps(interval.start_ms, interval.end_ms):
            continue
        if clip:
            interval = SleepStageInterval(
                max(interval.start_ms, window.start_ms),
                min(interval.end_ms, window.end_ms),
                interval.stage,
            )
        kept.append(interval)

    if len(kept) != len(intervals):
        logger.debug("Shift window kept %d of %d intervals", len(kept), len(intervals))
    return kept


def filter_readings(
    readings: Sequence[Reading],
    window: ShiftWindow | None,
) -> tuple[Reading, ...]:
    """Keep point readings whose timestamp (end time) lies inside *window*."""
    if window is None:
        return tuple(readings)
    return tuple(r for r in readings if window.contains(r.end_ms))
