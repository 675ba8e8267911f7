"""Fleet-level roll-ups over many sleep reports.

The dashboard shows, per company, how many devices slept less than the
normal threshold and the spread of heart rates, plus a seven-day trend per
device.  Both are computed here from SleepReport values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from shiftsleep.analytics.report import SleepReport
from shiftsleep.analytics.scoring import NORMAL_SLEEP_SECONDS


@dataclass
class FleetSummary:
    """Counts and extremes across one day's reports."""

    device_count: int = 0
    abnormal_sleep_count: int = 0
    shortest_sleep_sec: float = 0.0  # shortest total sleep among abnormal devices
    max_heart_rate: float = 0.0
    min_heart_rate: float = 0.0

    def __repr__(self) -> str:
        return (
            f"FleetSummary(devices={self.device_count}, "
            f"abnormal_sleep={self.abnormal_sleep_count}, "
            f"hr={self.min_heart_rate:.0f}-{self.max_heart_rate:.0f})"
        )


@dataclass
class RecentAverages:
    """Averages over a device's most recent reports."""

    days: int = 0
    avg_sleep_sec: float = 0.0
    avg_quality: float = 0.0
    avg_heart_rate: float = 0.0


def summarize_fleet(
    reports: Sequence[SleepReport],
    normal_sleep_sec: float = NORMAL_SLEEP_SECONDS,
) -> FleetSummary:
    """Summarize one report per device.

    A device is abnormal when its total sleep is below *normal_sleep_sec*.
    Heart-rate extremes skip reports without heart-rate data.
    """
    if not reports:
        return FleetSummary()

    abnormal = [r.total_sleep_time for r in reports if r.total_sleep_time < normal_sleep_sec]
    hr_max = [r.heart_rate.max for r in reports if r.heart_rate.max > 0]
    hr_min = [r.heart_rate.min for r in reports if r.heart_rate.min > 0]

    return FleetSummary(
        device_count=len({r.device_id for r in reports}),
        abnormal_sleep_count=len(abnormal),
        shortest_sleep_sec=float(min(abnormal)) if abnormal else 0.0,
        max_heart_rate=float(max(hr_max)) if hr_max else 0.0,
        min_heart_rate=float(min(hr_min)) if hr_min else 0.0,
    )


def recent_averages(reports: Sequence[SleepReport], days: int = 7) -> RecentAverages:
    """Average sleep time, quality and heart rate over the last *days* reports.

    Reports are ordered by date; the most recent *days* of them are used.
    Heart-rate averaging skips reports without heart-rate data.
    """
    if days <= 0:
        raise ValueError("days must be positive")
    recent = sorted(reports, key=lambda r: r.date)[-days:]
    if not recent:
        return RecentAverages()

    sleep = np.asarray([r.total_sleep_time for r in recent], dtype=np.float64)
    quality = np.asarray([r.sleep_quality for r in recent], dtype=np.float64)
    hr = np.asarray([r.heart_rate.avg for r in recent if r.heart_rate.avg > 0],
                    dtype=np.float64)

    return RecentAverages(
        days=len(recent),
        avg_sleep_sec=float(np.mean(sleep)),
        avg_quality=float(np.mean(quality)),
        avg_heart_rate=float(np.mean(hr)) if hr.size else 0.0,
    )
