"""Shared fixtures and helpers for the shiftsleep test suite."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from shiftsleep.samples import RawSample


# ---------------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------------


def ms(text: str) -> int:
    """Epoch milliseconds for a naive ISO timestamp read as UTC."""
    dt = datetime.fromisoformat(text).replace(tzinfo=timezone.utc)
    return round(dt.timestamp() * 1000)


HOUR_MS = 60 * 60 * 1000


# ---------------------------------------------------------------------------
# Sample-building helpers
# ---------------------------------------------------------------------------


def make_sample(
    metric_type: str = "motion",
    value: object = 3,
    start: str = "2025-01-15T00:00:00",
    end: str | None = None,
    device_id: str = "dev-1",
) -> RawSample:
    """Build a RawSample with epoch-millisecond bounds."""
    start_ms = ms(start)
    end_ms = ms(end) if end is not None else start_ms
    return RawSample(
        device_id=device_id,
        metric_type=metric_type,
        value=value,
        start_time=start_ms,
        end_time=end_ms,
    )


def motion(stage: object, start: str, end: str, device_id: str = "dev-1") -> RawSample:
    """Motion sample carrying a stage code."""
    return make_sample("motion", stage, start, end, device_id)


def heart_rate(value: object, at: str = "2025-01-15T03:00:00", device_id: str = "dev-1") -> RawSample:
    """Heart-rate point sample."""
    return make_sample("heart_rate", value, at, at, device_id)


def blood_oxygen(value: object, at: str = "2025-01-15T03:00:00", device_id: str = "dev-1") -> RawSample:
    """Blood-oxygen point sample."""
    return make_sample("blood_oxygen", value, at, at, device_id)


def write_jsonl(path: Path, entries: list[dict]) -> Path:
    """Write a list of dicts as JSONL to the given path."""
    with open(path, "w") as f:
        for entry in entries:
            f.write(json.dumps(entry) + "\n")
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def night_samples() -> list[RawSample]:
    """One overnight session: 2 h deep, 4 h light, 30 min REM, 30 min awake, plus vitals."""
    return [
        motion(4, "2025-01-15T00:00:00", "2025-01-15T02:00:00"),
        motion(3, "2025-01-15T02:00:00", "2025-01-15T06:00:00"),
        motion(2, "2025-01-15T06:00:00", "2025-01-15T06:30:00"),
        motion(1, "2025-01-15T06:30:00", "2025-01-15T07:00:00"),
        heart_rate(58, "2025-01-15T01:00:00"),
        heart_rate(64, "2025-01-15T04:00:00"),
        heart_rate(71, "2025-01-15T06:45:00"),
        blood_oxygen(97, "2025-01-15T01:00:00"),
        blood_oxygen(95, "2025-01-15T04:00:00"),
    ]
