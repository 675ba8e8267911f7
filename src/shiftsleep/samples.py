"""Raw device samples and the coercion helpers that read them.

A :class:`RawSample` carries whatever the data store handed over: the value
may be a number or a string, timestamps may be datetimes, epoch milliseconds
or ISO strings.  Nothing here raises on bad data; the ``coerce_*`` helpers
return ``None`` and the normalizer decides what to drop.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from shiftsleep import config

logger = config.get_logger()


class MetricType(str, Enum):
    """Metric carried by a sample."""

    MOTION = "motion"
    HEART_RATE = "heart_rate"
    BLOOD_OXYGEN = "blood_oxygen"


# Store-side names that map onto a metric type
METRIC_ALIASES = {
    "motion": MetricType.MOTION,
    "sleep_motion": MetricType.MOTION,
    "heart_rate": MetricType.HEART_RATE,
    "blood_oxygen": MetricType.BLOOD_OXYGEN,
}

# Lookup order for each field when reading a store row
_DEVICE_KEYS = ("deviceId", "device_id")
_METRIC_KEYS = ("metricType", "metric_type", "data_type")
_VALUE_KEYS = ("value", "string_val", "int_val", "fp_val")
_START_KEYS = ("startTime", "start_time_millis", "start_time_utc", "start_time")
_END_KEYS = ("endTime", "end_time_millis", "end_time_utc", "end_time")


@dataclass(frozen=True)
class RawSample:
    """One observation from a device, exactly as stored."""

    device_id: str | None
    metric_type: Any
    value: Any
    start_time: Any
    end_time: Any

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> RawSample:
        """Build a sample from a store row or a camelCase API record."""
        return cls(
            device_id=_first(record, _DEVICE_KEYS),
            metric_type=_first(record, _METRIC_KEYS),
            value=_first(record, _VALUE_KEYS),
            start_time=_first(record, _START_KEYS),
            end_time=_first(record, _END_KEYS),
        )


def _first(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def coerce_metric_type(raw: Any) -> MetricType | None:
    """Map a stored metric name onto :class:`MetricType`, or None."""
    if isinstance(raw, MetricType):
        return raw
    if not isinstance(raw, str):
        return None
    return METRIC_ALIASES.get(raw.strip().lower())


def coerce_value(raw: Any) -> float | None:
    """Coerce a stored value to a finite float.

    Numbers and numeric strings are accepted.  None, booleans, NaN,
    infinities, integers too large for a float, and anything that does not
    parse give None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            return None
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def to_epoch_ms(dt: datetime) -> int:
    """Epoch milliseconds for a datetime; naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return round(dt.timestamp() * 1000)


def coerce_timestamp(raw: Any) -> int | None:
    """Coerce a stored timestamp to integer epoch milliseconds.

    Accepts datetimes, epoch milliseconds (int, float or numeric string)
    and ISO-8601 strings (a trailing ``Z`` is read as UTC).
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        return to_epoch_ms(raw)
    if isinstance(raw, (int, float)):
        if coerce_value(raw) is None:
            return None
        return raw if isinstance(raw, int) else int(raw)
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if not text:
        return None
    number = coerce_value(text)
    if number is not None:
        return int(number)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return to_epoch_ms(datetime.fromisoformat(text))
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Sample files
# ---------------------------------------------------------------------------


def load_samples(path: str | Path) -> list[RawSample]:
    """Read samples from a ``.json`` list or a ``.jsonl`` file.

    Lines that are not valid JSON objects are skipped and logged.  A
    ``.json`` file that does not parse raises :class:`json.JSONDecodeError`.
    """
    path = Path(path)
    text = path.read_text()

    if path.suffix == ".json":
        data = json.loads(text)
        if not isinstance(data, list):
            data = [data]
        records = [r for r in data if isinstance(r, dict)]
        skipped = len(data) - len(records)
    else:
        records = []
        skipped = 0
        for line_num, line in enumerate(text.splitlines(), 1):
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("%s:%d invalid JSON, skipping", path.name, line_num)
                skipped += 1
                continue
            if not isinstance(entry, dict):
                skipped += 1
                continue
            records.append(entry)

    if skipped:
        logger.info("Skipped %d unreadable entries in %s", skipped, path.name)
    return [RawSample.from_record(r) for r in records]
