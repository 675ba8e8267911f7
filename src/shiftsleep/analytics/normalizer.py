"""Sample normalizer: group raw samples by metric and coerce their values.

This is the only place sample values and timestamps are parsed.  A sample
that fails coercion is dropped and counted; it never aborts the others.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from shiftsleep import config
from shiftsleep.exceptions import InvalidSamplesError
from shiftsleep.samples import (
    MetricType,
    RawSample,
    coerce_metric_type,
    coerce_timestamp,
    coerce_value,
)

logger = config.get_logger()


@dataclass(frozen=True)
class Reading:
    """A coerced sample: epoch-millisecond bounds and a finite value."""

    start_ms: int
    end_ms: int
    value: float


@dataclass
class NormalizedSamples:
    """Per-metric readings for one device, each sorted by start time."""

    motion: tuple[Reading, ...] = ()
    heart_rate: tuple[Reading, ...] = ()
    blood_oxygen: tuple[Reading, ...] = ()
    dropped: Counter = field(default_factory=Counter)

    def __repr__(self) -> str:
        return (
            f"NormalizedSamples(motion={len(self.motion)}, "
            f"heart_rate={len(self.heart_rate)}, "
            f"blood_oxygen={len(self.blood_oxygen)}, "
            f"dropped={sum(self.dropped.values())})"
        )


def _as_sample(item: Any) -> RawSample:
    if isinstance(item, RawSample):
        return item
    if isinstance(item, Mapping):
        return RawSample.from_record(item)
    raise InvalidSamplesError(
        f"Unsupported sample type {type(item).__name__}; "
        "expected RawSample or a mapping"
    )


def normalize_samples(
    samples: Iterable[RawSample | Mapping[str, Any]] | None,
    device_id: str | None = None,
) -> NormalizedSamples:
    """Split a flat sample list into sorted per-metric readings.

    Args:
        samples: Raw samples (or store rows) for one device and window.
        device_id: If given, samples belonging to other devices are dropped.

    Returns:
        NormalizedSamples with motion, heart-rate and blood-oxygen readings
        plus a counter of drop reasons.

    Raises:
        InvalidSamplesError: if *samples* is None or holds objects that are
            neither RawSample nor mappings.
    """
    if samples is None:
        raise InvalidSamplesError("samples must be an iterable, got None")

    buckets: dict[MetricType, list[Reading]] = {m: [] for m in MetricType}
    dropped: Counter = Counter()

    for item in samples:
        sample = _as_sample(item)

        if device_id is not None and sample.device_id not in (None, device_id):
            dropped["other_device"] += 1
            continue

        metric = coerce_metric_type(sample.metric_type)
        if metric is None:
            dropped["unknown_metric"] += 1
            continue

        value = coerce_value(sample.value)
        if value is None:
            logger.debug("Dropping %s sample with value %r", metric.value, sample.value)
            dropped["invalid_value"] += 1
            continue

        start = coerce_timestamp(sample.start_time)
        end = coerce_timestamp(sample.end_time)
        # Point samples may carry only one of the two bounds
        if start is None:
            start = end
        if end is None:
            end = start
        if start is None:
            dropped["invalid_time"] += 1
            continue

        buckets[metric].append(Reading(start_ms=start, end_ms=end, value=value))

    for readings in buckets.values():
        readings.sort(key=lambda r: (r.start_ms, r.end_ms))

    if dropped:
        logger.info("Dropped %d samples during normalization: %s",
                    sum(dropped.values()), dict(dropped))

    return NormalizedSamples(
        motion=tuple(buckets[MetricType.MOTION]),
        heart_rate=tuple(buckets[MetricType.HEART_RATE]),
        blood_oxygen=tuple(buckets[MetricType.BLOOD_OXYGEN]),
        dropped=dropped,
    )
