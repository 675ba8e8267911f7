"""Short-lived cache for computed sleep reports.

Callers that recompute the same device-day repeatedly (dashboard refreshes)
can keep reports here, keyed by ``(device_id, date, tz)``.  The engine never
consults it.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable, Hashable

from shiftsleep import config
from shiftsleep.analytics.report import SleepReport

logger = config.get_logger()

DEFAULT_TTL_SEC = 5 * 60


def report_key(device_id: str | None, day: str, tz: str = "UTC") -> tuple:
    return (device_id, day, tz)


class ReportCache:
    """LRU cache with a fixed time-to-live."""

    def __init__(
        self,
        ttl_sec: float = DEFAULT_TTL_SEC,
        maxsize: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_sec <= 0 or maxsize <= 0:
            raise ValueError("ttl_sec and maxsize must be positive")
        self.ttl_sec = ttl_sec
        self.maxsize = maxsize
        self._clock = clock
        self._data: OrderedDict[Hashable, tuple[float, SleepReport | None]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: Hashable) -> SleepReport | None:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            expires_at, report = item
            if expires_at <= self._clock():
                del self._data[key]
                return None
            self._data.move_to_end(key)
            return report

    def set(self, key: Hashable, report: SleepReport | None) -> None:
        with self._lock:
            if key in self._data:
                del self._data[key]
            elif len(self._data) >= self.maxsize:
                self._data.popitem(last=False)
            self._data[key] = (self._clock() + self.ttl_sec, report)

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], SleepReport | None],
    ) -> SleepReport | None:
        """Return the cached report for *key*, computing and storing it on a miss.

        A stored None (a dropped report) is also a hit.
        """
        with self._lock:
            item = self._data.get(key)
            if item is not None and item[0] > self._clock():
                self._data.move_to_end(key)
                return item[1]
        logger.debug("Report cache miss for %r", key)
        report = compute()
        self.set(key, report)
        return report
