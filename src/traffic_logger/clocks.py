"""Wall-clock timestamps for sample records.

Python's datetime stops at microseconds, so record timestamps are built
from ``time.time_ns()`` and formatted by hand in the RFC3339Nano layout:
fractional seconds with trailing zeros trimmed, no fraction at all when
it is zero, and a ``Z`` suffix.
"""

from __future__ import annotations

import time
from collections.abc import Callable

_NS_PER_S = 1_000_000_000


def format_rfc3339_nano(ts_ns: int) -> str:
    """Format nanoseconds since the epoch as an RFC3339 UTC timestamp.

    >>> format_rfc3339_nano(1_714_564_800_123_456_789)
    '2024-05-01T12:00:00.123456789Z'
    >>> format_rfc3339_nano(1_714_564_800_000_000_000)
    '2024-05-01T12:00:00Z'
    """
    secs, nanos = divmod(ts_ns, _NS_PER_S)
    base = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(secs))
    if nanos == 0:
        return f"{base}Z"
    frac = f"{nanos:09d}".rstrip("0")
    return f"{base}.{frac}Z"


def utc_now_rfc3339() -> str:
    """Current UTC time to whole seconds, e.g. ``2024-05-01T12:00:00Z``."""
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def local_time_of_day() -> str:
    """Current local time as ``HH:MM:SS`` for console lines."""
    return time.strftime("%H:%M:%S", time.localtime())


class MonotonicTimestamps:
    """Wall-clock nanosecond timestamps that never go backwards.

    If the system clock is stepped back (NTP, manual change) the last
    issued value is repeated until real time catches up again.
    """

    def __init__(self, clock_ns: Callable[[], int] = time.time_ns) -> None:
        self._clock_ns = clock_ns
        self._last_ns = 0

    def now_ns(self) -> int:
        """Return the current time in ns, clamped to the last issued value."""
        now = self._clock_ns()
        if now < self._last_ns:
            now = self._last_ns
        self._last_ns = now
        return now

    def now(self) -> str:
        """Return the current time as an RFC3339Nano string."""
        return format_rfc3339_nano(self.now_ns())
