"""Fixed-interval tick loop with cooperative cancellation.

The loop runs on the calling thread. Between ticks it blocks on a
``CancelToken``, so a cancel request wakes it immediately while a pass
that is already running is always allowed to finish.
"""

from __future__ import annotations

import logging
import os
import select
import time
from collections.abc import Callable

log = logging.getLogger(__name__)


class CancelToken:
    """One-shot cancellation flag that a waiting loop can block on.

    ``cancel()`` takes no locks: it sets a flag and writes one byte to a
    non-blocking self-pipe, so it is safe to call from a signal handler
    that interrupts ``wait()`` on the same thread, as well as from other
    threads. ``wait()`` blocks in ``select`` on the read end.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._rfd, self._wfd = os.pipe()
        os.set_blocking(self._rfd, False)
        os.set_blocking(self._wfd, False)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._cancelled = True
        try:
            os.write(self._wfd, b"\0")
        except OSError:
            # Pipe full or already closed; the flag alone is enough
            pass

    def wait(self, timeout: float) -> bool:
        """Block for up to ``timeout`` seconds; True if cancelled meanwhile."""
        if self._cancelled:
            return True
        select.select([self._rfd], [], [], timeout)
        return self._cancelled

    def close(self) -> None:
        """Release the pipe. Safe to call more than once."""
        for fd in (getattr(self, "_rfd", -1), getattr(self, "_wfd", -1)):
            if fd >= 0:
                os.close(fd)
        self._rfd = self._wfd = -1

    def __del__(self) -> None:
        self.close()


class Scheduler:
    """Invoke a callback once per interval until cancelled.

    Deadlines advance by ``interval`` from the start time. When a pass
    overruns one or more deadlines the next pass runs straight away and
    the schedule resynchronizes from there; missed ticks are never replayed,
    so at most one pass is ever in flight.
    """

    def __init__(
        self,
        interval: float,
        token: CancelToken,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._interval = interval
        self._token = token
        self._clock = clock

    @property
    def interval(self) -> float:
        return self._interval

    def run(self, tick: Callable[[], None]) -> int:
        """Run ``tick`` every interval until the token is cancelled.

        The first tick fires one interval after the call. Exceptions from
        ``tick`` propagate and end the loop.

        Returns:
            Number of ticks executed.
        """
        ticks = 0
        next_tick = self._clock() + self._interval

        while True:
            wait = next_tick - self._clock()
            if self._token.wait(max(wait, 0.0)):
                break

            tick()
            ticks += 1

            next_tick += self._interval
            now = self._clock()
            if next_tick <= now:
                missed = int((now - next_tick) / self._interval) + 1
                log.warning(
                    "Collection pass overran, missed %d tick(s), resynchronizing",
                    missed,
                )
                next_tick = now

        return ticks
