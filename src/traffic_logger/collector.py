"""Main collection loop with signal handling.

Owns the CSV output for the whole run: opens it and writes the header,
ticks the scheduler until SIGINT/SIGTERM or a fatal error, then flushes
and closes the file. Each tick enumerates interfaces, drops excluded
names and writes one row per remaining interface.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import signal
import sys
import time
from collections.abc import Iterator
from typing import TYPE_CHECKING, TextIO

from .clocks import MonotonicTimestamps
from .scheduler import CancelToken, Scheduler
from .sensors.network import NetworkReader, filter_samples
from .writer import CsvWriter

if TYPE_CHECKING:
    from .config import CollectorConfig

log = logging.getLogger(__name__)


class State(enum.Enum):
    """Lifecycle of a collector run."""

    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    TERMINATED = "terminated"


class Collector:
    """Drive one collection run from open to drain."""

    def __init__(
        self,
        config: CollectorConfig,
        reader: NetworkReader | None = None,
        token: CancelToken | None = None,
        timestamps: MonotonicTimestamps | None = None,
        console: TextIO | None = None,
    ) -> None:
        self._config = config
        self._reader = reader or NetworkReader()
        self._token = token or CancelToken()
        self._timestamps = timestamps or MonotonicTimestamps()
        self._writer = CsvWriter(config, console=console)
        self._state = State.IDLE
        self._ticks = 0

    @property
    def state(self) -> State:
        return self._state

    @property
    def token(self) -> CancelToken:
        return self._token

    @property
    def writer(self) -> CsvWriter:
        return self._writer

    @property
    def ticks(self) -> int:
        """Number of completed collection passes."""
        return self._ticks

    def collect_once(self) -> int:
        """Run a single collection pass and return the number of rows written."""
        ts = self._timestamps.now()
        samples = filter_samples(
            self._reader.read(), self._config.excluded_interfaces
        )
        self._writer.write_samples(ts, samples)
        self._ticks += 1
        return len(samples)

    def run(self) -> int:
        """Collect until the token is cancelled or a pass fails.

        Returns:
            Number of completed collection passes.

        Raises:
            ConfigurationError: If the output file cannot be created.
            EnumerationError: If the interface table becomes unreadable.
            WriteError: If the output file cannot be written.
        """
        if self._state is not State.IDLE:
            raise RuntimeError(f"collector already used (state={self._state.value})")

        self._writer.open()
        self._state = State.RUNNING
        scheduler = Scheduler(self._config.interval, self._token)

        try:
            scheduler.run(self.collect_once)
        except BaseException:
            self._drain(quiet=True)
            raise
        self._drain(quiet=False)
        return self._ticks

    def _drain(self, quiet: bool) -> None:
        """Flush and close the output. With ``quiet``, log instead of raising."""
        self._state = State.DRAINING
        try:
            self._writer.close()
        except Exception as e:
            if not quiet:
                raise
            log.error("Failed to drain %s: %s", self._writer.csv_path, e)
        finally:
            self._state = State.TERMINATED


@contextlib.contextmanager
def handle_signals(token: CancelToken) -> Iterator[None]:
    """Cancel ``token`` on SIGINT/SIGTERM for the duration of the block.

    A second signal while shutdown is already pending raises
    KeyboardInterrupt to force termination.
    """

    def _signal_handler(signum: int, frame: object) -> None:
        if token.cancelled:
            raise KeyboardInterrupt
        log.info("Received %s, shutting down", signal.Signals(signum).name)
        token.cancel()

    previous = {
        sig: signal.signal(sig, _signal_handler)
        for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def run_collector(config: CollectorConfig) -> int:
    """Run the main collection loop until interrupted.

    Returns:
        Number of completed collection passes.
    """
    collector = Collector(config)

    print(f"Collecting to {config.output_path}", file=sys.stderr)
    print(f"  Interval: {config.interval}s", file=sys.stderr)
    if config.excluded_interfaces:
        print(
            f"  Skipping: {', '.join(sorted(config.excluded_interfaces))}",
            file=sys.stderr,
        )
    print("  Press Ctrl+C to stop.\n", file=sys.stderr)

    start_mono = time.monotonic()
    try:
        with handle_signals(collector.token):
            ticks = collector.run()
    finally:
        if collector.state is State.TERMINATED:
            total_elapsed = time.monotonic() - start_mono
            print(
                f"\nDone. {collector.writer.row_count} rows in {collector.ticks} "
                f"ticks, {total_elapsed:.1f}s ({collector.writer.csv_path})",
                file=sys.stderr,
            )
    return ticks
