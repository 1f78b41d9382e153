"""Configuration for the traffic logger."""

from __future__ import annotations

import math
import re
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .clocks import utc_now_rfc3339
from .errors import ConfigurationError

# Go-style duration units, in seconds
_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def default_output_path() -> Path:
    """Output file named after the current UTC time, e.g. ``2024-05-01T12:00:00Z.csv``."""
    return Path(f"{utc_now_rfc3339()}.csv")


def parse_duration(text: str) -> float:
    """Parse a duration like ``100ms``, ``1m30s`` or a bare ``2.5`` into seconds.

    Raises:
        ConfigurationError: If the string is not a valid duration.
    """
    raw = text.strip()
    if not raw:
        raise ConfigurationError("empty duration")

    try:
        return float(raw)
    except ValueError:
        pass

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(raw):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(raw):
        raise ConfigurationError(f"invalid duration: {text!r}")
    return total


@dataclass(frozen=True)
class CollectorConfig:
    """Runtime configuration, fixed for the lifetime of a run."""

    # Sampling interval in seconds
    interval: float = 1.0

    # CSV output file
    output_path: Path = field(default_factory=default_output_path)

    # Interface names to skip
    excluded_interfaces: frozenset[str] = frozenset()

    # Suppress the per-sample console lines
    quiet: bool = False

    # Flush and fsync the CSV every N rows
    flush_every: int = 60

    def __post_init__(self) -> None:
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "output_path", Path(self.output_path))
        object.__setattr__(
            self, "excluded_interfaces", frozenset(self.excluded_interfaces)
        )

        if not (math.isfinite(self.interval) and self.interval > 0):
            raise ConfigurationError(
                f"interval must be positive, got {self.interval}s"
            )
        if self.interval > threading.TIMEOUT_MAX:
            raise ConfigurationError(
                f"interval too large, got {self.interval}s "
                f"(max {threading.TIMEOUT_MAX:.0f}s)"
            )
        if self.flush_every <= 0:
            raise ConfigurationError(
                f"flush_every must be positive, got {self.flush_every}"
            )

    @classmethod
    def build(
        cls,
        interval: float = 1.0,
        output_path: Path | str | None = None,
        excluded_interfaces: Iterable[str] = (),
        quiet: bool = False,
        flush_every: int = 60,
    ) -> CollectorConfig:
        """Build a config, deriving the output path from the clock when unset."""
        return cls(
            interval=interval,
            output_path=Path(output_path) if output_path else default_output_path(),
            excluded_interfaces=frozenset(excluded_interfaces),
            quiet=quiet,
            flush_every=flush_every,
        )
