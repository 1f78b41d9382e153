"""Buffered CSV writer for interface samples.

Writes the header once on open, one row per interface per tick, and
flushes to disk every ``flush_every`` rows and on close. Optionally
echoes a condensed human-readable line per sample to the console.
"""

from __future__ import annotations

import csv
import io
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from .clocks import local_time_of_day
from .errors import ConfigurationError, WriteError

if TYPE_CHECKING:
    from .config import CollectorConfig
    from .sensors.network import InterfaceSample


COLUMNS: list[str] = ["time", "if_idx", "if_name", "rx_bytes", "tx_bytes"]

_SIZE_UNITS: list[str] = ["B", "KB", "MB", "GB", "TB"]


def humanize_size(size: int) -> str:
    """Render a byte count in binary units, truncated to an integer.

    Stops promoting at TB no matter how large the value is.

    >>> humanize_size(1536)
    '1 KB'
    """
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size //= 1024
        unit += 1
    return f"{size} {_SIZE_UNITS[unit]}"


def format_console_line(sample: InterfaceSample, clock: str | None = None) -> str:
    """Format ``[HH:MM:SS] <name>: RX <size>, TX <size>`` for one sample."""
    if clock is None:
        clock = local_time_of_day()
    return (
        f"[{clock}] {sample.name}: "
        f"RX {humanize_size(sample.rx_bytes)}, TX {humanize_size(sample.tx_bytes)}"
    )


class CsvWriter:
    """Buffered CSV writer with optional console echo."""

    def __init__(
        self,
        config: CollectorConfig,
        console: TextIO | None = None,
    ) -> None:
        self._csv_path = config.output_path
        self._flush_every = config.flush_every
        self._quiet = config.quiet
        self._console = console

        self._file: io.TextIOWrapper | None = None
        self._writer: Any = None
        self._row_count = 0

    @property
    def csv_path(self) -> Path:
        """Path to the CSV output file."""
        return self._csv_path

    @property
    def row_count(self) -> int:
        """Number of data rows written so far."""
        return self._row_count

    def open(self) -> None:
        """Create the CSV file and write the header row.

        Raises:
            ConfigurationError: If the output path cannot be created.
        """
        try:
            self._file = open(  # noqa: SIM115
                self._csv_path, "w", newline="", encoding="utf-8"
            )
        except OSError as e:
            raise ConfigurationError(
                f"failed to create output file {self._csv_path}: {e}"
            ) from e

        self._writer = csv.writer(self._file)
        try:
            self._writer.writerow(COLUMNS)
        except OSError as e:
            self._file.close()
            self._file = None
            self._writer = None
            raise WriteError(f"failed to write header to {self._csv_path}: {e}") from e

    def write_samples(
        self, timestamp: str, samples: Iterable[InterfaceSample]
    ) -> None:
        """Append one row per sample, all stamped with ``timestamp``.

        Raises:
            WriteError: If the underlying file write fails.
        """
        if self._writer is None:
            raise RuntimeError("CsvWriter not opened; call open() first")

        for sample in samples:
            try:
                self._writer.writerow(
                    [
                        timestamp,
                        sample.index,
                        sample.name,
                        sample.rx_bytes,
                        sample.tx_bytes,
                    ]
                )
            except OSError as e:
                raise WriteError(f"failed to write to {self._csv_path}: {e}") from e
            self._row_count += 1

            if not self._quiet:
                print(format_console_line(sample), file=self._console or sys.stdout)

            if self._row_count % self._flush_every == 0:
                self.flush()

    def flush(self) -> None:
        """Flush the CSV file to disk.

        Raises:
            WriteError: If flushing or syncing fails.
        """
        if self._file is not None:
            try:
                self._file.flush()
                os.fsync(self._file.fileno())
            except OSError as e:
                raise WriteError(f"failed to flush {self._csv_path}: {e}") from e

    def close(self) -> None:
        """Flush and close the CSV file. Safe to call more than once."""
        if self._file is None:
            return
        file, self._file = self._file, None
        self._writer = None
        try:
            file.flush()
            os.fsync(file.fileno())
        except OSError as e:
            raise WriteError(f"failed to flush {self._csv_path}: {e}") from e
        finally:
            file.close()

    def __enter__(self) -> CsvWriter:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()
