"""Network interface byte counters from sysfs.

Enumerates /sys/class/net on every call and reads each interface's
``ifindex`` plus cumulative ``statistics/rx_bytes`` and
``statistics/tx_bytes``. Nothing is cached between calls, so interfaces
that come and go are picked up on the next tick.
"""

from __future__ import annotations

import errno
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ..errors import EnumerationError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class InterfaceSample:
    """Counters for one interface at one point in time."""

    index: int
    name: str
    rx_bytes: int
    tx_bytes: int


class NetworkReader:
    """Read the current interface table with RX/TX byte counters.

    Values are cumulative counters as reported by the kernel.
    """

    def __init__(self, sysfs_root: str | Path = "/sys/class/net") -> None:
        self._root = Path(sysfs_root)

    @property
    def sysfs_root(self) -> Path:
        """Base path of the net class directory."""
        return self._root

    def read(self) -> list[InterfaceSample]:
        """Return every interface currently known to the kernel.

        Samples are ordered by interface index. An interface that vanishes
        while it is being read is left out of this snapshot.

        Raises:
            EnumerationError: If the interface table itself cannot be listed.
        """
        try:
            entries = list(self._root.iterdir())
        except OSError as e:
            raise EnumerationError(
                f"failed to list network interfaces in {self._root}: {e}"
            ) from e

        samples: list[InterfaceSample] = []
        for entry in entries:
            sample = self._read_interface(entry)
            if sample is not None:
                samples.append(sample)

        samples.sort(key=lambda s: (s.index, s.name))
        return samples

    def _read_interface(self, entry: Path) -> InterfaceSample | None:
        stats_dir = entry / "statistics"
        try:
            index = int((entry / "ifindex").read_text().strip())
            rx = int((stats_dir / "rx_bytes").read_text().strip())
            tx = int((stats_dir / "tx_bytes").read_text().strip())
        except (FileNotFoundError, NotADirectoryError):
            # Removed between listing and reading, or not an interface dir
            log.debug("Skipping %s: no interface counters", entry.name)
            return None
        except PermissionError as e:
            raise EnumerationError(
                f"permission denied reading counters for {entry.name}: {e}"
            ) from e
        except OSError as e:
            if e.errno == errno.ENODEV:
                log.debug("Skipping %s: device removed during read", entry.name)
                return None
            raise EnumerationError(
                f"failed to read counters for {entry.name}: {e}"
            ) from e
        except ValueError as e:
            raise EnumerationError(
                f"failed to read counters for {entry.name}: {e}"
            ) from e

        return InterfaceSample(index=index, name=entry.name, rx_bytes=rx, tx_bytes=tx)


def filter_samples(
    samples: Iterable[InterfaceSample], excluded: Iterable[str]
) -> list[InterfaceSample]:
    """Drop samples whose interface name is in ``excluded``.

    Order of the remaining samples is preserved.
    """
    skip = excluded if isinstance(excluded, (set, frozenset)) else set(excluded)
    return [s for s in samples if s.name not in skip]
