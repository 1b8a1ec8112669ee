"""OS metrics providers.

A provider handle is synchronous and not reentrant: callers must not refresh or
read the same handle from two threads at once. The snapshot cache enforces that.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Sequence

import psutil
import structlog

from hostmetrics.services.snapshots import RawDisk

logger = structlog.get_logger()


class CpuProvider(ABC):
    @abstractmethod
    def refresh(self) -> None:
        """Re-sample per-core CPU usage."""
        ...

    @abstractmethod
    def read_usages(self) -> Sequence[float]:
        """Per-core usage percentages from the last refresh."""
        ...

    @abstractmethod
    def read_uptime(self) -> int:
        """Seconds since boot."""
        ...


class DiskProvider(ABC):
    @abstractmethod
    def refresh(self) -> None:
        """Re-enumerate mounted disks and their usage."""
        ...

    @abstractmethod
    def read_disks(self) -> Sequence[RawDisk]:
        """Disks found by the last refresh, in enumeration order."""
        ...


class PsutilCpuProvider(CpuProvider):
    """CPU handle backed by psutil.

    Usage is measured between consecutive refreshes, so the first refresh after
    startup reports usage since construction.
    """

    def __init__(self) -> None:
        # First call always returns zeros; it only sets the baseline
        self._usages: list[float] = psutil.cpu_percent(interval=None, percpu=True)
        self._last_uptime = 0

    @property
    def core_count(self) -> int:
        return len(self._usages)

    def refresh(self) -> None:
        self._usages = psutil.cpu_percent(interval=None, percpu=True)

    def read_usages(self) -> Sequence[float]:
        return list(self._usages)

    def read_uptime(self) -> int:
        uptime = int(time.time() - psutil.boot_time())
        # Wall-clock adjustments must not make uptime go backwards
        self._last_uptime = max(self._last_uptime, uptime)
        return self._last_uptime


class PsutilDiskProvider(DiskProvider):
    """Disk handle backed by psutil. Each refresh rebuilds the list from scratch."""

    def __init__(self, all_partitions: bool = False) -> None:
        self._all_partitions = all_partitions
        self._disks: list[RawDisk] = []

    def refresh(self) -> None:
        disks: list[RawDisk] = []
        for part in psutil.disk_partitions(all=self._all_partitions):
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError as e:
                # Unreadable mount (permissions, stale network fs): drop this entry only
                logger.warning("disk_usage_unavailable", mount_point=part.mountpoint, reason=str(e))
                continue
            disks.append(
                RawDisk(
                    name=part.device,
                    mount_point=part.mountpoint,
                    total_space_bytes=usage.total,
                    available_space_bytes=usage.free,
                )
            )
        self._disks = disks

    def read_disks(self) -> Sequence[RawDisk]:
        return list(self._disks)
