"""Guarded refresh-and-read access to the process-wide metrics providers.

Each provider handle sits behind its own asyncio.Lock. A snapshot call holds the
lock for exactly one refresh -> read -> construct sequence, which runs in a
worker thread so the event loop stays free and the CPU and disk handles never
wait on each other. Nothing is cached between calls and there is no unguarded
read path.
"""

import asyncio
import functools
from collections.abc import Callable
from typing import TypeVar

import structlog

from hostmetrics.core.exceptions import MalformedDeviceDataError, ProviderUnavailableError
from hostmetrics.services.provider import CpuProvider, DiskProvider
from hostmetrics.services.snapshots import CpuSnapshot, DiskSnapshot, to_disk_record

logger = structlog.get_logger()

T = TypeVar("T")

CPU_HANDLE = "cpu"
DISK_HANDLE = "disk"


class MetricsSnapshotCache:
    """Serializes refresh+read per provider handle for concurrent callers."""

    def __init__(
        self,
        cpu_provider: CpuProvider,
        disk_provider: DiskProvider,
        guard_timeout: float | None = 10.0,
    ):
        self._cpu_provider = cpu_provider
        self._disk_provider = disk_provider
        self._cpu_guard = asyncio.Lock()
        self._disk_guard = asyncio.Lock()
        self._guard_timeout = guard_timeout
        self._inflight: set[asyncio.Task] = set()

    async def get_cpu_snapshot(self) -> CpuSnapshot:
        """Refresh the CPU handle and read uptime and per-core usage under its guard."""
        return await self._guarded(CPU_HANDLE, self._cpu_guard, self._sample_cpu)

    async def get_disk_snapshot(self) -> DiskSnapshot:
        """Refresh the disk handle and read every convertible disk record under its guard."""
        return await self._guarded(DISK_HANDLE, self._disk_guard, self._sample_disks)

    async def _guarded(self, handle: str, guard: asyncio.Lock, sample: Callable[[], T]) -> T:
        await self._acquire(handle, guard)
        try:
            task = asyncio.create_task(asyncio.to_thread(sample))
        except BaseException:
            guard.release()
            raise
        self._inflight.add(task)
        task.add_done_callback(functools.partial(self._release, guard))

        # A caller that goes away must not cut a refresh+read short; the task
        # keeps the guard until the sequence completes and its result is dropped.
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            logger.info("snapshot_abandoned", handle=handle)
            raise

    async def _acquire(self, handle: str, guard: asyncio.Lock) -> None:
        try:
            async with asyncio.timeout(self._guard_timeout):
                await guard.acquire()
        except TimeoutError as e:
            logger.error("provider_guard_timeout", handle=handle, timeout=self._guard_timeout)
            raise ProviderUnavailableError(
                handle,
                message=f"Timed out waiting for the {handle} metrics provider.",
                details={"timeout_seconds": self._guard_timeout},
            ) from e

    def _release(self, guard: asyncio.Lock, task: asyncio.Task) -> None:
        guard.release()
        self._inflight.discard(task)
        if not task.cancelled():
            # Mark the exception retrieved when the caller was cancelled
            task.exception()

    def _sample_cpu(self) -> CpuSnapshot:
        try:
            self._cpu_provider.refresh()
            usages = tuple(float(u) for u in self._cpu_provider.read_usages())
            uptime = int(self._cpu_provider.read_uptime())
        except ProviderUnavailableError:
            raise
        except Exception as e:
            logger.error("provider_refresh_failed", handle=CPU_HANDLE, error=str(e))
            raise ProviderUnavailableError(CPU_HANDLE) from e
        return CpuSnapshot(uptime_seconds=uptime, per_core_usage=usages)

    def _sample_disks(self) -> DiskSnapshot:
        try:
            self._disk_provider.refresh()
            raw_disks = list(self._disk_provider.read_disks())
        except ProviderUnavailableError:
            raise
        except Exception as e:
            logger.error("provider_refresh_failed", handle=DISK_HANDLE, error=str(e))
            raise ProviderUnavailableError(DISK_HANDLE) from e

        records = []
        for index, raw in enumerate(raw_disks):
            try:
                records.append(to_disk_record(raw))
            except MalformedDeviceDataError as e:
                logger.warning("disk_record_skipped", index=index, field=e.field, reason=e.reason)
        return tuple(records)
