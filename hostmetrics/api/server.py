from fastapi import APIRouter, Depends

from hostmetrics.dependencies import get_snapshot_cache
from hostmetrics.schemas.server import CpuUsageResponse, DiskUsage, StatusResponse
from hostmetrics.services.snapshot_cache import MetricsSnapshotCache

router = APIRouter(prefix="/server")


@router.get("/cpu_usage")
async def cpu_usage(
    cache: MetricsSnapshotCache = Depends(get_snapshot_cache),
) -> CpuUsageResponse:
    """Uptime and per-core CPU usage, refreshed for this request."""
    snapshot = await cache.get_cpu_snapshot()
    return CpuUsageResponse.from_snapshot(snapshot)


@router.get("/disk_usage")
async def disk_usage(
    cache: MetricsSnapshotCache = Depends(get_snapshot_cache),
) -> list[DiskUsage]:
    """Total and available space per mounted disk. Empty list if none are mounted."""
    snapshot = await cache.get_disk_snapshot()
    return [DiskUsage.from_record(record) for record in snapshot]


@router.get("/status")
async def status() -> StatusResponse:
    """Liveness check."""
    return StatusResponse()
