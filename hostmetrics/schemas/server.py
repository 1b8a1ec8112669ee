from pydantic import BaseModel

from hostmetrics.services.snapshots import CpuSnapshot, DiskRecord


class CpuUsageResponse(BaseModel):
    uptime_seconds: int
    cpu_usage: list[float]  # one entry per logical core

    @classmethod
    def from_snapshot(cls, snapshot: CpuSnapshot) -> "CpuUsageResponse":
        return cls(uptime_seconds=snapshot.uptime_seconds, cpu_usage=list(snapshot.per_core_usage))


class DiskUsage(BaseModel):
    name: str
    mount_point: str
    total_space: int  # bytes
    available_space: int  # bytes

    @classmethod
    def from_record(cls, record: DiskRecord) -> "DiskUsage":
        return cls(
            name=record.name,
            mount_point=record.mount_point,
            total_space=record.total_space_bytes,
            available_space=record.available_space_bytes,
        )


class StatusResponse(BaseModel):
    status: str = "ok"
