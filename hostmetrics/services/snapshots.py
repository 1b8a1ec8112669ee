"""Snapshot value types and conversion of raw provider records."""

from dataclasses import dataclass

from hostmetrics.core.exceptions import MalformedDeviceDataError


@dataclass(slots=True, frozen=True)
class CpuSnapshot:
    """Uptime and per-core usage read within one refresh window."""

    uptime_seconds: int
    per_core_usage: tuple[float, ...]  # stable core index order


@dataclass(slots=True, frozen=True)
class DiskRecord:
    """Usage of one mounted device."""

    name: str
    mount_point: str
    total_space_bytes: int
    available_space_bytes: int  # not checked against total_space_bytes


DiskSnapshot = tuple[DiskRecord, ...]


@dataclass(slots=True, frozen=True)
class RawDisk:
    """A disk entry as a provider enumerated it, before validation."""

    name: str | bytes | None
    mount_point: str | bytes | None
    total_space_bytes: int
    available_space_bytes: int


def _to_text(field: str, value: str | bytes | None) -> str:
    if value is None:
        raise MalformedDeviceDataError(field, "missing")
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedDeviceDataError(field, "not valid UTF-8") from exc
    if not isinstance(value, str):
        raise MalformedDeviceDataError(field, f"unexpected type {type(value).__name__}")
    # Undecodable OS bytes arrive as lone surrogates (surrogateescape)
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise MalformedDeviceDataError(field, "not valid UTF-8") from exc
    return value


def _to_size(field: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedDeviceDataError(field, f"not an unsigned integer: {value!r}")
    return value


def to_disk_record(raw: RawDisk) -> DiskRecord:
    """Convert a raw provider record, raising MalformedDeviceDataError if it cannot be."""
    return DiskRecord(
        name=_to_text("name", raw.name),
        mount_point=_to_text("mount_point", raw.mount_point),
        total_space_bytes=_to_size("total_space_bytes", raw.total_space_bytes),
        available_space_bytes=_to_size("available_space_bytes", raw.available_space_bytes),
    )
