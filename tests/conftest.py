import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from hostmetrics.services.snapshot_cache import MetricsSnapshotCache
from tests.mocks.fake_providers import FakeCpuProvider, FakeDiskProvider, raw_disk


@pytest.fixture
def cpu_provider():
    """Single-core stub reporting 42.0% usage and 1000s uptime."""
    return FakeCpuProvider(usages=[42.0], uptime=1000)


@pytest.fixture
def disk_provider():
    """Two well-formed disks."""
    return FakeDiskProvider(
        disks=[
            raw_disk("/dev/sda1", "/", 500_000_000_000, 200_000_000_000),
            raw_disk("/dev/sdb1", "/data", 1_000_000_000_000, 900_000_000_000),
        ]
    )


@pytest.fixture
def snapshot_cache(cpu_provider, disk_provider):
    return MetricsSnapshotCache(cpu_provider=cpu_provider, disk_provider=disk_provider, guard_timeout=5.0)


@pytest_asyncio.fixture
async def app_with_stubs(snapshot_cache):
    """FastAPI app wired to stub providers instead of psutil."""
    from hostmetrics.main import app

    original = getattr(app.state, "snapshot_cache", None)
    app.state.snapshot_cache = snapshot_cache

    yield app

    app.state.snapshot_cache = original


@pytest_asyncio.fixture
async def client(app_with_stubs):
    """Async HTTP client talking to the app in-process."""
    transport = ASGITransport(app=app_with_stubs)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
