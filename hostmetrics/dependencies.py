from fastapi import Request

from hostmetrics.core.exceptions import ProviderUnavailableError
from hostmetrics.services.snapshot_cache import MetricsSnapshotCache


def get_snapshot_cache(request: Request) -> MetricsSnapshotCache:
    """Return the snapshot cache stored on app state during lifespan."""
    cache = getattr(request.app.state, "snapshot_cache", None)
    if cache is None:
        raise ProviderUnavailableError("metrics", message="Metrics providers are not initialized.")
    return cache
