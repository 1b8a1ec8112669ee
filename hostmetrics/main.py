import socket
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hostmetrics.api.router import api_router
from hostmetrics.config import settings
from hostmetrics.core.exceptions import MetricsError, metrics_error_handler
from hostmetrics.core.logging import configure_logging
from hostmetrics.core.middleware import RequestLoggingMiddleware
from hostmetrics.services.provider import PsutilCpuProvider, PsutilDiskProvider
from hostmetrics.services.snapshot_cache import MetricsSnapshotCache

configure_logging(settings.hostmetrics_log_level, settings.hostmetrics_log_format)

logger = structlog.get_logger()


def build_snapshot_cache() -> MetricsSnapshotCache:
    """Create the process-wide provider handles and the cache guarding them."""
    cpu_provider = PsutilCpuProvider()
    disk_provider = PsutilDiskProvider()
    logger.info("metrics_providers_initialized", cores=cpu_provider.core_count)
    return MetricsSnapshotCache(
        cpu_provider=cpu_provider,
        disk_provider=disk_provider,
        guard_timeout=settings.hostmetrics_guard_timeout,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    # Tests install a cache with stub providers before startup
    if getattr(app.state, "snapshot_cache", None) is None:
        app.state.snapshot_cache = build_snapshot_cache()

    logger.info("hostmetrics_starting")
    yield
    logger.info("hostmetrics_stopping")


app = FastAPI(
    title="Host Metrics Reporter",
    description="CPU, uptime and disk usage of this host over HTTP",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(MetricsError, metrics_error_handler)

# Starlette: last-added = outermost. Logging wraps CORS so preflights are logged too.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.hostmetrics_cors_origins.split(","),
    allow_methods=["GET"],
    allow_headers=["Content-Type"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind the listening socket. Failure is fatal: the process exits without serving."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        logger.critical("server_bind_failed", host=host, port=port, reason=str(e))
        raise SystemExit(1) from e
    sock.set_inheritable(True)
    return sock


def run(host: str | None = None, port: int | None = None) -> None:
    """Serve the API with uvicorn on the configured address."""
    host = host or settings.hostmetrics_host
    port = port if port is not None else settings.hostmetrics_port

    sock = bind_socket(host, port)
    bound_host, bound_port = sock.getsockname()[:2]
    logger.info("server_running", url=f"http://{bound_host}:{bound_port}")

    config = uvicorn.Config(app, log_config=None, access_log=False)
    uvicorn.Server(config).run(sockets=[sock])


if __name__ == "__main__":
    run()
