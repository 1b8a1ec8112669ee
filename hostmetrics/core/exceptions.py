from fastapi import Request
from fastapi.responses import JSONResponse


class MetricsError(Exception):
    """Base exception for host metrics API errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status: int = 500,
        details: dict | None = None,
    ):
        self.code = code
        self.message = message
        self.status = status
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        result = {
            "error": {
                "code": self.code,
                "message": self.message,
                "status": self.status,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class NotFoundError(MetricsError):
    def __init__(self, message: str = "Resource not found.", details: dict | None = None):
        super().__init__(code="not_found", message=message, status=404, details=details)


class ProviderUnavailableError(MetricsError):
    """A provider handle could not be guarded or its refresh failed."""

    def __init__(
        self,
        handle: str,
        message: str | None = None,
        details: dict | None = None,
    ):
        self.handle = handle
        super().__init__(
            code="provider_unavailable",
            message=message or f"The {handle} metrics provider is unavailable.",
            status=503,
            details={"handle": handle, **(details or {})},
        )


class MalformedDeviceDataError(ValueError):
    """A raw device record cannot be converted into a response record."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


async def metrics_error_handler(request: Request, exc: MetricsError) -> JSONResponse:
    """Global exception handler for MetricsError and subclasses."""
    return JSONResponse(status_code=exc.status, content=exc.to_dict())
