"""Request context middleware shared by the portal services.

The gateway forwards the browser's X-Request-ID to every service it calls,
and services forward it again on internal calls, so one id follows a
payment or a profile submission across members, matrimony and payments.

Usage:
    from libs.common.middleware import add_observability_middleware

    app = FastAPI()
    add_observability_middleware(app)
"""
import re
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
CALLER_HEADER = "X-Caller-Service"
QUIET_PATHS = frozenset({"/health", "/docs", "/openapi.json"})

# Client-supplied ids end up in every service's logs.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def accepted_request_id(value: Optional[str]) -> Optional[str]:
    """The incoming request id if it is safe to propagate, else None."""
    if value and _REQUEST_ID_PATTERN.match(value):
        return value
    return None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Binds the request id, logs each request with its caller and duration,
    and echoes the id on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER)
        request_id = set_request_context(
            request_id=accepted_request_id(incoming),
            path=request.url.path,
            method=request.method,
        )
        if incoming and incoming != request_id:
            logger.warning("Replaced malformed request id")

        caller = request.headers.get(CALLER_HEADER) or "client"
        quiet = request.url.path in QUIET_PATHS
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            if not quiet:
                log = logger.warning if response.status_code >= 400 else logger.info
                log(
                    f"{request.method} {request.url.path} -> {response.status_code}",
                    extra={
                        "extra_fields": {
                            "caller": caller,
                            "status_code": response.status_code,
                            "duration_ms": round(
                                (time.perf_counter() - start_time) * 1000, 2
                            ),
                        }
                    },
                )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception as e:
            logger.exception(
                "Request failed with unhandled exception",
                extra={
                    "extra_fields": {
                        "caller": caller,
                        "error": str(e),
                        "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                    }
                },
            )
            raise
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install the request context middleware."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
    logger.info("Observability middleware initialized for %s", app.title)
