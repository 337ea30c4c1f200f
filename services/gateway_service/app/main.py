"""FastAPI application entrypoint for the Blue City gateway service.

The gateway is the only public surface: it proxies ``/api/v1/*`` to the
owning services and applies CORS and rate limits in one place.
"""

from __future__ import annotations

from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi.errors import RateLimitExceeded

from libs.common import service_client
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import get_logger, get_request_id
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import (
    auth_limit,
    limiter,
    otp_limit,
    payment_limit,
    rate_limit_exceeded_handler,
)

logger = get_logger(__name__)
settings = get_settings()

_METHODS = ["GET", "POST", "PATCH", "DELETE"]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    app = FastAPI(
        title="Blue City Gateway Service",
        version="0.1.0",
        description="API Gateway that fronts the Blue City services.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted({settings.FRONTEND_URL, *settings.CORS_ORIGINS}),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok"}

    # ==================================================================
    # MEMBERS SERVICE PROXY (auth + admin accounts)
    # ==================================================================
    @app.post("/api/v1/auth/register")
    @app.post("/api/v1/auth/verify-otp")
    @app.post("/api/v1/auth/login")
    @app.post("/api/v1/auth/forgot-password")
    @app.post("/api/v1/auth/reset-password")
    @auth_limit
    async def proxy_auth_limited(request: Request):
        """Credential endpoints, 5 requests per minute per client."""
        path = request.url.path.removeprefix("/api/v1")
        return await proxy_request(service_client.members_client, path, request)

    @app.post("/api/v1/auth/resend-otp")
    @otp_limit
    async def proxy_resend_otp(request: Request):
        """One-time code resends, 3 per minute per client."""
        return await proxy_request(
            service_client.members_client, "/auth/resend-otp", request
        )

    @app.api_route("/api/v1/auth/{path:path}", methods=_METHODS)
    async def proxy_auth(path: str, request: Request):
        """Proxy all other /api/v1/auth/* requests to members service."""
        return await proxy_request(
            service_client.members_client, f"/auth/{path}", request
        )

    @app.api_route("/api/v1/admin/users", methods=_METHODS)
    async def proxy_admin_users_root(request: Request):
        return await proxy_request(
            service_client.members_client, "/admin/users", request
        )

    @app.api_route("/api/v1/admin/users/{path:path}", methods=_METHODS)
    async def proxy_admin_users(path: str, request: Request):
        """Proxy all /api/v1/admin/users/* requests to members service."""
        return await proxy_request(
            service_client.members_client, f"/admin/users/{path}", request
        )

    # ==================================================================
    # MATRIMONY SERVICE PROXY
    # ==================================================================
    @app.api_route("/api/v1/matrimony/{path:path}", methods=_METHODS)
    async def proxy_matrimony(path: str, request: Request):
        """Proxy all /api/v1/matrimony/* requests to matrimony service."""
        return await proxy_request(
            service_client.matrimony_client, f"/matrimony/{path}", request
        )

    @app.api_route("/api/v1/admin/matrimonies", methods=_METHODS)
    async def proxy_admin_matrimonies_root(request: Request):
        return await proxy_request(
            service_client.matrimony_client, "/admin/matrimonies", request
        )

    @app.api_route("/api/v1/admin/matrimonies/{path:path}", methods=_METHODS)
    async def proxy_admin_matrimonies(path: str, request: Request):
        """Proxy all /api/v1/admin/matrimonies/* requests to matrimony service."""
        return await proxy_request(
            service_client.matrimony_client, f"/admin/matrimonies/{path}", request
        )

    # ==================================================================
    # PAYMENTS SERVICE PROXY
    # ==================================================================
    @app.post("/api/v1/payments/orders")
    @app.post("/api/v1/payments/verify")
    @payment_limit
    async def proxy_payments_limited(request: Request):
        """Order creation and verification, 10 per minute per client."""
        path = request.url.path.removeprefix("/api/v1")
        return await proxy_request(service_client.payments_client, path, request)

    # Membership checkout shortcuts kept for older portal builds
    @app.post("/api/v1/membership/create-order")
    @payment_limit
    async def proxy_membership_order(request: Request):
        return await proxy_request(
            service_client.payments_client,
            "/payments/orders",
            request,
            body=b'{"purpose": "membership"}',
        )

    @app.post("/api/v1/membership/verify-payment")
    @payment_limit
    async def proxy_membership_verify(request: Request):
        return await proxy_request(
            service_client.payments_client, "/payments/verify", request
        )

    @app.api_route("/api/v1/payments/{path:path}", methods=_METHODS)
    async def proxy_payments(path: str, request: Request):
        """Proxy all /api/v1/payments/* requests to payments service."""
        return await proxy_request(
            service_client.payments_client, f"/payments/{path}", request
        )

    # ==================================================================
    # MEDIA SERVICE PROXY (uploads + gallery)
    # ==================================================================
    @app.api_route("/api/v1/upload/{path:path}", methods=_METHODS)
    async def proxy_upload(path: str, request: Request):
        """Proxy all /api/v1/upload/* requests to media service."""
        return await proxy_request(
            service_client.media_client, f"/upload/{path}", request
        )

    @app.api_route("/api/v1/gallery", methods=["GET"])
    async def proxy_gallery_root(request: Request):
        return await proxy_request(service_client.media_client, "/gallery", request)

    @app.api_route("/api/v1/gallery/{path:path}", methods=["GET"])
    async def proxy_gallery(path: str, request: Request):
        return await proxy_request(
            service_client.media_client, f"/gallery/{path}", request
        )

    @app.api_route("/api/v1/admin/gallery", methods=_METHODS)
    async def proxy_admin_gallery_root(request: Request):
        return await proxy_request(
            service_client.media_client, "/admin/gallery", request
        )

    @app.api_route("/api/v1/admin/gallery/{path:path}", methods=_METHODS)
    async def proxy_admin_gallery(path: str, request: Request):
        return await proxy_request(
            service_client.media_client, f"/admin/gallery/{path}", request
        )

    # ==================================================================
    # EVENTS SERVICE PROXY
    # ==================================================================
    @app.api_route("/api/v1/events", methods=["GET"])
    async def proxy_events_root(request: Request):
        return await proxy_request(service_client.events_client, "/events", request)

    @app.api_route("/api/v1/events/{path:path}", methods=["GET"])
    async def proxy_events(path: str, request: Request):
        """Proxy all /api/v1/events/* requests to events service."""
        return await proxy_request(
            service_client.events_client, f"/events/{path}", request
        )

    @app.api_route("/api/v1/admin/events", methods=_METHODS)
    async def proxy_admin_events_root(request: Request):
        return await proxy_request(
            service_client.events_client, "/admin/events", request
        )

    @app.api_route("/api/v1/admin/events/{path:path}", methods=_METHODS)
    async def proxy_admin_events(path: str, request: Request):
        return await proxy_request(
            service_client.events_client, f"/admin/events/{path}", request
        )

    return app


def _filter_service_headers(headers: httpx.Headers) -> list[tuple[str, str]]:
    """Strip hop-by-hop headers that FastAPI/starlette manages."""
    hop_by_hop = {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "content-length",
        "content-encoding",
        "host",
        "content-type",
        "x-request-id",
    }
    return [(k, v) for k, v in headers.items() if k.lower() not in hop_by_hop]


async def proxy_request(
    client: service_client.ServiceClient,
    path: str,
    request: Request,
    *,
    body: Optional[bytes] = None,
):
    """Forward ``request`` to ``client`` at ``path`` and relay the response.

    ``body`` replaces the incoming body when given.
    """
    content_body = body
    if content_body is None and request.method in ["POST", "PATCH", "PUT"]:
        body_bytes = await request.body()
        if body_bytes:
            content_body = body_bytes

    # Forward headers (Authorization included); httpx sets Host and Content-Length
    headers = {
        k: v
        for k, v in request.headers.items()
        if k.lower() not in ["content-length", "host", "x-request-id"]
    }
    if body is not None:
        headers["content-type"] = "application/json"
    request_id = get_request_id()
    if request_id:
        headers["X-Request-ID"] = request_id

    try:
        service_response = await client.request(
            request.method,
            path,
            headers=headers,
            params=list(request.query_params.multi_items()),
            content=content_body,
        )
    except httpx.RequestError as e:
        logger.error(f"Upstream unreachable for {request.method} {path}: {e}")
        raise HTTPException(status_code=502, detail="Service unavailable")

    forward_headers = dict(_filter_service_headers(service_response.headers))

    if service_response.status_code == 204:
        return Response(status_code=204, headers=forward_headers)

    content_type = service_response.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            payload = service_response.json()
            return JSONResponse(
                content=payload,
                status_code=service_response.status_code,
                headers=forward_headers,
            )
        except ValueError:
            # Fall back to raw bytes if the payload is not valid JSON.
            pass

    return Response(
        content=service_response.content,
        status_code=service_response.status_code,
        media_type=content_type or None,
        headers=forward_headers,
    )


app = create_app()
