"""Reusable async HTTP client for internal service-to-service communication.

All cross-service calls go through the module-level clients below instead of
importing models or querying tables owned by other services. The gateway uses
the same clients to proxy public traffic.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from libs.auth.security import _service_role_jwt
from libs.common.config import get_settings
from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)
settings = get_settings()

# Default timeout for internal calls (seconds).
_DEFAULT_TIMEOUT = 10.0


class ServiceClient:
    """Thin wrapper around httpx for one downstream service."""

    def __init__(self, base_url: str, timeout: float = _DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(method, f"{self.base_url}{path}", **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[dict] = None,
        **kwargs,
    ) -> httpx.Response:
        """Send a request and return the raw response (no status check)."""
        return await self._request(method, path, headers=headers or {}, **kwargs)

    async def get(self, path: str, **kwargs) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)


# Service client instances
members_client = ServiceClient(settings.MEMBERS_SERVICE_URL)
matrimony_client = ServiceClient(settings.MATRIMONY_SERVICE_URL)
payments_client = ServiceClient(settings.PAYMENTS_SERVICE_URL)
media_client = ServiceClient(settings.MEDIA_SERVICE_URL)
events_client = ServiceClient(settings.EVENTS_SERVICE_URL)


def _internal_headers(calling_service: str) -> dict:
    headers = {
        "Authorization": f"Bearer {_service_role_jwt(calling_service)}",
        "X-Caller-Service": calling_service,
    }
    request_id = get_request_id()
    if request_id:
        headers["X-Request-ID"] = request_id
    return headers


async def internal_request(
    client: ServiceClient,
    method: str,
    path: str,
    *,
    calling_service: str,
    json: Any = None,
    params: Optional[dict] = None,
) -> httpx.Response:
    """Make an authenticated internal service-to-service HTTP call.

    Args:
        client: Target service client (e.g. ``members_client``).
        method: HTTP method (GET, POST, DELETE, ...).
        path: URL path on the target service (e.g. "/internal/accounts/abc").
        calling_service: Name of the calling service for the JWT "sub" claim.
        json: Optional JSON body.
        params: Optional query parameters.

    Raises:
        httpx.RequestError on connection failures.
    """
    return await client.request(
        method,
        path,
        headers=_internal_headers(calling_service),
        json=json,
        params=params,
    )


# ---------------------------------------------------------------------------
# High-level helpers (resolve common cross-service lookups)
#
# Helpers read the module-level clients at call time so a replaced client
# (e.g. an in-process client in tests) is picked up everywhere.
# ---------------------------------------------------------------------------


async def get_account(account_id: str, *, calling_service: str) -> Optional[dict]:
    """Fetch an account snapshot from the members service.

    Returns the account dict (id, name, email, flags) or None if unknown.
    """
    resp = await internal_request(
        members_client,
        "GET",
        f"/internal/accounts/{account_id}",
        calling_service=calling_service,
    )
    if resp.status_code == 404:
        return None
    resp.raise_for_status()
    return resp.json()


async def activate_membership(
    account_id: str, payment: dict, *, calling_service: str
) -> dict:
    """Flip ``is_member`` on an account after a verified membership payment."""
    resp = await internal_request(
        members_client,
        "POST",
        f"/internal/accounts/{account_id}/membership",
        calling_service=calling_service,
        json=payment,
    )
    resp.raise_for_status()
    return resp.json()


async def get_profile(profile_id: str, *, calling_service: str) -> Optional[dict]:
    """Fetch a matrimony profile (owner, payment flags) or None if unknown."""
    resp = await internal_request(
        matrimony_client,
        "GET",
        f"/internal/profiles/{profile_id}",
        calling_service=calling_service,
    )
    if resp.status_code == 404:
        return None
    resp.raise_for_status()
    return resp.json()


async def mark_profile_paid(
    profile_id: str, payment: dict, *, calling_service: str
) -> dict:
    """Record a verified activation payment on a matrimony profile."""
    resp = await internal_request(
        matrimony_client,
        "POST",
        f"/internal/profiles/{profile_id}/paid",
        calling_service=calling_service,
        json=payment,
    )
    resp.raise_for_status()
    return resp.json()


async def owns_paid_profile(account_id: str, *, calling_service: str) -> bool:
    """Whether the account owns at least one paid matrimony profile."""
    resp = await internal_request(
        matrimony_client,
        "GET",
        f"/internal/accounts/{account_id}/owns-paid-profile",
        calling_service=calling_service,
    )
    resp.raise_for_status()
    return bool(resp.json().get("owns_paid_profile"))
