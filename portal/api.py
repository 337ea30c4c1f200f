"""HTTP client for the portal API (the gateway's ``/api/v1``).

Every call goes through ``ApiClient._request`` which attaches the session
token, applies a bounded timeout and turns transport and HTTP failures into
the ``portal.errors`` taxonomy. A 401 clears the session and asks for the
login page.
"""

from typing import Any, Optional

import httpx
from libs.auth.access_gate import LOGIN_PATH
from libs.common.config import get_settings
from libs.common.logging import get_logger

from portal.errors import (
    AccessDenied,
    NetworkError,
    NotFound,
    PortalError,
    ServerError,
    SessionInvalid,
    ValidationFailed,
)
from portal.state import AppState

logger = get_logger(__name__)
settings = get_settings()


def _error_detail(response: httpx.Response) -> tuple[Optional[str], Optional[str]]:
    try:
        body = response.json()
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None
    detail = body.get("detail")
    if not isinstance(detail, str):
        detail = None
    return detail, body.get("code")


class ApiClient:
    def __init__(
        self,
        state: AppState,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.state = state
        self.base_url = (base_url or settings.PORTAL_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.PORTAL_REQUEST_TIMEOUT_SECONDS
        self.transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        headers = {}
        if self.state.token:
            headers["Authorization"] = f"Bearer {self.state.token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    headers=headers,
                    json=json,
                    params=params,
                )
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out after {self.timeout}s")
            raise NetworkError("The request timed out. Please try again.") from e
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise NetworkError() from e

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            return response.json()

        raise self._translate(response)

    def _translate(self, response: httpx.Response) -> PortalError:
        status = response.status_code
        detail, code = _error_detail(response)

        if status == 401:
            self.state.sign_out()
            self.state.redirect_to(LOGIN_PATH)
            return SessionInvalid(status_code=status)
        if status == 403:
            return AccessDenied(detail, code=code, status_code=status)
        if status == 404:
            return NotFound(detail, status_code=status)
        if status in (400, 409, 422):
            return ValidationFailed(detail, status_code=status)
        if status == 429:
            return ServerError(
                "Too many attempts. Please wait a minute and try again.",
                status_code=status,
            )
        return ServerError(status_code=status)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def register(self, name: str, email: str, password: str, phone: str) -> dict:
        return await self._request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password, "phone": phone},
        )

    async def verify_otp(self, email: str, otp: str) -> dict:
        return await self._request(
            "POST", "/auth/verify-otp", json={"email": email, "otp": otp}
        )

    async def resend_otp(self, email: str) -> dict:
        return await self._request("POST", "/auth/resend-otp", json={"email": email})

    async def login(self, email: str, password: str) -> dict:
        return await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )

    async def me(self) -> dict:
        return await self._request("GET", "/auth/me")

    async def forgot_password(self, email: str) -> dict:
        return await self._request(
            "POST", "/auth/forgot-password", json={"email": email}
        )

    async def reset_password(self, token: str, password: str) -> dict:
        return await self._request(
            "POST",
            "/auth/reset-password",
            json={"token": token, "password": password},
        )

    # ------------------------------------------------------------------
    # Account administration
    # ------------------------------------------------------------------

    async def list_accounts(
        self,
        *,
        is_approved: Optional[bool] = None,
        is_member: Optional[bool] = None,
        is_suspended: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        return await self._request(
            "GET",
            "/admin/users",
            params={
                "is_approved": is_approved,
                "is_member": is_member,
                "is_suspended": is_suspended,
                "search": search,
                "page": page,
                "limit": limit,
            },
        )

    async def list_pending_accounts(self, page: int = 1, limit: int = 20) -> dict:
        return await self._request(
            "GET", "/admin/users/pending", params={"page": page, "limit": limit}
        )

    async def approve_account(self, account_id: str) -> dict:
        return await self._request("POST", f"/admin/users/{account_id}/approve")

    async def reject_account(self, account_id: str) -> dict:
        return await self._request("POST", f"/admin/users/{account_id}/reject")

    async def bulk_approve(self, account_ids: list[str]) -> dict:
        return await self._request(
            "POST", "/admin/users/bulk-approve", json={"account_ids": account_ids}
        )

    async def bulk_reject(self, account_ids: list[str]) -> dict:
        return await self._request(
            "POST", "/admin/users/bulk-reject", json={"account_ids": account_ids}
        )

    async def suspend_account(self, account_id: str, reason: str) -> dict:
        return await self._request(
            "POST", f"/admin/users/{account_id}/suspend", json={"reason": reason}
        )

    async def unsuspend_account(self, account_id: str) -> dict:
        return await self._request("POST", f"/admin/users/{account_id}/unsuspend")

    async def grant_admin(self, account_id: str) -> dict:
        return await self._request("POST", f"/admin/users/{account_id}/make-admin")

    async def mark_member(self, account_id: str, note: Optional[str] = None) -> dict:
        return await self._request(
            "POST", f"/admin/users/{account_id}/mark-member", json={"note": note}
        )

    # ------------------------------------------------------------------
    # Matrimony
    # ------------------------------------------------------------------

    async def list_profiles(self, page: int = 1, limit: int = 12, **filters) -> dict:
        """Public listing; filters: gender, min_age, max_age, marital_status,
        education, occupation, diet."""
        return await self._request(
            "GET",
            "/matrimony/profiles",
            params={**filters, "page": page, "limit": limit},
        )

    async def get_profile(self, profile_id: str) -> dict:
        return await self._request("GET", f"/matrimony/profiles/{profile_id}")

    async def create_profile(self, data: dict) -> dict:
        return await self._request("POST", "/matrimony/profiles", json=data)

    async def update_profile(self, profile_id: str, changes: dict) -> dict:
        return await self._request(
            "PATCH", f"/matrimony/profiles/{profile_id}", json=changes
        )

    async def delete_profile(self, profile_id: str) -> dict:
        return await self._request("DELETE", f"/matrimony/profiles/{profile_id}")

    async def toggle_hidden(self, profile_id: str) -> dict:
        return await self._request(
            "POST", f"/matrimony/profiles/{profile_id}/toggle-hidden"
        )

    async def my_profiles(self) -> list[dict]:
        return await self._request("GET", "/matrimony/profiles/mine")

    async def admin_list_profiles(self, page: int = 1, limit: int = 20, **filters) -> dict:
        return await self._request(
            "GET",
            "/admin/matrimonies",
            params={**filters, "page": page, "limit": limit},
        )

    async def mark_completed(self, profile_id: str) -> dict:
        return await self._request(
            "POST", f"/admin/matrimonies/{profile_id}/mark-completed"
        )

    async def admin_delete_profile(self, profile_id: str) -> dict:
        return await self._request("DELETE", f"/admin/matrimonies/{profile_id}")

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    async def create_order(self, purpose: str, target_id: Optional[str] = None) -> dict:
        payload = {"purpose": purpose}
        if target_id is not None:
            payload["target_id"] = target_id
        return await self._request("POST", "/payments/orders", json=payload)

    async def verify_payment(self, order_id: str, payment_id: str, signature: str) -> dict:
        return await self._request(
            "POST",
            "/payments/verify",
            json={
                "order_id": order_id,
                "payment_id": payment_id,
                "signature": signature,
            },
        )

    # ------------------------------------------------------------------
    # Media, gallery, events
    # ------------------------------------------------------------------

    async def signed_upload_params(self, folder: str) -> dict:
        return await self._request(
            "GET", "/upload/signed-params", params={"folder": folder}
        )

    async def list_gallery(self, page: int = 1, limit: int = 20) -> dict:
        return await self._request(
            "GET", "/gallery", params={"page": page, "limit": limit}
        )

    async def list_events(
        self, status: Optional[str] = None, page: int = 1, limit: int = 20
    ) -> dict:
        return await self._request(
            "GET", "/events", params={"status": status, "page": page, "limit": limit}
        )
