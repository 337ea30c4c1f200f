"""ApiClient error translation against a mocked transport."""

import httpx
import pytest

from libs.auth.models import AccountSnapshot
from portal.api import ApiClient
from portal.errors import (
    AccessDenied,
    NetworkError,
    NotFound,
    ServerError,
    SessionInvalid,
    ValidationFailed,
)
from portal.state import AppState


def _signed_in_state() -> AppState:
    state = AppState()
    state.sign_in(
        "token-abc",
        AccountSnapshot(
            id="3f0e8f0e-0000-4000-8000-000000000001",
            name="Asha Rathore",
            email="asha@test.com",
            is_approved=True,
        ),
    )
    return state


def _client(state: AppState, handler) -> ApiClient:
    return ApiClient(state, "http://api.test/api/v1", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
@pytest.mark.portal
async def test_token_attached_and_empty_params_dropped():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["query"] = dict(request.url.params)
        return httpx.Response(200, json={"items": [], "total": 0})

    state = _signed_in_state()
    await _client(state, handler).list_events(status=None, page=2)

    assert seen["auth"] == "Bearer token-abc"
    assert seen["query"] == {"page": "2", "limit": "20"}


@pytest.mark.asyncio
@pytest.mark.portal
async def test_401_signs_out_and_asks_for_login():
    state = _signed_in_state()
    client = _client(state, lambda r: httpx.Response(401, json={"detail": "Expired"}))

    with pytest.raises(SessionInvalid):
        await client.me()

    assert state.token is None
    assert state.account is None
    assert state.redirect == "/login"


@pytest.mark.asyncio
@pytest.mark.portal
async def test_403_keeps_detail_and_code():
    body = {"detail": "Membership required", "code": "LISTING_ACCESS_REQUIRED"}
    state = _signed_in_state()
    client = _client(state, lambda r: httpx.Response(403, json=body))

    with pytest.raises(AccessDenied) as exc:
        await client.list_profiles()

    assert exc.value.code == "LISTING_ACCESS_REQUIRED"
    assert exc.value.message == "Membership required"
    assert state.is_authenticated


@pytest.mark.asyncio
@pytest.mark.portal
@pytest.mark.parametrize(
    "status,error",
    [(400, ValidationFailed), (409, ValidationFailed), (422, ValidationFailed), (404, NotFound)],
)
async def test_client_errors(status, error):
    client = _client(
        _signed_in_state(), lambda r: httpx.Response(status, json={"detail": "Nope"})
    )

    with pytest.raises(error) as exc:
        await client.get_profile("abc")
    assert exc.value.message == "Nope"


@pytest.mark.asyncio
@pytest.mark.portal
async def test_validation_error_list_falls_back_to_default_message():
    body = {"detail": [{"loc": ["body", "phone"], "msg": "bad"}], "code": "VALIDATION_ERROR"}
    client = _client(_signed_in_state(), lambda r: httpx.Response(422, json=body))

    with pytest.raises(ValidationFailed) as exc:
        await client.create_profile({})
    assert exc.value.message == ValidationFailed.default_message


@pytest.mark.asyncio
@pytest.mark.portal
async def test_rate_limited():
    client = _client(_signed_in_state(), lambda r: httpx.Response(429, json={"detail": "x"}))

    with pytest.raises(ServerError, match="Too many attempts"):
        await client.login("asha@test.com", "pw")


@pytest.mark.asyncio
@pytest.mark.portal
async def test_server_error_hides_details():
    client = _client(_signed_in_state(), lambda r: httpx.Response(500, text="Traceback..."))

    with pytest.raises(ServerError) as exc:
        await client.me()
    assert exc.value.message == ServerError.default_message
    assert exc.value.status_code == 500


@pytest.mark.asyncio
@pytest.mark.portal
async def test_timeout_becomes_network_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(NetworkError, match="timed out"):
        await _client(_signed_in_state(), handler).me()


@pytest.mark.asyncio
@pytest.mark.portal
async def test_connection_failure_becomes_network_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NetworkError):
        await _client(_signed_in_state(), handler).me()


@pytest.mark.portal
def test_default_timeout_is_bounded():
    client = ApiClient(AppState())
    assert client.timeout == 30.0
