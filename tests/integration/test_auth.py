"""Integration tests for registration, verification, login and password reset."""

import pytest
from sqlalchemy import select

from services.members_service.models import Account, OneTimeCode, PasswordResetToken
from tests.factories import DEFAULT_PASSWORD, AccountFactory, bearer


async def _latest_code(db_session, email: str) -> str:
    result = await db_session.execute(
        select(OneTimeCode)
        .join(Account, Account.id == OneTimeCode.account_id)
        .where(Account.email == email, OneTimeCode.used_at.is_(None))
    )
    return result.scalars().one().code


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_then_verify_otp_signs_in_unapproved(members_client, db_session):
    """A new account starts unapproved and is signed in once its code checks out."""
    response = await members_client.post(
        "/auth/register",
        json={
            "name": "Asha Rathore",
            "email": "Asha@Test.com",
            "password": "secret-pass",
            "phone": "9876543210",
        },
    )
    assert response.status_code == 201, response.text
    assert response.json()["email"] == "asha@test.com"

    code = await _latest_code(db_session, "asha@test.com")
    response = await members_client.post(
        "/auth/verify-otp", json={"email": "asha@test.com", "otp": code}
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["account"]["email_verified"] is True
    assert data["account"]["is_approved"] is False

    me = await members_client.get(
        "/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"}
    )
    assert me.status_code == 200
    assert me.json()["is_approved"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_duplicate_email_rejected(members_client, db_session):
    account = AccountFactory.create()
    db_session.add(account)
    await db_session.commit()

    response = await members_client.post(
        "/auth/register",
        json={
            "name": "Someone Else",
            "email": account.email,
            "password": "secret-pass",
            "phone": "9876543210",
        },
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_validates_phone(members_client, db_session):
    response = await members_client.post(
        "/auth/register",
        json={
            "name": "Asha Rathore",
            "email": "asha@test.com",
            "password": "secret-pass",
            "phone": "12345",
        },
    )

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_wrong_otp_rejected(members_client, db_session):
    account = AccountFactory.pending(email_verified=False)
    db_session.add(account)
    await db_session.commit()

    response = await members_client.post(
        "/auth/verify-otp", json={"email": account.email, "otp": "000000"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired OTP"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_resend_otp_invalidates_previous_code(members_client, db_session):
    response = await members_client.post(
        "/auth/register",
        json={
            "name": "Kiran Joshi",
            "email": "kiran@test.com",
            "password": "secret-pass",
            "phone": "9876543210",
        },
    )
    assert response.status_code == 201
    first_code = await _latest_code(db_session, "kiran@test.com")

    response = await members_client.post(
        "/auth/resend-otp", json={"email": "kiran@test.com"}
    )
    assert response.status_code == 200
    second_code = await _latest_code(db_session, "kiran@test.com")

    if first_code != second_code:
        stale = await members_client.post(
            "/auth/verify-otp", json={"email": "kiran@test.com", "otp": first_code}
        )
        assert stale.status_code == 400

    fresh = await members_client.post(
        "/auth/verify-otp", json={"email": "kiran@test.com", "otp": second_code}
    )
    assert fresh.status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_resend_otp_for_verified_email_rejected(members_client, db_session):
    account = AccountFactory.create()
    db_session.add(account)
    await db_session.commit()

    response = await members_client.post("/auth/resend-otp", json={"email": account.email})

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already verified"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_returns_token_and_account(members_client, db_session):
    account = AccountFactory.member()
    db_session.add(account)
    await db_session.commit()

    response = await members_client.post(
        "/auth/login", json={"email": account.email, "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["access_token"]
    assert data["account"]["id"] == str(account.id)
    assert data["account"]["is_member"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_wrong_password(members_client, db_session):
    account = AccountFactory.create()
    db_session.add(account)
    await db_session.commit()

    response = await members_client.post(
        "/auth/login", json={"email": account.email, "password": "not-it"}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_suspended_login_refused_with_reason(members_client, db_session):
    account = AccountFactory.suspended(reason="Spam listings")
    db_session.add(account)
    await db_session.commit()

    response = await members_client.post(
        "/auth/login", json={"email": account.email, "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 403
    body = response.json()
    assert body["code"] == "ACCOUNT_SUSPENDED"
    assert body["detail"] == "Account suspended. Reason: Spam listings"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_me_reports_suspension(members_client, db_session):
    """A suspended session can still read its account to explain the block."""
    account = AccountFactory.suspended(reason="Under review")
    db_session.add(account)
    await db_session.commit()

    response = await members_client.get("/auth/me", headers=bearer(account))

    assert response.status_code == 200
    assert response.json()["is_suspended"] is True
    assert response.json()["suspension_reason"] == "Under review"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_me_requires_token(members_client, db_session):
    response = await members_client.get("/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_password_reset_flow(members_client, db_session):
    account = AccountFactory.create()
    db_session.add(account)
    await db_session.commit()

    unknown = await members_client.post(
        "/auth/forgot-password", json={"email": "nobody@test.com"}
    )
    known = await members_client.post(
        "/auth/forgot-password", json={"email": account.email}
    )
    assert unknown.status_code == known.status_code == 200
    assert unknown.json() == known.json()

    result = await db_session.execute(
        select(PasswordResetToken).where(PasswordResetToken.account_id == account.id)
    )
    token = result.scalar_one().token

    response = await members_client.post(
        "/auth/reset-password", json={"token": token, "password": "brand-new-pass"}
    )
    assert response.status_code == 200

    login = await members_client.post(
        "/auth/login", json={"email": account.email, "password": "brand-new-pass"}
    )
    assert login.status_code == 200

    reused = await members_client.post(
        "/auth/reset-password", json={"token": token, "password": "another-pass"}
    )
    assert reused.status_code == 400
