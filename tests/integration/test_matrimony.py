"""Integration tests for matrimony_service profiles, listings and moderation."""

from datetime import datetime, timedelta, timezone

import pytest

from libs.auth.security import _service_role_jwt
from services.matrimony_service.models import MatrimonyProfile
from services.matrimony_service.tasks import purge_scheduled_profiles
from tests.factories import (
    AccountFactory,
    MatrimonyProfileFactory,
    bearer,
    profile_payload,
)

# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_member_profile_is_active_immediately(matrimony_client, db_session):
    member = AccountFactory.member()
    db_session.add(member)
    await db_session.commit()

    response = await matrimony_client.post(
        "/matrimony/profiles", json=profile_payload(), headers=bearer(member)
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["owner_id"] == str(member.id)
    assert data["lifecycle_state"] == "active"
    assert data["payment_required"] is False
    assert data["is_paid"] is True
    assert data["is_listed"] is True
    assert data["photos"][0]["is_primary"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_non_member_profile_waits_for_payment(matrimony_client, db_session):
    account = AccountFactory.create()
    db_session.add(account)
    await db_session.commit()

    response = await matrimony_client.post(
        "/matrimony/profiles", json=profile_payload(), headers=bearer(account)
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["lifecycle_state"] == "pending_payment"
    assert data["payment_required"] is True
    assert data["is_paid"] is False
    assert data["is_listed"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_submission_cannot_set_payment_flags(matrimony_client, db_session):
    account = AccountFactory.create()
    db_session.add(account)
    await db_session.commit()

    response = await matrimony_client.post(
        "/matrimony/profiles",
        json=profile_payload(is_paid=True, payment_required=False),
        headers=bearer(account),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "overrides",
    [
        {"photos": []},
        {"photos": [{"url": f"https://img/{n}.jpg", "public_id": f"p{n}"} for n in range(6)]},
        {
            "photos": [
                {"url": "https://img/1.jpg", "public_id": "p1", "is_primary": True},
                {"url": "https://img/2.jpg", "public_id": "p2", "is_primary": True},
            ]
        },
        {"date_of_birth": (datetime.now(timezone.utc) - timedelta(days=365 * 17)).date().isoformat()},
        {"phone": "12345"},
    ],
    ids=["no-photo", "six-photos", "two-primaries", "under-age", "bad-phone"],
)
async def test_submission_validation(matrimony_client, db_session, overrides):
    member = AccountFactory.member()
    db_session.add(member)
    await db_session.commit()

    response = await matrimony_client.post(
        "/matrimony/profiles", json=profile_payload(**overrides), headers=bearer(member)
    )
    assert response.status_code == 422, response.text


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unapproved_account_cannot_submit(matrimony_client, db_session):
    account = AccountFactory.pending()
    db_session.add(account)
    await db_session.commit()

    response = await matrimony_client.post(
        "/matrimony/profiles", json=profile_payload(), headers=bearer(account)
    )

    assert response.status_code == 403
    assert response.json()["code"] == "APPROVAL_PENDING"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_suspended_account_cannot_submit(matrimony_client, db_session):
    account = AccountFactory.suspended(is_member=True)
    db_session.add(account)
    await db_session.commit()

    response = await matrimony_client.post(
        "/matrimony/profiles", json=profile_payload(), headers=bearer(account)
    )

    assert response.status_code == 403
    assert response.json()["code"] == "ACCOUNT_SUSPENDED"


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_listing_shows_only_listed_profiles(matrimony_client, db_session):
    member = AccountFactory.member()
    listed = MatrimonyProfileFactory.create()
    free = MatrimonyProfileFactory.create(payment_required=False, is_paid=False)
    unpaid = MatrimonyProfileFactory.pending_payment()
    hidden = MatrimonyProfileFactory.create(is_hidden=True)
    completed = MatrimonyProfileFactory.completed(days_ago=1)
    db_session.add_all([member, listed, free, unpaid, hidden, completed])
    await db_session.commit()

    response = await matrimony_client.get("/matrimony/profiles", headers=bearer(member))

    assert response.status_code == 200, response.text
    ids = {item["id"] for item in response.json()["items"]}
    assert ids == {str(listed.id), str(free.id)}
    assert response.json()["total"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_listing_filters(matrimony_client, db_session):
    member = AccountFactory.member()
    young = MatrimonyProfileFactory.create(age=25, gender="female", diet="vegetarian")
    older = MatrimonyProfileFactory.create(age=35, gender="male")
    db_session.add_all([member, young, older])
    await db_session.commit()

    by_gender = await matrimony_client.get(
        "/matrimony/profiles", params={"gender": "female"}, headers=bearer(member)
    )
    by_age = await matrimony_client.get(
        "/matrimony/profiles", params={"min_age": 30, "max_age": 40}, headers=bearer(member)
    )

    assert [p["id"] for p in by_gender.json()["items"]] == [str(young.id)]
    assert [p["id"] for p in by_age.json()["items"]] == [str(older.id)]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_non_member_without_paid_profile_cannot_browse(matrimony_client, db_session):
    account = AccountFactory.create()
    db_session.add(account)
    await db_session.commit()

    response = await matrimony_client.get("/matrimony/profiles", headers=bearer(account))

    assert response.status_code == 403
    assert response.json()["code"] == "LISTING_ACCESS_REQUIRED"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_paid_profile_owner_can_browse(matrimony_client, db_session):
    account = AccountFactory.create()
    own = MatrimonyProfileFactory.create(
        owner_id=account.id, payment_required=True, is_paid=True
    )
    db_session.add_all([account, own])
    await db_session.commit()

    response = await matrimony_client.get("/matrimony/profiles", headers=bearer(account))

    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_viewing_listed_profile_counts_views(matrimony_client, db_session):
    member = AccountFactory.member()
    profile = MatrimonyProfileFactory.create()
    db_session.add_all([member, profile])
    await db_session.commit()

    response = await matrimony_client.get(
        f"/matrimony/profiles/{profile.id}", headers=bearer(member)
    )

    assert response.status_code == 200
    assert response.json()["view_count"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unlisted_profile_hidden_from_others_but_not_owner(matrimony_client, db_session):
    owner = AccountFactory.create()
    member = AccountFactory.member()
    profile = MatrimonyProfileFactory.pending_payment(owner_id=owner.id)
    db_session.add_all([owner, member, profile])
    await db_session.commit()

    as_member = await matrimony_client.get(
        f"/matrimony/profiles/{profile.id}", headers=bearer(member)
    )
    as_owner = await matrimony_client.get(
        f"/matrimony/profiles/{profile.id}", headers=bearer(owner)
    )

    assert as_member.status_code == 404
    assert as_owner.status_code == 200
    assert as_owner.json()["lifecycle_state"] == "pending_payment"
    assert as_owner.json()["view_count"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_profiles_lists_every_state(matrimony_client, db_session):
    owner = AccountFactory.create()
    pending = MatrimonyProfileFactory.pending_payment(owner_id=owner.id)
    hidden = MatrimonyProfileFactory.create(owner_id=owner.id, is_hidden=True)
    someone_elses = MatrimonyProfileFactory.create()
    db_session.add_all([owner, pending, hidden, someone_elses])
    await db_session.commit()

    response = await matrimony_client.get("/matrimony/profiles/mine", headers=bearer(owner))

    assert response.status_code == 200
    assert {p["id"] for p in response.json()} == {str(pending.id), str(hidden.id)}


# ---------------------------------------------------------------------------
# Owner actions
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_edit_keeps_payment_flags(matrimony_client, db_session):
    owner = AccountFactory.create()
    profile = MatrimonyProfileFactory.pending_payment(owner_id=owner.id)
    db_session.add_all([owner, profile])
    await db_session.commit()

    response = await matrimony_client.patch(
        f"/matrimony/profiles/{profile.id}",
        json={"city": "Udaipur", "about_me": "Updated bio"},
        headers=bearer(owner),
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["city"] == "Udaipur"
    assert data["payment_required"] is True
    assert data["is_paid"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_edit_rejects_payment_fields(matrimony_client, db_session):
    owner = AccountFactory.create()
    profile = MatrimonyProfileFactory.pending_payment(owner_id=owner.id)
    db_session.add_all([owner, profile])
    await db_session.commit()

    response = await matrimony_client.patch(
        f"/matrimony/profiles/{profile.id}",
        json={"is_paid": True},
        headers=bearer(owner),
    )

    assert response.status_code == 422
    assert profile.is_paid is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_edit_by_non_owner_is_not_found(matrimony_client, db_session):
    owner = AccountFactory.member()
    intruder = AccountFactory.member()
    profile = MatrimonyProfileFactory.create(owner_id=owner.id)
    db_session.add_all([owner, intruder, profile])
    await db_session.commit()

    response = await matrimony_client.patch(
        f"/matrimony/profiles/{profile.id}",
        json={"city": "Udaipur"},
        headers=bearer(intruder),
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_toggle_hidden_twice_restores_visibility(matrimony_client, db_session):
    owner = AccountFactory.member()
    profile = MatrimonyProfileFactory.create(owner_id=owner.id)
    db_session.add_all([owner, profile])
    await db_session.commit()

    first = await matrimony_client.post(
        f"/matrimony/profiles/{profile.id}/toggle-hidden", headers=bearer(owner)
    )
    second = await matrimony_client.post(
        f"/matrimony/profiles/{profile.id}/toggle-hidden", headers=bearer(owner)
    )

    assert first.status_code == second.status_code == 200
    assert first.json()["is_hidden"] is True
    assert first.json()["lifecycle_state"] == "hidden"
    assert second.json()["is_hidden"] is False
    assert second.json()["lifecycle_state"] == "active"
    assert second.json()["is_listed"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pending_profile_cannot_be_hidden(matrimony_client, db_session):
    owner = AccountFactory.create()
    profile = MatrimonyProfileFactory.pending_payment(owner_id=owner.id)
    db_session.add_all([owner, profile])
    await db_session.commit()

    response = await matrimony_client.post(
        f"/matrimony/profiles/{profile.id}/toggle-hidden", headers=bearer(owner)
    )

    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_TRANSITION"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_owner_delete_removes_photos(matrimony_client, db_session, destroyed_images):
    owner = AccountFactory.member()
    profile = MatrimonyProfileFactory.create(owner_id=owner.id)
    db_session.add_all([owner, profile])
    await db_session.commit()
    photo_id = profile.photos[0]["public_id"]

    response = await matrimony_client.delete(
        f"/matrimony/profiles/{profile.id}", headers=bearer(owner)
    )

    assert response.status_code == 200
    assert destroyed_images == [photo_id]
    assert await db_session.get(MatrimonyProfile, profile.id) is None


# ---------------------------------------------------------------------------
# Admin moderation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_mark_completed_hides_and_schedules_deletion(matrimony_client, db_session):
    admin = AccountFactory.admin()
    member = AccountFactory.member()
    profile = MatrimonyProfileFactory.create()
    db_session.add_all([admin, member, profile])
    await db_session.commit()

    response = await matrimony_client.post(
        f"/admin/matrimonies/{profile.id}/mark-completed", headers=bearer(admin)
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["is_hidden"] is True
    assert data["is_completed"] is True
    assert data["lifecycle_state"] == "scheduled_for_deletion"
    scheduled = datetime.fromisoformat(data["scheduled_deletion"])
    if scheduled.tzinfo is None:
        scheduled = scheduled.replace(tzinfo=timezone.utc)
    assert scheduled > datetime.now(timezone.utc) + timedelta(days=13)

    listing = await matrimony_client.get("/matrimony/profiles", headers=bearer(member))
    assert str(profile.id) not in {p["id"] for p in listing.json()["items"]}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_mark_completed_requires_admin(matrimony_client, db_session):
    member = AccountFactory.member()
    profile = MatrimonyProfileFactory.create()
    db_session.add_all([member, profile])
    await db_session.commit()

    response = await matrimony_client.post(
        f"/admin/matrimonies/{profile.id}/mark-completed", headers=bearer(member)
    )

    assert response.status_code == 403
    assert response.json()["code"] == "ADMIN_REQUIRED"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_lists_every_profile(matrimony_client, db_session):
    admin = AccountFactory.admin()
    profiles = [
        MatrimonyProfileFactory.create(),
        MatrimonyProfileFactory.pending_payment(),
        MatrimonyProfileFactory.create(is_hidden=True),
    ]
    db_session.add_all([admin, *profiles])
    await db_session.commit()

    everything = await matrimony_client.get("/admin/matrimonies", headers=bearer(admin))
    unpaid = await matrimony_client.get(
        "/admin/matrimonies", params={"is_paid": "false"}, headers=bearer(admin)
    )

    assert everything.json()["total"] == 3
    assert [p["id"] for p in unpaid.json()["items"]] == [str(profiles[1].id)]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_delete(matrimony_client, db_session, destroyed_images):
    admin = AccountFactory.admin()
    profile = MatrimonyProfileFactory.create()
    db_session.add_all([admin, profile])
    await db_session.commit()

    response = await matrimony_client.delete(
        f"/admin/matrimonies/{profile.id}", headers=bearer(admin)
    )

    assert response.status_code == 200
    assert len(destroyed_images) == 1


# ---------------------------------------------------------------------------
# Internal + cleanup
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_internal_mark_paid_is_idempotent(matrimony_client, db_session):
    profile = MatrimonyProfileFactory.pending_payment()
    db_session.add(profile)
    await db_session.commit()
    headers = {"Authorization": f"Bearer {_service_role_jwt('payments')}"}
    payment = {"order_id": "order_1", "payment_id": "pay_1", "amount": 40000}

    first = await matrimony_client.post(
        f"/internal/profiles/{profile.id}/paid", json=payment, headers=headers
    )
    second = await matrimony_client.post(
        f"/internal/profiles/{profile.id}/paid",
        json={**payment, "payment_id": "pay_2"},
        headers=headers,
    )

    assert first.status_code == second.status_code == 200
    assert second.json()["lifecycle_state"] == "active"
    assert profile.payment_id == "pay_1"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_purge_deletes_only_due_profiles(db_session, destroyed_images):
    due = MatrimonyProfileFactory.completed(days_ago=15)
    not_yet = MatrimonyProfileFactory.completed(days_ago=1)
    active = MatrimonyProfileFactory.create()
    db_session.add_all([due, not_yet, active])
    await db_session.commit()
    due_photo = due.photos[0]["public_id"]

    deleted = await purge_scheduled_profiles(db_session)

    assert deleted == 1
    assert destroyed_images == [due_photo]
    assert await db_session.get(MatrimonyProfile, due.id) is None
    assert await db_session.get(MatrimonyProfile, not_yet.id) is not None
    assert await db_session.get(MatrimonyProfile, active.id) is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_purge_with_nothing_due(db_session):
    db_session.add(MatrimonyProfileFactory.create())
    await db_session.commit()

    assert await purge_scheduled_profiles(db_session) == 0
