"""Admin-initiated account creation and the forced password change gate."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from societydesk.models.account import Account
from societydesk.services import credentials


async def _bootstrap(client: AsyncClient, slug: str) -> dict:
    resp = await client.post("/v1/societies", json={
        "society_name": f"{slug} Society",
        "society_slug": slug,
        "admin_email": f"admin@{slug}.in",
        "admin_password": "adminpass1",
    })
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


async def _login(client: AsyncClient, email: str, password: str) -> dict:
    resp = await client.post("/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


async def _member(client: AsyncClient, admin_headers: dict, phone: str, role: str) -> dict:
    """Create an account, log in with the default password, change it. Returns headers."""
    resp = await client.post("/v1/admin/create-user", json={
        "fullName": f"Member {phone}",
        "phone": phone,
        "role": role,
        "isActive": True,
    }, headers=admin_headers)
    assert resp.status_code == 201, resp.text
    data = await _login(client, resp.json()["email"], phone)
    headers = {"Authorization": f"Bearer {data['access_token']}"}
    resp = await client.post("/v1/change-password", json={"newPassword": "changed123"}, headers=headers)
    assert resp.status_code == 200
    return headers


@pytest.mark.asyncio
async def test_phone_only_account_end_to_end(client: AsyncClient):
    """No email → placeholder email, phone as password, forced change on first login."""
    headers = await _bootstrap(client, "e2e")

    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "Suresh Patel",
        "phone": "9876543210",
        "role": "resident",
        "isActive": True,
    }, headers=headers)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["success"] is True
    assert data["email"] == "9876543210@society.local"
    assert data["temporary_password"] == "9876543210"
    assert data["warnings"] == []

    login = await _login(client, "9876543210@society.local", "9876543210")
    assert login["account"]["must_change_password"] is True
    assert login["account"]["full_name"] == "Suresh Patel"
    assert login["account"]["role"] == "resident"


@pytest.mark.asyncio
async def test_forced_change_blocks_everything_but_change_password(client: AsyncClient):
    headers = await _bootstrap(client, "gate")
    await client.post("/v1/admin/create-user", json={
        "fullName": "Gated", "phone": "9000011111", "role": "resident",
    }, headers=headers)
    login = await _login(client, "9000011111@society.local", "9000011111")
    member_headers = {"Authorization": f"Bearer {login['access_token']}"}

    for path in ("/v1/users", "/v1/units", "/v1/auth/me", "/v1/societies/me"):
        resp = await client.get(path, headers=member_headers)
        assert resp.status_code == 403, path
        assert resp.json()["code"] == "password_change_required"

    resp = await client.post("/v1/change-password", json={"newPassword": "brandnew1"}, headers=member_headers)
    assert resp.status_code == 200

    resp = await client.get("/v1/users", headers=member_headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_explicit_email_and_fields_persisted(client: AsyncClient):
    headers = await _bootstrap(client, "explicit")

    resp = await client.post("/v1/admin/create-user", json={
        "full_name": "Guard One",
        "email": "Guard.One@Example.com",
        "phone": "9000022222",
        "role": "security",
        "is_active": False,
    }, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["email"] == "guard.one@example.com"

    resp = await client.get("/v1/users", headers=headers)
    guard = [u for u in resp.json() if u["email"] == "guard.one@example.com"][0]
    assert guard["role"] == "security"
    assert guard["is_active"] is False
    assert guard["must_change_password"] is True
    assert guard["phone"] == "9000022222"


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["administration", "resident", "security", "other"])
async def test_non_admin_roles_cannot_create(client: AsyncClient, session, role: str):
    headers = await _bootstrap(client, f"perm-{role}")
    member_headers = await _member(client, headers, "9000033333", role)

    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "Should Not Exist",
        "phone": "9000044444",
        "role": "resident",
    }, headers=member_headers)
    assert resp.status_code == 403
    assert resp.json()["code"] == "forbidden"

    result = await session.execute(
        select(Account).where(Account.email == "9000044444@society.local")
    )
    assert result.scalar_one_or_none() is None


@pytest.mark.asyncio
async def test_management_can_create(client: AsyncClient):
    headers = await _bootstrap(client, "mgmt")
    mgmt_headers = await _member(client, headers, "9000055555", "management")

    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "New Resident", "phone": "9000066666", "role": "resident",
    }, headers=mgmt_headers)
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_unauthenticated_create_rejected(client: AsyncClient):
    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "Anon", "phone": "9000077777", "role": "resident",
    })
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_duplicate_email_rejected(client: AsyncClient):
    headers = await _bootstrap(client, "dup")
    body = {"fullName": "Twin", "phone": "9000088888", "role": "resident"}

    resp = await client.post("/v1/admin/create-user", json=body, headers=headers)
    assert resp.status_code == 201

    resp = await client.post("/v1/admin/create-user", json=body, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "email_taken"


@pytest.mark.asyncio
async def test_missing_phone_rejected(client: AsyncClient):
    headers = await _bootstrap(client, "nophone")
    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "No Phone", "role": "resident",
    }, headers=headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_invalid_role_rejected(client: AsyncClient):
    headers = await _bootstrap(client, "badrole")
    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "Bad Role", "phone": "9000099999", "role": "superuser",
    }, headers=headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_unit_assigned_on_create(client: AsyncClient):
    headers = await _bootstrap(client, "unit-ok")
    resp = await client.post("/v1/units", json={"unitNumber": "A-101", "blockName": "A"}, headers=headers)
    assert resp.status_code == 201
    unit_id = resp.json()["id"]

    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "Owner", "phone": "9111111111", "role": "resident", "unitId": unit_id,
    }, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["warnings"] == []
    account_id = resp.json()["account_id"]

    resp = await client.get("/v1/units", headers=headers)
    unit = [u for u in resp.json() if u["id"] == unit_id][0]
    assert unit["owner_id"] == account_id

    resp = await client.get("/v1/users", headers=headers)
    owner = [u for u in resp.json() if u["id"] == account_id][0]
    assert owner["unit_id"] == unit_id


@pytest.mark.asyncio
async def test_unit_assigned_by_number(client: AsyncClient):
    headers = await _bootstrap(client, "unit-num")
    resp = await client.post("/v1/units", json={"unitNumber": "B-202"}, headers=headers)
    unit_id = resp.json()["id"]

    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "Owner", "phone": "9222222222", "role": "resident", "unitNumber": "B-202",
    }, headers=headers)
    assert resp.status_code == 201
    account_id = resp.json()["account_id"]

    resp = await client.get("/v1/units", headers=headers)
    unit = [u for u in resp.json() if u["id"] == unit_id][0]
    assert unit["owner_id"] == account_id


@pytest.mark.asyncio
async def test_unknown_unit_is_a_warning(client: AsyncClient):
    """A failed unit assignment does not undo account creation."""
    headers = await _bootstrap(client, "unit-missing")

    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "Homeless", "phone": "9333333333", "role": "resident", "unitNumber": "Z-999",
    }, headers=headers)
    assert resp.status_code == 201
    data = resp.json()
    assert len(data["warnings"]) == 1
    assert "Z-999" in data["warnings"][0]

    await _login(client, "9333333333@society.local", "9333333333")


@pytest.mark.asyncio
async def test_profile_failure_reports_live_account(client: AsyncClient):
    """Credential created but profile write failed: 500 that names the account."""
    headers = await _bootstrap(client, "profile-fail")

    with patch(
        "societydesk.services.accounts._apply_profile",
        AsyncMock(side_effect=SQLAlchemyError("disk I/O error")),
    ):
        resp = await client.post("/v1/admin/create-user", json={
            "fullName": "Half Made", "phone": "9444444444", "role": "security",
        }, headers=headers)

    assert resp.status_code == 500
    data = resp.json()
    assert data["code"] == "profile_update_error"
    assert "User created but profile update failed" in data["detail"]
    assert data["account_id"]

    # The account is live but still gated on its default credential
    login = await _login(client, "9444444444@society.local", "9444444444")
    assert login["account"]["id"] == data["account_id"]
    assert login["account"]["role"] == "resident"
    assert login["account"]["must_change_password"] is True

    member_headers = {"Authorization": f"Bearer {login['access_token']}"}
    resp = await client.get("/v1/users", headers=member_headers)
    assert resp.status_code == 403
    assert resp.json()["code"] == "password_change_required"


@pytest.mark.asyncio
async def test_profile_failure_keeps_requested_inactive_state(client: AsyncClient):
    headers = await _bootstrap(client, "profile-inactive")

    with patch(
        "societydesk.services.accounts._apply_profile",
        AsyncMock(side_effect=SQLAlchemyError("disk I/O error")),
    ):
        resp = await client.post("/v1/admin/create-user", json={
            "fullName": "Dormant", "phone": "9444455555", "role": "security", "isActive": False,
        }, headers=headers)
    assert resp.status_code == 500

    resp = await client.post("/v1/auth/login", json={
        "email": "9444455555@society.local", "password": "9444455555",
    })
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_random_default_credential(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(credentials.settings, "default_credential_strategy", "random")
    headers = await _bootstrap(client, "random-pw")

    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "Random", "phone": "9555555555", "role": "resident",
    }, headers=headers)
    assert resp.status_code == 201
    temp = resp.json()["temporary_password"]
    assert temp != "9555555555"

    login = await _login(client, "9555555555@society.local", temp)
    assert login["account"]["must_change_password"] is True

    resp = await client.post("/v1/auth/login", json={
        "email": "9555555555@society.local", "password": "9555555555",
    })
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_blank_email_uses_placeholder(client: AsyncClient):
    headers = await _bootstrap(client, "blank-email")
    resp = await client.post("/v1/admin/create-user", json={
        "fullName": "Blank", "email": "", "phone": "9666666666", "role": "other",
    }, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["email"] == "9666666666@society.local"
