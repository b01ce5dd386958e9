"""
Tests for user management endpoints.

Uses the test client fixture from conftest.py which runs with DEV_SKIP_AUTH=true.
The default user is admin_user (PUPR_ADMIN role).
"""
import pytest

from elacak.core.security import verify_password
from elacak.models import User


@pytest.mark.asyncio
async def test_get_me(client, admin_user):
    resp = await client.get("/api/v1/users/me")
    assert resp.status_code == 200
    data = resp.json()
    assert data["email"] == admin_user.email
    assert data["role"] == "PUPR_ADMIN"


@pytest.mark.asyncio
async def test_create_district_operator(client, district, db_session):
    payload = {
        "username": "op_bdl",
        "email": "op.bdl@test.local",
        "password": "rahasia123",
        "role": "DISTRICT_OPERATOR",
        "district_id": district.id,
    }
    resp = await client.post("/api/v1/users", json=payload)
    assert resp.status_code == 201
    data = resp.json()
    assert data["role"] == "DISTRICT_OPERATOR"
    assert data["district_id"] == district.id
    assert data["is_active"] is True

    user = await db_session.get(User, data["id"])
    assert user.password_hash != "rahasia123"
    assert verify_password("rahasia123", user.password_hash)


@pytest.mark.asyncio
async def test_create_user_duplicate_username(client, admin_user):
    payload = {
        "username": admin_user.username,
        "email": "another@test.local",
        "password": "rahasia123",
        "role": "PUBLIC",
    }
    resp = await client.post("/api/v1/users", json=payload)
    assert resp.status_code == 409
    assert resp.json()["code"] == "conflict"


@pytest.mark.asyncio
async def test_create_user_duplicate_email(client, admin_user):
    payload = {
        "username": "someone",
        "email": admin_user.email,
        "password": "rahasia123",
        "role": "PUBLIC",
    }
    resp = await client.post("/api/v1/users", json=payload)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_district_operator_requires_district(client):
    payload = {
        "username": "op_none",
        "email": "op.none@test.local",
        "password": "rahasia123",
        "role": "DISTRICT_OPERATOR",
    }
    resp = await client.post("/api/v1/users", json=payload)
    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_village_operator_scope_must_match(client, district, other_village):
    payload = {
        "username": "op_mismatch",
        "email": "op.mismatch@test.local",
        "password": "rahasia123",
        "role": "VILLAGE_OPERATOR",
        "district_id": district.id,
        "village_id": other_village.id,
    }
    resp = await client.post("/api/v1/users", json=payload)
    assert resp.status_code == 422
    assert resp.json()["code"] == "village_mismatch"


@pytest.mark.asyncio
async def test_list_users_admin(client, admin_user, public_user):
    resp = await client.get("/api/v1/users")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert data["pages"] == 1
    assert [u["username"] for u in data["items"]] == ["admin", "citizen"]


@pytest.mark.asyncio
async def test_list_users_operator_forbidden(client, district_operator):
    resp = await client.get(
        "/api/v1/users",
        headers={"X-Dev-User-ID": str(district_operator.id)},
    )
    assert resp.status_code == 403
    assert resp.json()["code"] == "forbidden"


@pytest.mark.asyncio
async def test_get_user_not_found(client):
    resp = await client.get("/api/v1/users/9999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_deactivate_user(client, public_user):
    resp = await client.put(f"/api/v1/users/{public_user.id}", json={"is_active": False})
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False

    resp = await client.get("/api/v1/users/me", headers={"X-Dev-User-ID": str(public_user.id)})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_promote_to_village_operator_validates_scope(client, public_user, village):
    resp = await client.put(
        f"/api/v1/users/{public_user.id}", json={"role": "VILLAGE_OPERATOR"}
    )
    assert resp.status_code == 422

    resp = await client.put(
        f"/api/v1/users/{public_user.id}",
        json={
            "role": "VILLAGE_OPERATOR",
            "district_id": village.district_id,
            "village_id": village.id,
        },
    )
    assert resp.status_code == 200
    assert resp.json()["village_id"] == village.id
