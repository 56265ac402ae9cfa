"""Tests for grant management and the bootstrap administrator."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select

from conftest import bearer
from gradarchive.config import settings
from gradarchive.db.models import DocType, Permission, PermissionType, User
from gradarchive.services.user_service import ensure_default_admin


@pytest.mark.asyncio
class TestPermissionsAPI:
    async def test_grant_then_use_it(self, client, admin_headers, seed):
        user = await seed.user()
        denied = await client.post("/colleges", json={"name": "Law"}, headers=bearer(user.username))
        assert denied.status_code == 403

        resp = await client.post(
            "/permissions",
            json={"userId": user.id, "docType": "COLLEGE", "permissionType": "CREATE"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["permission"]["userId"] == user.id

        allowed = await client.post("/colleges", json={"name": "Law"}, headers=bearer(user.username))
        assert allowed.status_code == 201

    async def test_bulk_create(self, client, admin_headers, seed):
        user = await seed.user()
        resp = await client.post(
            "/permissions/many",
            json=[
                {"userId": user.id, "docType": "PROJECT", "permissionType": "READ"},
                {"userId": user.id, "docType": "PROJECT", "permissionType": "UPDATE"},
            ],
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert len(resp.json()["permissions"]) == 2

    async def test_bulk_with_unknown_user_creates_nothing(self, client, admin_headers, seed):
        user = await seed.user()
        before = await seed.count(Permission)
        resp = await client.post(
            "/permissions/many",
            json=[
                {"userId": user.id, "docType": "PROJECT", "permissionType": "READ"},
                {"userId": str(uuid.uuid4()), "docType": "PROJECT", "permissionType": "READ"},
            ],
            headers=admin_headers,
        )
        assert resp.status_code == 404
        assert await seed.count(Permission) == before

    async def test_unknown_doc_type_is_422(self, client, admin_headers, seed):
        user = await seed.user()
        resp = await client.post(
            "/permissions",
            json={"userId": user.id, "docType": "BUILDING", "permissionType": "READ"},
            headers=admin_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["errors"][0]["path"] == "body.docType"

    async def test_reads_are_guarded_too(self, client, seed):
        user = await seed.user(grants=[(DocType.USER, PermissionType.READ)])
        resp = await client.get("/permissions", headers=bearer(user.username))
        assert resp.status_code == 403

    async def test_revoking_removes_access(self, client, admin_headers, seed):
        user = await seed.user(grants=[(DocType.COLLEGE, PermissionType.CREATE)])
        grants = await client.get(f"/users/{user.id}/permissions", headers=admin_headers)
        grant_id = grants.json()["permissions"][0]["id"]

        deleted = await client.delete(f"/permissions/{grant_id}", headers=admin_headers)
        assert deleted.status_code == 200
        resp = await client.post("/colleges", json={"name": "Law"}, headers=bearer(user.username))
        assert resp.status_code == 403

    async def test_update_changes_grant(self, client, admin_headers, seed):
        user = await seed.user(grants=[(DocType.COLLEGE, PermissionType.READ)])
        grants = await client.get(f"/users/{user.id}/permissions", headers=admin_headers)
        grant_id = grants.json()["permissions"][0]["id"]
        resp = await client.put(
            f"/permissions/{grant_id}",
            json={"userId": user.id, "docType": "COLLEGE", "permissionType": "CREATE"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["permission"]["permissionType"] == "CREATE"

        fetched = await client.get(f"/permissions/{grant_id}", headers=admin_headers)
        assert fetched.json()["permission"]["permissionType"] == "CREATE"


@pytest.mark.asyncio
class TestDefaultAdmin:
    async def test_seeds_every_grant_once(self, db):
        admin = await ensure_default_admin(db)
        assert admin is not None
        assert admin.username == settings.ADMIN_USERNAME
        total = len(DocType) * len(PermissionType)
        count = await db.execute(
            select(func.count()).select_from(Permission).where(Permission.user_id == admin.id)
        )
        assert count.scalar_one() == total == 28

        assert await ensure_default_admin(db) is None
        users = await db.execute(select(func.count()).select_from(User))
        assert users.scalar_one() == 1
