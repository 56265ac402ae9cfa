"""Tests for the colleges and departments endpoints."""

from __future__ import annotations

import uuid

import pytest

from gradarchive.db.models import College, Department
from gradarchive.errors import ConflictError
from gradarchive.services import college_service


async def _never_exists(db, *criteria):
    return False


@pytest.mark.asyncio
class TestCollegesAPI:
    async def test_create_then_conflict(self, client, admin_headers, seed):
        first = await client.post("/colleges", json={"name": "Law"}, headers=admin_headers)
        assert first.status_code == 201
        body = first.json()
        assert body["success"] is True
        assert body["college"]["name"] == "Law"
        uuid.UUID(body["college"]["id"])

        again = await client.post("/colleges", json={"name": "Law"}, headers=admin_headers)
        assert again.status_code == 409
        assert again.json() == {
            "message": 'A college with the name "Law" already exists',
            "status": 409,
        }
        assert await seed.count(College) == 1

    async def test_create_losing_unique_race_conflicts(self, client, admin_headers, seed, monkeypatch):
        # A concurrent create passed the existence check first; the constraint decides.
        monkeypatch.setattr("gradarchive.services.college_service.row_exists", _never_exists)
        await seed.college("Law")
        resp = await client.post("/colleges", json={"name": "Law"}, headers=admin_headers)
        assert resp.status_code == 409
        assert resp.json() == {
            "message": 'A college with the name "Law" already exists',
            "status": 409,
        }
        assert await seed.count(College) == 1

    async def test_rename_losing_unique_race_conflicts(self, db, seed, monkeypatch):
        monkeypatch.setattr("gradarchive.services.college_service.row_exists", _never_exists)
        await seed.college("Law")
        other = await seed.college("Medicine")
        with pytest.raises(ConflictError, match="already exists"):
            await college_service.update_college(db, other.id, "Law")

    async def test_round_trip_and_delete(self, client, admin_headers):
        created = await client.post("/colleges", json={"name": "Engineering"}, headers=admin_headers)
        college_id = created.json()["college"]["id"]

        fetched = await client.get(f"/colleges/{college_id}")
        assert fetched.status_code == 200
        assert fetched.json()["college"]["name"] == "Engineering"
        assert fetched.json()["college"]["departments"] == []

        deleted = await client.delete(f"/colleges/{college_id}", headers=admin_headers)
        assert deleted.status_code == 200
        assert deleted.json()["college"]["id"] == college_id

        gone = await client.get(f"/colleges/{college_id}")
        assert gone.status_code == 404
        assert gone.json()["status"] == 404

    async def test_list_is_public_and_includes_departments(self, client, seed):
        college = await seed.college("Science")
        await seed.department(college.id, "Physics")
        resp = await client.get("/colleges")
        assert resp.status_code == 200
        colleges = resp.json()["colleges"]
        assert [c["name"] for c in colleges] == ["Science"]
        assert colleges[0]["departments"][0]["name"] == "Physics"
        assert colleges[0]["departments"][0]["collegeId"] == college.id

    async def test_rename_to_taken_name_conflicts(self, client, admin_headers, seed):
        await seed.college("Arts")
        other = await seed.college("Medicine")
        resp = await client.put(f"/colleges/{other.id}", json={"name": "Arts"}, headers=admin_headers)
        assert resp.status_code == 409

    async def test_rename_keeping_own_name_is_fine(self, client, admin_headers, seed):
        college = await seed.college("Arts")
        resp = await client.put(f"/colleges/{college.id}", json={"name": "Arts"}, headers=admin_headers)
        assert resp.status_code == 200

    async def test_update_missing_college_is_404(self, client, admin_headers):
        resp = await client.put(f"/colleges/{uuid.uuid4()}", json={"name": "Arts"}, headers=admin_headers)
        assert resp.status_code == 404

    async def test_delete_with_departments_conflicts(self, client, admin_headers, seed):
        college = await seed.college()
        await seed.department(college.id)
        resp = await client.delete(f"/colleges/{college.id}", headers=admin_headers)
        assert resp.status_code == 409
        assert await seed.get(College, college.id) is not None

    async def test_get_with_malformed_id_is_422(self, client):
        resp = await client.get("/colleges/123")
        assert resp.status_code == 422
        assert resp.json()["errors"][0]["path"] == "path.college_id"


@pytest.mark.asyncio
class TestDepartmentsAPI:
    async def test_create_requires_existing_college(self, client, admin_headers):
        resp = await client.post(
            "/departments",
            json={"name": "History", "collegeId": str(uuid.uuid4())},
            headers=admin_headers,
        )
        assert resp.status_code == 404

    async def test_name_unique_within_college_only(self, client, admin_headers, seed):
        a = await seed.college()
        b = await seed.college()
        first = await client.post(
            "/departments", json={"name": "History", "collegeId": a.id}, headers=admin_headers
        )
        assert first.status_code == 201
        assert first.json()["department"]["college"]["id"] == a.id

        dup = await client.post(
            "/departments", json={"name": "History", "collegeId": a.id}, headers=admin_headers
        )
        assert dup.status_code == 409
        assert dup.json()["message"] == 'A department with the name "History" already exists'

        elsewhere = await client.post(
            "/departments", json={"name": "History", "collegeId": b.id}, headers=admin_headers
        )
        assert elsewhere.status_code == 201
        assert await seed.count(Department) == 2

    async def test_move_department_to_other_college(self, client, admin_headers, seed):
        a = await seed.college()
        b = await seed.college()
        dept = await seed.department(a.id, "Chemistry")
        resp = await client.put(
            f"/departments/{dept.id}",
            json={"name": "Chemistry", "collegeId": b.id},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["department"]["college"]["id"] == b.id

    async def test_delete_with_people_conflicts(self, client, admin_headers, seed):
        college = await seed.college()
        dept = await seed.department(college.id)
        await seed.supervisor(dept.id)
        resp = await client.delete(f"/departments/{dept.id}", headers=admin_headers)
        assert resp.status_code == 409

    async def test_delete_empty_department(self, client, admin_headers, seed):
        college = await seed.college()
        dept = await seed.department(college.id)
        resp = await client.delete(f"/departments/{dept.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert await seed.get(Department, dept.id) is None
