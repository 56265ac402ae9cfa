"""Tests for the gate pipeline: stage tracking, ordering and short-circuiting."""

from __future__ import annotations

import pytest
from sqlalchemy import delete
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from httpx import ASGITransport, AsyncClient

from conftest import bearer
from gradarchive.api.handlers import register_exception_handlers
from gradarchive.api.pipeline import (
    PipelineRoute,
    RequestPipeline,
    RequestStage,
    authenticated,
    public,
)
from gradarchive.auth import permissions
from gradarchive.auth.permissions import authorize
from gradarchive.auth.tokens import issue_token
from gradarchive.db.models import College, DocType, Permission, PermissionType, User
from gradarchive.errors import ForbiddenError, NotFoundError, UnauthorizedError


class TestRequestPipeline:
    def test_happy_path_history(self):
        p = RequestPipeline(method="POST", path="/colleges")
        p.advance(RequestStage.AUTHENTICATING)
        p.advance(RequestStage.AUTHORIZING)
        p.advance(RequestStage.VALIDATING)
        p.respond()
        assert p.history == [
            RequestStage.RECEIVED,
            RequestStage.AUTHENTICATING,
            RequestStage.AUTHORIZING,
            RequestStage.VALIDATING,
            RequestStage.EXECUTING,
            RequestStage.RESPONDED,
        ]
        assert p.finished

    def test_cannot_move_backwards(self):
        p = RequestPipeline(method="GET", path="/x")
        p.advance(RequestStage.VALIDATING)
        with pytest.raises(RuntimeError):
            p.advance(RequestStage.AUTHENTICATING)

    def test_gate_failure_rejects(self):
        p = RequestPipeline(method="GET", path="/x")
        p.advance(RequestStage.AUTHENTICATING)
        assert p.fail(UnauthorizedError()) is RequestStage.REJECTED
        assert p.failed_at is RequestStage.AUTHENTICATING

    def test_validation_failure_rejects(self):
        p = RequestPipeline(method="GET", path="/x")
        p.advance(RequestStage.VALIDATING)
        assert p.fail(RequestValidationError([])) is RequestStage.REJECTED
        assert p.failed_at is RequestStage.VALIDATING

    def test_business_failure_errors_from_executing(self):
        p = RequestPipeline(method="GET", path="/x")
        p.advance(RequestStage.VALIDATING)
        assert p.fail(NotFoundError()) is RequestStage.ERRORED
        assert p.failed_at is RequestStage.EXECUTING
        assert RequestStage.EXECUTING in p.history

    def test_terminal_state_is_final(self):
        p = RequestPipeline(method="GET", path="/x")
        p.advance(RequestStage.AUTHENTICATING)
        p.fail(UnauthorizedError())
        with pytest.raises(RuntimeError):
            p.advance(RequestStage.VALIDATING)
        assert p.fail(ValueError("again")) is RequestStage.REJECTED


# ── A tiny app to observe the stages from inside an endpoint ───


def _probe_app() -> FastAPI:
    probe = FastAPI()
    register_exception_handlers(probe)
    router = APIRouter(route_class=PipelineRoute)

    @router.get("/open", dependencies=[Depends(public())])
    async def open_endpoint(request: Request):
        return {"stages": [s.value for s in request.state.pipeline.history]}

    @router.get("/closed", dependencies=[Depends(authenticated())])
    async def closed_endpoint(request: Request):
        return {"stages": [s.value for s in request.state.pipeline.history]}

    probe.include_router(router)
    return probe


@pytest.mark.asyncio
class TestPipelineRoute:
    async def test_public_chain_goes_straight_to_validation(self):
        async with AsyncClient(transport=ASGITransport(app=_probe_app()), base_url="http://t") as c:
            resp = await c.get("/open")
        assert resp.status_code == 200
        assert resp.json()["stages"] == ["received", "validating"]
        assert resp.headers["X-Request-ID"]

    async def test_authenticated_chain(self):
        async with AsyncClient(transport=ASGITransport(app=_probe_app()), base_url="http://t") as c:
            resp = await c.get("/closed", headers=bearer("someone"))
            denied = await c.get("/closed")
        assert resp.json()["stages"] == ["received", "authenticating", "validating"]
        assert denied.status_code == 401
        assert denied.json() == {"message": "No token provided", "status": 401}


# ── Gates over the real routes ─────────────────────────────────


@pytest.mark.asyncio
class TestAuthenticationGate:
    async def test_missing_token_is_401_without_side_effect(self, client, seed):
        resp = await client.post("/colleges", json={"name": "Law"})
        assert resp.status_code == 401
        assert resp.json() == {"message": "No token provided", "status": 401}
        assert await seed.count(College) == 0

    async def test_non_bearer_scheme_counts_as_missing(self, client):
        resp = await client.post(
            "/colleges", json={"name": "Law"}, headers={"Authorization": "Basic abc"}
        )
        assert resp.json()["message"] == "No token provided"

    async def test_invalid_token(self, client):
        resp = await client.post(
            "/colleges", json={"name": "Law"}, headers={"Authorization": "Bearer nonsense"}
        )
        assert resp.status_code == 401
        assert resp.json() == {"message": "Invalid token", "status": 401}

    async def test_expired_token_rejected_even_with_grant(self, client, seed, admin):
        resp = await client.post("/colleges", json={"name": "Law"}, headers=bearer(admin.username, 0))
        assert resp.status_code == 401
        assert await seed.count(College) == 0

    async def test_gates_run_before_path_validation(self, client):
        resp = await client.delete("/colleges/not-a-uuid")
        assert resp.status_code == 401


@pytest.mark.asyncio
class TestAuthorizationGate:
    async def test_missing_grant_is_403_regardless_of_payload(self, client, seed):
        user = await seed.user(grants=[(DocType.COLLEGE, PermissionType.READ)])
        for payload in ({"name": "Law"}, {"name": 42}, {}):
            resp = await client.post("/colleges", json=payload, headers=bearer(user.username))
            assert resp.status_code == 403
            assert resp.json() == {"message": "You are not allowed to do that", "status": 403}
        assert await seed.count(College) == 0

    async def test_grant_for_other_doc_type_does_not_count(self, client, seed):
        user = await seed.user(grants=[(DocType.DEPARTMENT, PermissionType.CREATE)])
        resp = await client.post("/colleges", json={"name": "Law"}, headers=bearer(user.username))
        assert resp.status_code == 403

    async def test_unknown_user_is_forbidden(self, client):
        resp = await client.post("/colleges", json={"name": "Law"}, headers=bearer("ghost_user"))
        assert resp.status_code == 403

    async def test_inactive_user_is_forbidden(self, client, seed):
        user = await seed.user(grants=[(DocType.COLLEGE, PermissionType.CREATE)], is_active=False)
        resp = await client.post("/colleges", json={"name": "Law"}, headers=bearer(user.username))
        assert resp.status_code == 403

    async def test_duplicate_grants_are_harmless(self, client, seed):
        grant = (DocType.COLLEGE, PermissionType.CREATE)
        user = await seed.user(grants=[grant, grant])
        resp = await client.post("/colleges", json={"name": "Law"}, headers=bearer(user.username))
        assert resp.status_code == 201

    async def test_validation_runs_after_authorization(self, client, admin_headers):
        resp = await client.post("/colleges", json={"name": "x" * 36}, headers=admin_headers)
        assert resp.status_code == 422
        body = resp.json()
        assert body["message"] == "Invalid request data"
        assert body["status"] == 422
        assert body["errors"][0]["path"] == "body.name"

    async def test_bad_path_id_after_gates_is_422(self, client, admin_headers):
        resp = await client.delete("/colleges/not-a-uuid", headers=admin_headers)
        assert resp.status_code == 422
        assert resp.json()["errors"][0]["path"] == "path.college_id"


@pytest.mark.asyncio
class TestAuthorizeDirectly:
    async def test_decode_only_path_accepts_expired_token(self, db, admin):
        token = issue_token(admin.username, 0)
        user = await authorize(db, f"Bearer {token}", DocType.COLLEGE, PermissionType.CREATE)
        assert user.id == admin.id

    async def test_no_grant_raises_forbidden(self, db, seed):
        user = await seed.user()
        with pytest.raises(ForbiddenError):
            await authorize(
                db, f"Bearer {issue_token(user.username)}", DocType.USER, PermissionType.READ
            )

    async def test_missing_header_is_unauthorized(self, db):
        with pytest.raises(UnauthorizedError):
            await authorize(db, None, DocType.USER, PermissionType.READ)

    async def test_user_deleted_between_lookups_is_forbidden(self, db, seed, monkeypatch):
        user = await seed.user(grants=[(DocType.COLLEGE, PermissionType.CREATE)])
        real_has_grant = permissions.has_grant

        async def deleted_before_grant_lookup(session, user_id, doc_type, permission_type):
            await session.execute(delete(Permission).where(Permission.user_id == user_id))
            await session.execute(delete(User).where(User.id == user_id))
            return await real_has_grant(session, user_id, doc_type, permission_type)

        monkeypatch.setattr(permissions, "has_grant", deleted_before_grant_lookup)
        with pytest.raises(ForbiddenError):
            await authorize(
                db, f"Bearer {issue_token(user.username)}", DocType.COLLEGE, PermissionType.CREATE
            )
