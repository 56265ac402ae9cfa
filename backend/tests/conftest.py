"""Shared fixtures for backend tests.

Every test gets its own in-memory SQLite database (one shared connection via
``StaticPool``) and an in-memory document store, wired into the app through
``app.dependency_overrides``.
"""

from __future__ import annotations

import uuid
from datetime import date

import bcrypt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gradarchive.auth.tokens import issue_token
from gradarchive.db.engine import enable_sqlite_pragmas, get_db
from gradarchive.db.models import (
    Base,
    College,
    Department,
    DocType,
    Permission,
    PermissionType,
    Person,
    Project,
    Supervisor,
    User,
)
from gradarchive.main import app
from gradarchive.storage.base import DocumentStorage
from gradarchive.storage.s3 import get_storage

PASSWORD = "secret-pass"
# Low cost factor keeps seeding fast; still a real bcrypt hash.
PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()

ALL_GRANTS = [(d, p) for d in DocType for p in PermissionType]


def _uid() -> str:
    """Return a short unique suffix for test isolation."""
    return uuid.uuid4().hex[:8]


def bearer(username: str, ttl_seconds: int | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(username, ttl_seconds)}"}


# ── In-memory document store ────────────────────────────────────


class FakeStorage(DocumentStorage):
    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.fail_put = False
        self.fail_delete = False

    async def put(self, document_path: str, data: bytes, content_type: str | None = None) -> None:
        if self.fail_put:
            raise RuntimeError("upload failed")
        self.objects[self.object_key(document_path)] = data

    async def delete(self, document_path: str) -> None:
        if self.fail_delete:
            raise RuntimeError("delete failed")
        self.objects.pop(self.object_key(document_path), None)

    async def signed_url(self, document_path: str, expires_in: int) -> str:
        return f"https://documents.test/{self.object_key(document_path)}?expires={expires_in}"


# ── Seeding helpers ─────────────────────────────────────────────


class Seeder:
    """Writes fixture rows, each call in its own committed session."""

    def __init__(self, factory: async_sessionmaker[AsyncSession]) -> None:
        self._factory = factory

    async def _save(self, obj):
        async with self._factory() as db:
            db.add(obj)
            await db.commit()
        return obj

    async def user(
        self,
        username: str | None = None,
        grants: list[tuple[DocType, PermissionType]] | None = None,
        is_active: bool = True,
    ) -> User:
        user = User(
            username=username or f"user_{_uid()}",
            hashed_password=PASSWORD_HASH,
            is_active=is_active,
        )
        user.permissions = [Permission(doc_type=d, permission_type=p) for d, p in grants or []]
        return await self._save(user)

    async def college(self, name: str | None = None) -> College:
        return await self._save(College(name=name or f"College {_uid()}"))

    async def department(self, college_id: str, name: str | None = None) -> Department:
        return await self._save(Department(name=name or f"Dept {_uid()}", college_id=college_id))

    def person(self, department_id: str, full_name: str | None = None) -> Person:
        return Person(
            full_name=full_name or f"Person {_uid()}",
            date_of_birth=date(1980, 5, 17),
            college_email=f"{_uid()}@college.edu",
            department_id=department_id,
        )

    async def supervisor(self, department_id: str, full_name: str | None = None) -> Supervisor:
        return await self._save(Supervisor(person=self.person(department_id, full_name)))

    async def project(self, department_id: str, supervisor_id: str, **fields) -> Project:
        values = {"name": f"Project {_uid()}", "rate": 80, "year": 2020}
        values.update(fields)
        return await self._save(
            Project(department_id=department_id, supervisor_id=supervisor_id, **values)
        )

    async def count(self, model) -> int:
        async with self._factory() as db:
            return (await db.execute(select(func.count()).select_from(model))).scalar_one()

    async def get(self, model, obj_id: str):
        async with self._factory() as db:
            return await db.get(model, obj_id)


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(eng.sync_engine, "connect", enable_sqlite_pragmas)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
async def client(session_factory, storage):
    """Async test client bound to the per-test database and document store."""

    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: storage
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def admin(seed) -> User:
    """A user holding every grant."""
    return await seed.user(f"admin_{_uid()}", ALL_GRANTS)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return bearer(admin.username)
