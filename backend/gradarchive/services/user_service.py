"""User management service: CRUD, login and token rotation.

The token stored on a user is the last one issued for it (at creation,
login, refresh or logout).  It is kept for bookkeeping only; requests are
authenticated from the bearer token they carry.

A bootstrap administrator holding every grant is seeded at startup when
``ADMIN_USERNAME`` is free.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gradarchive.auth.passwords import hash_password, verify_password
from gradarchive.auth.tokens import issue_token
from gradarchive.config import settings
from gradarchive.db.models import DocType, Permission, PermissionType, User
from gradarchive.errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError, store_call
from gradarchive.schemas.users import UserIn, UserUpdate
from gradarchive.services import person_service
from gradarchive.services.lookups import conflict, flush_unique, not_found, row_exists

logger = logging.getLogger("gradarchive.users")

BAD_CREDENTIALS = "Incorrect username or password"


def _with_person():
    return select(User).options(selectinload(User.person))


# ── CRUD ──────────────────────────────────────────────────────


@store_call
async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(_with_person().order_by(User.created_at, User.username))
    return list(result.scalars().all())


@store_call
async def get_user(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(
        _with_person().where(User.id == user_id).execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise not_found("user", user_id)
    return user


@store_call
async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(_with_person().where(User.username == username))
    return result.scalar_one_or_none()


async def _ensure_username_free(db: AsyncSession, username: str, exclude_id: str | None = None) -> None:
    criteria = [User.username == username]
    if exclude_id is not None:
        criteria.append(User.id != exclude_id)
    if await row_exists(db, *criteria):
        raise conflict("user", "username", username)


def _unique_keys(data: UserIn | UserUpdate) -> list[tuple[str, ConflictError]]:
    keys = [("username", conflict("user", "username", data.username))]
    if data.person is not None:
        keys.append(person_service.unique_key(data.person))
    return keys


@store_call
async def create_user(db: AsyncSession, data: UserIn) -> User:
    await _ensure_username_free(db, data.username)
    user = User(
        username=data.username,
        hashed_password=await hash_password(data.password),
        token=issue_token(data.username, settings.NEW_USER_TOKEN_TTL_SECONDS),
        is_active=data.is_active,
    )
    if data.person is not None:
        user.person = await person_service.build_person(db, data.person)
    db.add(user)
    await flush_unique(db, *_unique_keys(data))
    logger.info("Created user '%s'", user.username)
    return await get_user(db, user.id)


@store_call
async def update_user(db: AsyncSession, user_id: str, data: UserUpdate) -> User:
    """Replace the user's details.  The stored token is never touched here."""
    user = await get_user(db, user_id)
    await _ensure_username_free(db, data.username, exclude_id=user.id)
    user.username = data.username
    user.is_active = data.is_active
    if data.password is not None:
        user.hashed_password = await hash_password(data.password)
    if data.person is not None:
        if user.person is None:
            user.person = await person_service.build_person(db, data.person)
        else:
            await person_service.apply_person(db, user.person, data.person)
    await flush_unique(db, *_unique_keys(data))
    return await get_user(db, user.id)


@store_call
async def delete_user(db: AsyncSession, user_id: str) -> User:
    user = await get_user(db, user_id)
    await db.delete(user)
    await db.flush()
    logger.info("Deleted user '%s'", user.username)
    return user


# ── Login & tokens ────────────────────────────────────────────


@store_call
async def login(db: AsyncSession, username: str, password: str) -> tuple[User, str]:
    user = await get_user_by_username(db, username)
    if user is None:
        raise NotFoundError(f'A user with the username of "{username}" does not exist')
    if not user.is_active or not await verify_password(password, user.hashed_password):
        logger.warning("Failed login for '%s'", username)
        raise UnauthorizedError(BAD_CREDENTIALS)
    token = issue_token(user.username, settings.LOGIN_TOKEN_TTL_SECONDS)
    user.token = token
    await db.flush()
    logger.info("User '%s' logged in", user.username)
    return user, token


async def _rotate_token(db: AsyncSession, user_id: str, ttl_seconds: int, acting_username: str | None) -> str:
    user = await get_user(db, user_id)
    if user.username != acting_username:
        logger.warning("'%s' tried to rotate the token of '%s'", acting_username, user.username)
        raise ForbiddenError()
    token = issue_token(user.username, ttl_seconds)
    user.token = token
    await db.flush()
    return token


@store_call
async def logout(db: AsyncSession, user_id: str, acting_username: str | None) -> str:
    """Store an already-expired token on the user and return it.

    Only the user the caller's token was issued to may be logged out.
    """
    return await _rotate_token(db, user_id, 0, acting_username)


@store_call
async def refresh_token(db: AsyncSession, user_id: str, acting_username: str | None) -> str:
    return await _rotate_token(db, user_id, settings.REFRESH_TOKEN_TTL_SECONDS, acting_username)


# ── Bootstrap ─────────────────────────────────────────────────


async def ensure_default_admin(db: AsyncSession) -> User | None:
    """Seed ``ADMIN_USERNAME`` with every grant unless that user already exists."""
    if await get_user_by_username(db, settings.ADMIN_USERNAME) is not None:
        return None
    user = User(
        username=settings.ADMIN_USERNAME,
        hashed_password=await hash_password(settings.ADMIN_PASSWORD),
        is_active=True,
    )
    user.permissions = [
        Permission(doc_type=doc_type, permission_type=permission_type)
        for doc_type in DocType
        for permission_type in PermissionType
    ]
    db.add(user)
    await db.commit()
    logger.info(
        "Seeded default admin user (username=%s) with %d grants. "
        "Change its password immediately in production!",
        settings.ADMIN_USERNAME,
        len(user.permissions),
    )
    return user
