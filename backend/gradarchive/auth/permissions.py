"""Authorization gate.

A request is allowed when the store holds at least one grant matching
(user, doc_type, permission_type).  Decisions never look at the target row.

The principal is re-derived from the token with an unverified decode; every
route chain that uses this gate runs the authentication gate first.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.auth.deps import NO_TOKEN, bearer_token
from gradarchive.auth.tokens import decode_token
from gradarchive.db.models import DocType, Permission, PermissionType, User
from gradarchive.errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger("gradarchive.auth")


async def has_grant(
    db: AsyncSession,
    user_id: str,
    doc_type: DocType,
    permission_type: PermissionType,
) -> bool:
    result = await db.execute(
        select(Permission.id)
        .where(
            Permission.user_id == user_id,
            Permission.doc_type == doc_type,
            Permission.permission_type == permission_type,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def authorize(
    db: AsyncSession,
    authorization: str | None,
    doc_type: DocType,
    permission_type: PermissionType,
) -> User:
    """Resolve the caller and check it holds the (doc_type, permission_type) grant.

    Raises :class:`ForbiddenError` when the user is unknown, inactive, or has
    no matching grant.  The principal lookup and the grant lookup are two
    independent reads; a user removed in between simply yields Forbidden.
    """
    token = bearer_token(authorization)
    if token is None:
        raise UnauthorizedError(NO_TOKEN)
    claims = decode_token(token)

    result = await db.execute(select(User).where(User.username == claims.username))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        logger.warning(
            "Access denied: no active user '%s' for %s %s",
            claims.username,
            permission_type.value,
            doc_type.value,
        )
        raise ForbiddenError()

    if not await has_grant(db, user.id, doc_type, permission_type):
        logger.warning(
            "Access denied: user '%s' lacks %s %s",
            user.username,
            permission_type.value,
            doc_type.value,
        )
        raise ForbiddenError()
    return user
