"""Bearer token codec.

Tokens are HS256 JWTs carrying ``username``, ``iat`` and ``exp``.  They only
prove identity; grants are always looked up in the store.

There are two read paths:

* :func:`verify_token` checks signature and expiry; the authentication gate uses it.
* :func:`decode_token` extracts claims without checking either.  Used only by
  the authorization gate, which immediately performs its own lookup and always
  runs behind the authentication gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt  # PyJWT

from gradarchive.config import settings
from gradarchive.errors import UnauthorizedError

logger = logging.getLogger("gradarchive.auth")

INVALID_TOKEN = "Invalid token"


@dataclass(frozen=True)
class TokenClaims:
    username: str
    issued_at: datetime | None = None
    expires_at: datetime | None = None


def issue_token(username: str, ttl_seconds: int | None = None) -> str:
    """Sign a token for *username*.

    ``ttl_seconds=None`` falls back to ``TOKEN_DEFAULT_TTL_SECONDS``;
    ``ttl_seconds=0`` produces a token that is already expired.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.TOKEN_DEFAULT_TTL_SECONDS
    now = datetime.now(timezone.utc)
    payload = {
        "username": username,
        "iat": now,
        "exp": now + timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, settings.JWT_PRIVATE_KEY, algorithm=settings.JWT_ALGORITHM)


def _claims_from_payload(payload: dict) -> TokenClaims:
    username = payload.get("username")
    if not isinstance(username, str) or not username:
        raise UnauthorizedError(INVALID_TOKEN)

    def _ts(key: str) -> datetime | None:
        value = payload.get(key)
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        return None

    return TokenClaims(username=username, issued_at=_ts("iat"), expires_at=_ts("exp"))


def verify_token(token: str) -> TokenClaims:
    """Check signature + expiry.  Raises :class:`UnauthorizedError` on failure."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_PRIVATE_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.PyJWTError as exc:
        logger.debug("Token verification failed: %s", exc)
        raise UnauthorizedError(INVALID_TOKEN) from exc
    return _claims_from_payload(payload)


def decode_token(token: str) -> TokenClaims:
    """Extract claims WITHOUT checking signature or expiry.

    The result is not an authenticated identity; callers must resolve it
    against the store themselves.
    """
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as exc:
        logger.debug("Token decode failed: %s", exc)
        raise UnauthorizedError(INVALID_TOKEN) from exc
    return _claims_from_payload(payload)
