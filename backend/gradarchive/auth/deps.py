"""Authentication gate.

Reads the ``Authorization: Bearer <token>`` header and verifies the token's
signature and expiry.  The gate is stateless: it does not load the user and
does not attach an identity to the request beyond the log context.
"""

from __future__ import annotations

import logging

from gradarchive.auth.tokens import TokenClaims, verify_token
from gradarchive.errors import UnauthorizedError
from gradarchive.utils.logger import ctx_username

logger = logging.getLogger("gradarchive.auth")

NO_TOKEN = "No token provided"


def bearer_token(authorization: str | None) -> str | None:
    """Return the token part of a ``Bearer`` header, or None."""
    if not authorization:
        return None
    parts = authorization.split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def token_fragment(token: str | None) -> str | None:
    """Short prefix of a token, safe to put in logs."""
    if not token:
        return None
    return f"{token[:8]}…"


def authenticate(authorization: str | None) -> TokenClaims:
    """Verify the bearer token carried by *authorization*.

    Raises :class:`UnauthorizedError` with "No token provided" when there is
    no bearer token, or "Invalid token" when verification fails.
    """
    token = bearer_token(authorization)
    if token is None:
        raise UnauthorizedError(NO_TOKEN)
    claims = verify_token(token)
    ctx_username.set(claims.username)
    logger.debug("Authenticated '%s'", claims.username)
    return claims
