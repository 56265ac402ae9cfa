"""bcrypt password hashing.

bcrypt only looks at the first 72 bytes of a password; request schemas cap
passwords at that length so nothing is silently truncated.
"""

from __future__ import annotations

import asyncio

import bcrypt

MAX_PASSWORD_BYTES = 72


def _hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def _verify(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Malformed stored hash or over-long input: never a match.
        return False


async def hash_password(password: str) -> str:
    # bcrypt is deliberately slow; keep it off the event loop.
    return await asyncio.to_thread(_hash, password)


async def verify_password(plain: str, hashed: str) -> bool:
    return await asyncio.to_thread(_verify, plain, hashed)
