"""Lookup helpers shared by the resource services."""

from __future__ import annotations

import uuid
from typing import Any, TypeVar

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.errors import ConflictError, NotFoundError

T = TypeVar("T")


def not_found(resource: str, resource_id: str | uuid.UUID) -> NotFoundError:
    return NotFoundError(f"There is no {resource} with the id of {resource_id}")


def conflict(resource: str, field: str, value: Any) -> ConflictError:
    return ConflictError(f'A {resource} with the {field} "{value}" already exists')


async def require(
    db: AsyncSession, model: type[T], resource_id: str | uuid.UUID, resource: str
) -> T:
    """Return the row with primary key *resource_id* or raise 404."""
    obj = await db.get(model, str(resource_id))
    if obj is None:
        raise not_found(resource, resource_id)
    return obj


async def row_exists(db: AsyncSession, *criteria: Any) -> bool:
    result = await db.execute(select(exists().where(*criteria)))
    return bool(result.scalar())


async def flush_unique(db: AsyncSession, *keys: tuple[str, ConflictError]) -> None:
    """Flush pending writes, reporting a lost unique-key race as a conflict.

    Each key pairs a column name with the error to raise when the violated
    constraint mentions that column.  A concurrent writer can pass the same
    ``row_exists`` check; the database constraint then decides, and the
    loser gets the same 409 it would have got from the check.  The first
    key is used when the driver message names no known column.
    """
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        detail = str(exc.orig)
        for column, error in keys:
            if column in detail:
                raise error from exc
        raise keys[0][1] from exc
