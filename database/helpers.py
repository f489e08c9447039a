"""
Credential store access: look up and insert accounts.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import ConflictError, IdentifierFormatError, PersistenceError
from database.models import User

logger = logging.getLogger(__name__)


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        raise IdentifierFormatError()


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookups."""
    return email.strip().lower()


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(
        select(User).where(User.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: str | uuid.UUID) -> Optional[User]:
    """Raises ``IdentifierFormatError`` when ``user_id`` is not a UUID."""
    uid = _to_uuid(user_id)
    result = await session.execute(select(User).where(User.user_id == uid))
    return result.scalar_one_or_none()


async def insert_user(session: AsyncSession, user: User) -> User:
    """
    Persist a new account and commit.

    A unique-constraint violation means another writer registered the
    same email first and is reported as ``ConflictError``.  Any other
    storage failure is rolled back and reported as ``PersistenceError``.
    """
    session.add(user)
    try:
        await session.flush()
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.info("Insert rejected by unique constraint for %s", user.email)
        raise ConflictError()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Failed to persist user %s: %s", user.email, exc)
        raise PersistenceError() from exc
    return user
