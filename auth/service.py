"""
Account registration, credential verification and session teardown.

These functions take an ``AsyncSession`` and raise the ``auth.errors``
taxonomy; the HTTP layer in ``auth.routes`` only translates them.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from auth.password import MAX_PASSWORD_BYTES, burn_verification, hash_password, verify_password
from database.helpers import get_user_by_email, get_user_by_id, insert_user, normalize_email
from database.models import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


async def register_user(
    session: AsyncSession,
    email: Optional[str],
    password: Optional[str],
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> User:
    """
    Create a new account.

    The lookup by email is only a fast path; the unique constraint on
    ``users.email`` decides races between concurrent registrations.
    """
    if not email or not email.strip():
        raise ValidationError("Email is required")
    if not password or not password.strip():
        raise ValidationError("Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    email = normalize_email(email)
    if await get_user_by_email(session, email) is not None:
        raise ConflictError()

    user = User(
        user_id=uuid.uuid4(),
        email=email,
        password_hash=hash_password(password),
        first_name=(first_name or "").strip(),
        last_name=(last_name or "").strip(),
    )
    await insert_user(session, user)

    logger.info("User registered: %s (%s)", user.email, user.user_id)
    return user


async def authenticate_user(
    session: AsyncSession,
    email: Optional[str],
    password: Optional[str],
) -> User:
    """Verify email + password and return the matching account."""
    if not email or not email.strip():
        raise ValidationError("Email is required")
    if not password or not password.strip():
        raise ValidationError("Password is required")

    user = await get_user_by_email(session, email)
    if user is None:
        burn_verification(password)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Login failed for %s", normalize_email(email))
        raise AuthenticationError()

    logger.info("Session created for user: %s (%s)", user.email, user.user_id)
    return user


async def get_user(session: AsyncSession, user_id: str) -> User:
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise NotFoundError()
    return user


def end_session(user_id: Optional[str] = None) -> None:
    """No server-side state to revoke; the client drops its cached session."""
    logger.info("Session deleted for user: %s", user_id or "unknown")
