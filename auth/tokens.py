"""
Bearer token creation and verification.

Tokens are HS256 JWTs carrying ``sub`` (user id), ``email``, ``iss``,
``aud``, ``iat``, ``exp`` and ``jti``.  Secret, issuer, audience and
lifetime come from ``config`` (env vars ``JWT_SECRET``, ``JWT_ISSUER``,
``JWT_AUDIENCE``, ``JWT_EXPIRY_SECONDS``).
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt

from auth.errors import AuthenticationError
from config.settings import config

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"


def create_token(user_id: str, email: str) -> str:
    """Create a signed token for ``user_id``."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "iss": config.jwt_issuer,
        "aud": config.jwt_audience,
        "iat": now,
        "exp": now + timedelta(seconds=config.jwt_expiry_seconds),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=_ALGORITHM)


def verify_token(token: str) -> str:
    """
    Verify token and return the user id it was issued for.

    Raises ``AuthenticationError`` on a bad signature, issuer, audience,
    or an expired token.
    """
    try:
        payload = jwt.decode(
            token,
            config.jwt_secret,
            algorithms=[_ALGORITHM],
            issuer=config.jwt_issuer,
            audience=config.jwt_audience,
            options={"require": ["sub", "exp", "iss", "aud"]},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise AuthenticationError("Session expired")
    except jwt.InvalidTokenError as exc:
        logger.warning("Rejected invalid token: %s", exc)
        raise AuthenticationError("Invalid session token")
    return payload["sub"]
