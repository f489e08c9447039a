"""
Auth API routes: accounts and sessions.

Route prefix: /auth
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Request, Response, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_current_user_id
from auth.service import authenticate_user, end_session, get_user, register_user
from auth.tokens import create_token
from config.settings import config
from database.models import User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(_CamelModel):
    # Optional so that missing fields surface as 400 from the service.
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class LoginRequest(_CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LogoutRequest(_CamelModel):
    user_id: Optional[str] = None


class AuthResponse(_CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    message: str
    token: Optional[str] = None


def _profile(user: User, message: str, token: Optional[str] = None) -> AuthResponse:
    return AuthResponse(
        id=str(user.user_id),
        email=user.email,
        first_name=user.first_name or "",
        last_name=user.last_name or "",
        message=message,
        token=token,
    )


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post(
    "/users",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    req: RegisterRequest,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(db_session),
) -> AuthResponse:
    """Register a new account."""
    user = await register_user(
        session, req.email, req.password, req.first_name, req.last_name
    )
    response.headers["Location"] = str(
        request.url_for("read_user", user_id=str(user.user_id))
    )
    return _profile(user, "Registration successful")


@router.post(
    "/sessions",
    response_model=AuthResponse,
    response_model_exclude_none=True,
)
async def create_session(
    req: LoginRequest,
    session: AsyncSession = Depends(db_session),
) -> AuthResponse:
    """Login with email + password."""
    user = await authenticate_user(session, req.email, req.password)

    token = None
    if config.token_issuance_enabled:
        token = create_token(str(user.user_id), user.email)
    return _profile(user, "Login successful", token)


@router.delete("/sessions", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    req: Optional[LogoutRequest] = Body(default=None),
) -> Response:
    """Logout. Always succeeds; the server keeps no session state."""
    end_session(req.user_id if req else None)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/sessions/current",
    response_model=AuthResponse,
    response_model_exclude_none=True,
)
async def current_session(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(db_session),
) -> AuthResponse:
    """Resolve the Bearer token back to its account."""
    user = await get_user(session, user_id)
    return _profile(user, "Session valid")


@router.get(
    "/users/{user_id}",
    response_model=AuthResponse,
    response_model_exclude_none=True,
)
async def read_user(
    user_id: str,
    session: AsyncSession = Depends(db_session),
) -> AuthResponse:
    user = await get_user(session, user_id)
    return _profile(user, "User verified")
