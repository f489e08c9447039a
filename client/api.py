"""
AuthApiClient: async HTTP transport for the /auth endpoints.

Translates transport failures into ``ConnectivityError`` and HTTP error
statuses back into the ``auth.errors`` taxonomy, keeping the server's
user-safe ``message`` verbatim.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from auth.errors import AuthError, ConnectivityError, IdentifierFormatError, error_for_status
from client.models import AccountProfile
from config.settings import config

logger = logging.getLogger(__name__)


class AuthApiClient:
    """
    Thin client over ``POST/DELETE /auth/sessions`` and ``/auth/users``.

    Parameters
    ----------
    base_url : str
        Root of the auth routes, e.g. ``http://localhost:8000/auth``.
    timeout : float
        Upper bound in seconds for every request.
    transport : httpx.AsyncBaseTransport, optional
        Injected transport (``httpx.ASGITransport`` in tests).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.client_timeout_seconds
        self._transport = transport

    async def register_user(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> AccountProfile:
        data = await self._request(
            "POST",
            "/users",
            json={
                "email": email,
                "password": password,
                "firstName": first_name,
                "lastName": last_name,
            },
        )
        return AccountProfile.model_validate(data)

    async def create_session(self, email: str, password: str) -> AccountProfile:
        data = await self._request(
            "POST", "/sessions", json={"email": email, "password": password}
        )
        return AccountProfile.model_validate(data)

    async def end_session(self, user_id: Optional[str] = None) -> None:
        await self._request("DELETE", "/sessions", json={"userId": user_id})

    async def get_user(self, user_id: str) -> AccountProfile:
        try:
            data = await self._request("GET", f"/users/{user_id}")
        except AuthError as exc:
            if exc.status_code == 400:
                raise IdentifierFormatError(exc.message)
            raise
        return AccountProfile.model_validate(data)

    # ── Internals ───────────────────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs: Any) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("%s %s unreachable: %s", method, url, exc)
            raise ConnectivityError() from exc

        if resp.is_success:
            if resp.status_code == 204 or not resp.content:
                return None
            return resp.json()

        raise error_for_status(resp.status_code, _error_message(resp))


def _error_message(resp: httpx.Response) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message")
    return None
