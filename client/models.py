"""
Pydantic models for the client-held session state.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Credentials(BaseModel):
    """One submitted login attempt. Never persisted as-is."""

    email: str
    password: str


class AccountProfile(BaseModel):
    """Public profile as returned by the server."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    message: Optional[str] = None
    token: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or "User"


class Session(BaseModel):
    user_id: str
    email: str
    display_name: str
    token: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PendingLocalRegistration(BaseModel):
    """
    A sign-up that has not (yet) been confirmed by the server.

    ``password`` is the user's plaintext password: the resolver compares it
    on later logins and replays it to the server.  ``FileSessionStore``
    encrypts it at rest when a key is configured.
    """

    email: str
    password: str
    display_name: str
    user_id: Optional[str] = None

    def split_name(self) -> tuple[str, str]:
        parts = self.display_name.split()
        if not parts:
            return "User", "User"
        return parts[0], " ".join(parts[1:]) or "User"


class ResolutionState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class ResolutionResult(BaseModel):
    state: ResolutionState
    session: Optional[Session] = None
    error: Optional[str] = None
    strategy: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state == ResolutionState.AUTHENTICATED
