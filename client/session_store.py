"""
Client token cache: one active session and one pending registration.

``SessionStore`` is the injectable abstraction the resolver writes to.
Both slots are last-write-wins: ``save_*`` overwrites unconditionally and
``clear_*`` is idempotent.  Nothing here checks expiry or revocation; a
cached token is trusted until it is cleared.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError as SchemaError

from client.encryption import FORMAT_PLAIN, SecretCipher
from client.models import PendingLocalRegistration, Session
from config.settings import config

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Abstract base for client session persistence."""

    def open(self) -> None:
        """Acquire the backing medium. Called once before use."""

    def close(self) -> None:
        """Release the backing medium."""

    def __enter__(self) -> "SessionStore":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ── Session slot ────────────────────────────────────────────────────

    @abstractmethod
    def load_session(self) -> Optional[Session]:
        ...

    @abstractmethod
    def save_session(self, session: Session) -> None:
        ...

    @abstractmethod
    def clear_session(self) -> None:
        ...

    # ── Pending registration slot ───────────────────────────────────────

    @abstractmethod
    def load_pending_registration(self) -> Optional[PendingLocalRegistration]:
        ...

    @abstractmethod
    def save_pending_registration(self, pending: PendingLocalRegistration) -> None:
        ...

    @abstractmethod
    def clear_pending_registration(self) -> None:
        ...

    # ── Helpers ─────────────────────────────────────────────────────────

    def current_user_id(self) -> Optional[str]:
        session = self.load_session()
        return session.user_id if session else None

    def current_token(self) -> Optional[str]:
        session = self.load_session()
        return session.token if session else None

    def current_display_name(self) -> Optional[str]:
        session = self.load_session()
        return session.display_name if session else None


class MemorySessionStore(SessionStore):
    """Process-local store; nothing survives a restart."""

    def __init__(self) -> None:
        self._session: Optional[Session] = None
        self._pending: Optional[PendingLocalRegistration] = None

    def load_session(self) -> Optional[Session]:
        return self._session

    def save_session(self, session: Session) -> None:
        self._session = session.model_copy()

    def clear_session(self) -> None:
        self._session = None

    def load_pending_registration(self) -> Optional[PendingLocalRegistration]:
        return self._pending

    def save_pending_registration(self, pending: PendingLocalRegistration) -> None:
        self._pending = pending.model_copy()

    def clear_pending_registration(self) -> None:
        self._pending = None


class FileSessionStore(SessionStore):
    """
    JSON file store, written with 0600 permissions.

    Layout::

        {"session": {...} | null, "pending_registration": {...} | null}

    The pending registration password is encrypted with ``SecretCipher``
    when ``CLIENT_ENCRYPTION_KEY`` is configured.  Its ``password_format``
    field says which; records without one are plaintext.
    """

    def __init__(self, path: Optional[Path] = None, cipher: Optional[SecretCipher] = None) -> None:
        if path is None:
            path = Path(config.client_state_file).expanduser()
        self.path = Path(path)
        self._cipher = cipher or SecretCipher()
        self._data: Optional[Dict[str, Any]] = None

    def open(self) -> None:
        self._data = self._read()

    def close(self) -> None:
        self._data = None

    # ── Session slot ────────────────────────────────────────────────────

    def load_session(self) -> Optional[Session]:
        raw = self._state().get("session")
        if not raw:
            return None
        try:
            return Session.model_validate(raw)
        except SchemaError as exc:
            logger.error("Ignoring malformed cached session in %s: %s", self.path, exc)
            return None

    def save_session(self, session: Session) -> None:
        self._state()["session"] = session.model_dump(mode="json")
        self._write()

    def clear_session(self) -> None:
        state = self._state()
        if state.get("session") is None:
            return
        state["session"] = None
        self._write()
        logger.info("Session cleared")

    # ── Pending registration slot ───────────────────────────────────────

    def load_pending_registration(self) -> Optional[PendingLocalRegistration]:
        raw = self._state().get("pending_registration")
        if not raw:
            return None
        raw = dict(raw)
        fmt = raw.pop("password_format", FORMAT_PLAIN)
        password = self._cipher.decrypt(raw.get("password", ""), fmt)
        if password is None:
            return None
        raw["password"] = password
        try:
            return PendingLocalRegistration.model_validate(raw)
        except SchemaError as exc:
            logger.error("Ignoring malformed pending registration in %s: %s", self.path, exc)
            return None

    def save_pending_registration(self, pending: PendingLocalRegistration) -> None:
        raw = pending.model_dump(mode="json")
        raw["password"] = self._cipher.encrypt(pending.password)
        raw["password_format"] = self._cipher.format
        self._state()["pending_registration"] = raw
        self._write()

    def clear_pending_registration(self) -> None:
        state = self._state()
        if state.get("pending_registration") is None:
            return
        state["pending_registration"] = None
        self._write()

    # ── Internals ───────────────────────────────────────────────────────

    def _state(self) -> Dict[str, Any]:
        if self._data is None:
            self._data = self._read()
        return self._data

    def _read(self) -> Dict[str, Any]:
        empty: Dict[str, Any] = {"session": None, "pending_registration": None}
        if not self.path.exists():
            return empty
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read session file %s: %s", self.path, exc)
            return empty
        if not isinstance(data, dict):
            logger.error("Unexpected session file layout in %s", self.path)
            return empty
        empty.update(data)
        return empty

    def _write(self) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w") as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp, self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            # Drop the unsaved change; the next access rereads the file.
            self._data = None
            raise
