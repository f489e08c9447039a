"""
Error taxonomy shared by the auth server and the client resolver.

Every error carries the HTTP status it maps to and a message that is safe
to show to an end user.  Internal details belong in the logs, never in
``message``.
"""

from __future__ import annotations

from typing import Optional


class AuthError(Exception):
    """Base class for all authentication / session errors."""

    status_code: int = 500
    default_message: str = "An error occurred. Please try again."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Invalid request data"


class IdentifierFormatError(AuthError):
    """A user id that is not a well-formed UUID."""

    status_code = 400
    default_message = "Invalid user ID format"


class AuthenticationError(AuthError):
    # Same message for unknown email and wrong password.
    status_code = 401
    default_message = "Invalid email or password"


class NotFoundError(AuthError):
    status_code = 404
    default_message = "User not found"


class ConflictError(AuthError):
    """An account with this email already exists."""

    status_code = 409
    default_message = "User with this email already exists"


class PersistenceError(AuthError):
    """Storage failure; the operation was rolled back."""

    status_code = 500
    default_message = "Error creating user account"


class ConnectivityError(AuthError):
    """The server could not be reached (client side only)."""

    status_code = 503
    default_message = "Failed to connect to server. Please make sure the backend is running."


_BY_STATUS = {
    400: ValidationError,
    401: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
    500: PersistenceError,
}


def error_for_status(status_code: int, message: Optional[str] = None) -> AuthError:
    """Rebuild the taxonomy error for an HTTP status received by the client."""
    cls = _BY_STATUS.get(status_code)
    if cls is None:
        cls = ConnectivityError if status_code >= 500 else AuthError
    return cls(message)
