"""
Error taxonomy for the API.

Every expected failure is raised as an ApiError subclass; the exception
handlers registered in main.create_app render them as {"error": message}
with the class's status code. Authentication, authorization and credential
failures carry fixed messages so callers cannot tell which check failed.
"""
from __future__ import annotations

from typing import Optional


class ApiError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateEmailError(ValidationError):
    default_message = "Email already registered"


class InvalidCredentials(ValidationError):
    """Unknown email or wrong password; deliberately indistinguishable."""

    default_message = "Invalid email or password"

    def __init__(self) -> None:
        super().__init__(self.default_message)


class AuthenticationError(ApiError):
    status_code = 401
    default_message = "Authentication failed"

    def __init__(self, reason: str = "") -> None:
        # reason is for server-side logs only, never for the response body
        self.reason = reason
        super().__init__(self.default_message)


class AuthorizationError(ApiError):
    status_code = 403
    default_message = "Authorization failed"

    def __init__(self) -> None:
        super().__init__(self.default_message)


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class InternalError(ApiError):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self) -> None:
        super().__init__(self.default_message)


class InvalidToken(Exception):
    """Raised by the token service for bad signatures, malformed or expired tokens."""
