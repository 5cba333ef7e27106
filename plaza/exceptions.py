"""Domain errors raised by services and rendered by the API as {"error": ...}."""

from __future__ import annotations


class PlazaError(Exception):
    """Base error; status_code is the HTTP status the dispatcher responds with."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(PlazaError):
    status_code = 401
    default_message = "Auth failed"


class ValidationError(PlazaError):
    status_code = 400
    default_message = "Invalid request"


class AuthorizationError(PlazaError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(PlazaError):
    status_code = 404
    default_message = "Not found"


class ConflictError(PlazaError):
    status_code = 409
    default_message = "Conflict"


class UnexpectedError(PlazaError):
    """Datastore or transport failure; message is passed through to the caller."""

    status_code = 500
