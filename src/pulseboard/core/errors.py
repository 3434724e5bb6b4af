"""Domain error taxonomy mapped to HTTP responses at the API boundary."""

from __future__ import annotations

from fastapi import status


class PulseboardError(Exception):
    """Base class for errors that carry a client-safe message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict[str, object]:
        """Return the JSON body rendered for this error."""
        return {"message": self.message}


class Unauthenticated(PulseboardError):
    """No credential, or an invalid one, was presented."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated!"


class Forbidden(PulseboardError):
    """The caller is authenticated but not entitled to the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized!"


class NotFound(PulseboardError):
    """The addressed resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ValidationFailed(PulseboardError):
    """Malformed input; carries field-level messages."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Invalid input."

    def __init__(self, message: str | None = None, data: list[str] | None = None) -> None:
        super().__init__(message)
        self.data = [{"message": item} for item in (data or [])]

    def to_body(self) -> dict[str, object]:
        return {"message": self.message, "data": self.data}


class Conflict(PulseboardError):
    """A resource with the same identity already exists."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class Internal(PulseboardError):
    """Unexpected failure such as the store being unavailable."""
