"""Exception hierarchy shared by the deis client."""
from __future__ import annotations


class DeisError(RuntimeError):
    """Base class for errors reported to the user as ``Error: <message>``."""


class ArgumentError(DeisError):
    """Raised when command-line values fail validation before any API call."""


class SettingsError(DeisError):
    """Raised when the client profile cannot be located, parsed or written."""


class GitError(DeisError):
    """Raised when git remote plumbing fails."""


class APIError(DeisError):
    """Raised when the controller rejects a request or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Store the HTTP status alongside the message."""
        super().__init__(message)
        self.status_code = status_code


class UnauthorizedError(APIError):
    """Raised for 401/403 responses."""


class NotFoundError(APIError):
    """Raised for 404 responses."""


class PodNotFoundError(NotFoundError):
    """Raised when a 404 refers to a missing pod or container."""


class ConflictError(APIError):
    """Raised for 409 responses."""


__all__ = [
    "APIError",
    "ArgumentError",
    "ConflictError",
    "DeisError",
    "GitError",
    "NotFoundError",
    "PodNotFoundError",
    "SettingsError",
    "UnauthorizedError",
]
