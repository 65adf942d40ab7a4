"""API exceptions."""

from typing import Optional


class ApiError(Exception):
    """Raised when a backend call fails (HTTP error status or unreadable body)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class ApiNetworkError(ApiError):
    """Raised when the backend cannot be reached at all."""


class ValidationError(ValueError):
    """Raised when a payload is rejected before it is sent."""
