"""
Base exception classes for the Localite auth client.

Each module defines its own exceptions on top of these bases so callers
can catch a whole family (every local input error, every provider
failure) in one place. UI surfaces render `to_dict()`.
"""

from typing import Optional, Any


class LocaliteError(Exception):
    """
    Base exception for all Localite errors.

    `code` is a stable identifier for UI and logs; it defaults to the
    class name when a subclass does not set one.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for UI error surfaces."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(LocaliteError):
    """Input validation failed before any network call was made."""

    pass


class AuthenticationError(LocaliteError):
    """The identity provider refused or could not complete an auth call."""

    pass


class ExternalServiceError(LocaliteError):
    """A backing service (profile store, identity provider) failed."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
