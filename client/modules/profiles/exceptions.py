"""
Profiles module exceptions.

StoreError is never raised out of the profile store gateway: it travels
inside a StoreResult so that a store hiccup cannot crash reconciliation.
"""

from typing import Optional, Any

from shared.exceptions import ExternalServiceError


class StoreError(ExternalServiceError):
    """A profile store read, create or write failed."""

    def __init__(
        self,
        message: str,
        code: str = "STORE_ERROR",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, service="profile_store", code=code, details=details)


class StoreTimeoutError(StoreError):
    """A profile store call did not resolve within the configured bound."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            f"Profile store {operation} timed out after {timeout_seconds}s",
            code="TIMEOUT",
            details={"operation": operation, "timeout_seconds": timeout_seconds},
        )
