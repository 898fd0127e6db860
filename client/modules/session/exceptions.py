"""
Session module exceptions.
"""

from typing import Optional

from shared.exceptions import LocaliteError
from modules.identity.exceptions import ProviderError
from modules.profiles.exceptions import StoreError


class RetryRequiredError(ProviderError):
    """
    Raised when sign-in or sign-up was interrupted by the provider.

    The original cancellation is not an account problem; the UI should
    offer a plain retry.
    """

    default_user_message = "The operation was interrupted, please try again"
    retryable = True

    def __init__(self, operation: str, original_code: Optional[str] = None):
        super().__init__(
            f"{operation} was interrupted, please try again",
            code="RETRY_REQUIRED",
            details={"operation": operation, "original_code": original_code},
        )


class ProfileCreationError(LocaliteError):
    """
    Raised when sign-up could not create the user's profile record.

    The provider-side account is kept; signing in later recreates the
    profile through reconciliation.
    """

    def __init__(self, uid: str, store_error: Optional[StoreError] = None):
        super().__init__(
            f"Failed to create user profile: {store_error.message if store_error else 'unknown error'}",
            code="PROFILE_CREATION_FAILED",
            details={
                "uid": uid,
                "store_code": store_error.code if store_error else None,
            },
        )
