"""
Identity module exceptions.

ProviderError subclasses are raised by the identity gateway and carry a
`user_message` the UI can show as-is plus a `retryable` flag that decides
between a "try again" affordance and an explicit error message.
"""

from typing import Optional, Any

from shared.exceptions import LocaliteError, AuthenticationError, ValidationError


class ProviderError(AuthenticationError):
    """Base exception for identity provider failures."""

    default_user_message = "Authentication failed, please try again later"
    retryable = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        user_message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code=code, details=details)
        self.user_message = user_message or self.default_user_message

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["user_message"] = self.user_message
        data["retryable"] = self.retryable
        return data


class InvalidCredentialsError(ProviderError):
    """Raised when the email/password pair is rejected."""

    default_user_message = "Incorrect email or password, please check and try again"

    def __init__(self, message: str = "Invalid login credentials", **kwargs: Any):
        super().__init__(message, code="INVALID_CREDENTIALS", **kwargs)


class EmailNotConfirmedError(ProviderError):
    """
    Raised when the password is right but the email is not confirmed yet.

    Supabase refuses password sign-in for such accounts while email
    confirmation is enabled.
    """

    default_user_message = "Please confirm your email first, check your inbox for the verification link"

    def __init__(self, message: str = "Email not confirmed", **kwargs: Any):
        super().__init__(message, code="EMAIL_NOT_CONFIRMED", **kwargs)


class EmailAlreadyInUseError(ProviderError):
    """Raised when signing up with an email that already has an account."""

    default_user_message = "This email is already registered, try signing in instead"

    def __init__(self, message: str = "Email already registered", **kwargs: Any):
        super().__init__(message, code="EMAIL_ALREADY_IN_USE", **kwargs)


class PasswordRejectedError(ProviderError):
    """Raised when the provider rejects a password that passed local checks."""

    default_user_message = "Password is too weak, please choose a stronger one"

    def __init__(self, message: str = "Password rejected by provider", **kwargs: Any):
        super().__init__(message, code="WEAK_PASSWORD", **kwargs)


class TooManyRequestsError(ProviderError):
    """Raised when the provider rate-limits the client."""

    default_user_message = "Too many attempts, please wait a moment and try again"
    retryable = True

    def __init__(self, message: str = "Too many requests", **kwargs: Any):
        super().__init__(message, code="TOO_MANY_REQUESTS", **kwargs)


class NetworkUnavailableError(ProviderError):
    """Raised when the provider cannot be reached or does not answer in time."""

    default_user_message = "Network error, please check your connection and try again"
    retryable = True

    def __init__(
        self,
        message: str = "Identity provider unreachable",
        code: str = "NETWORK_UNAVAILABLE",
        **kwargs: Any,
    ):
        super().__init__(message, code=code, **kwargs)


class OperationCancelledError(ProviderError):
    """
    Raised when the provider cancels an operation mid-flight.

    This is transient: callers treat it as "please retry", never as an
    account-level failure.
    """

    default_user_message = "The operation was interrupted, please try again"
    retryable = True

    def __init__(self, message: str = "Operation cancelled by provider", **kwargs: Any):
        super().__init__(message, code="OPERATION_CANCELLED", **kwargs)


class AccountDisabledError(ProviderError):
    """Raised when the account has been disabled or banned."""

    default_user_message = "This account has been disabled, please contact support"

    def __init__(self, message: str = "Account disabled", **kwargs: Any):
        super().__init__(message, code="ACCOUNT_DISABLED", **kwargs)


class UnknownProviderError(ProviderError):
    """Raised for provider failures that don't match a known category."""

    def __init__(self, message: str = "Unknown provider error", code: str = "UNKNOWN", **kwargs: Any):
        super().__init__(message, code=code, **kwargs)


# -----------------------------------------------------------------------------
# Local validation (raised before any network call)
# -----------------------------------------------------------------------------


class InvalidEmailError(ValidationError):
    """Raised when an email address is malformed."""

    def __init__(self, email: str):
        super().__init__(
            "Invalid email format",
            code="INVALID_EMAIL",
            details={"email": email},
        )


class WeakPasswordError(ValidationError):
    """Raised when a password is shorter than the configured minimum."""

    def __init__(self, min_length: int):
        super().__init__(
            f"Password must be at least {min_length} characters",
            code="WEAK_PASSWORD",
            details={"min_length": min_length},
        )


# -----------------------------------------------------------------------------
# Verification links
# -----------------------------------------------------------------------------


class LinkError(LocaliteError):
    """Base exception for verification link failures."""

    pass


class NotAVerificationLinkError(LinkError):
    """Raised when a URL is not an email verification link."""

    def __init__(self, url: str):
        super().__init__(
            "Not an email verification link",
            code="NOT_A_VERIFICATION_LINK",
            details={"url": url},
        )


class NoActiveSessionError(LinkError):
    """Raised when a link must be applied but nobody is signed in."""

    def __init__(self):
        super().__init__(
            "No user is currently signed in",
            code="NO_ACTIVE_SESSION",
        )


class LinkRejectedError(LinkError):
    """Raised when the provider refuses a verification link (expired, reused, tampered)."""

    def __init__(self, reason: str):
        super().__init__(
            f"Verification link rejected: {reason}",
            code="LINK_REJECTED",
            details={"reason": reason},
        )
