"""
Identity module.

Narrow gateway over the hosted identity provider: sign-in/up/out, session
observation and reload, verification email dispatch, and verification
link handling.

Public API:
- IIdentityProvider: Interface for identity provider operations
- SignInOutcome / SignUpOutcome / EmailDispatchResult / LinkConsumeResult
- Provider exceptions: InvalidCredentialsError, OperationCancelledError, etc.
- Validation exceptions: InvalidEmailError, WeakPasswordError
- Link exceptions: NotAVerificationLinkError, NoActiveSessionError
"""

from .interfaces import IIdentityProvider, SessionObserver
from .models import (
    ErrorDetail,
    SignInOutcome,
    SignUpOutcome,
    EmailDispatchResult,
    LinkConsumeResult,
)
from .exceptions import (
    ProviderError,
    InvalidCredentialsError,
    EmailNotConfirmedError,
    EmailAlreadyInUseError,
    PasswordRejectedError,
    TooManyRequestsError,
    NetworkUnavailableError,
    OperationCancelledError,
    AccountDisabledError,
    UnknownProviderError,
    InvalidEmailError,
    WeakPasswordError,
    LinkError,
    NotAVerificationLinkError,
    NoActiveSessionError,
    LinkRejectedError,
)

__all__ = [
    # Interface
    "IIdentityProvider",
    "SessionObserver",
    # Models
    "ErrorDetail",
    "SignInOutcome",
    "SignUpOutcome",
    "EmailDispatchResult",
    "LinkConsumeResult",
    # Provider exceptions
    "ProviderError",
    "InvalidCredentialsError",
    "EmailNotConfirmedError",
    "EmailAlreadyInUseError",
    "PasswordRejectedError",
    "TooManyRequestsError",
    "NetworkUnavailableError",
    "OperationCancelledError",
    "AccountDisabledError",
    "UnknownProviderError",
    # Validation exceptions
    "InvalidEmailError",
    "WeakPasswordError",
    # Link exceptions
    "LinkError",
    "NotAVerificationLinkError",
    "NoActiveSessionError",
    "LinkRejectedError",
]
