"""
Session module.

Session controller, restore gate and notification channel.
"""

from .channel import SessionChannel
from .controller import SessionController
from .exceptions import ProfileCreationError, RetryRequiredError
from .gate import AllowRestoreGate
from .models import ResendResult, SignInResult, SignUpResult

__all__ = [
    "SessionController",
    "SessionChannel",
    "AllowRestoreGate",
    "SignInResult",
    "SignUpResult",
    "ResendResult",
    "ProfileCreationError",
    "RetryRequiredError",
]
