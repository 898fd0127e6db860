"""
Identity module interface.

The session controller and deep link handler depend on IIdentityProvider,
not on Supabase. This enables testing with fakes and swapping providers.
"""

from typing import Callable, Optional, Protocol, runtime_checkable

from shared.models import Session

from .models import EmailDispatchResult, LinkConsumeResult, SignInOutcome, SignUpOutcome

SessionObserver = Callable[[Optional[Session]], None]


@runtime_checkable
class IIdentityProvider(Protocol):
    """
    Interface for the hosted identity provider.

    Methods that talk to the provider may raise ProviderError subclasses,
    except send_verification_email and consume_verification_link which
    always resolve to a result object.
    """

    async def sign_up(self, email: str, password: str) -> SignUpOutcome:
        """
        Create an account and dispatch the verification email.

        Raises:
            ValidationError: If email or password fail local checks
            ProviderError: If the provider rejects the sign-up
        """
        ...

    async def sign_in(self, email: str, password: str) -> SignInOutcome:
        """
        Sign in with email and password.

        Raises:
            ValidationError: If email or password fail local checks
            InvalidCredentialsError, EmailNotConfirmedError,
            TooManyRequestsError, NetworkUnavailableError,
            OperationCancelledError, AccountDisabledError,
            UnknownProviderError
        """
        ...

    async def sign_out(self) -> None:
        """Sign out. Calling it with nobody signed in is a no-op."""
        ...

    def observe_session_changes(self, callback: SessionObserver) -> None:
        """
        Register the single observer of local session changes.

        The callback receives the new Session, or None when signed out.
        Registering again replaces the previous observer.
        """
        ...

    async def reload_session(self) -> Optional[Session]:
        """
        Refresh the provider's local claim and return the session.

        Returns:
            The refreshed Session, or None if nobody is signed in
        """
        ...

    async def send_verification_email(
        self,
        language_code: Optional[str] = None,
    ) -> EmailDispatchResult:
        """Send a verification email to the signed-in user. Never raises."""
        ...

    def is_verification_link(self, url: str) -> bool:
        """Whether a URL completes an email verification."""
        ...

    async def consume_verification_link(self, url: str) -> LinkConsumeResult:
        """
        Apply a verification link to the signed-in session.

        Fails with NO_ACTIVE_SESSION when nobody is signed in. Applying a
        link that was already applied to a confirmed session succeeds.
        """
        ...
