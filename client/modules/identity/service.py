"""
Identity provider implementation backed by Supabase Auth.

Maps Supabase users to Session, Supabase auth errors to the ProviderError
taxonomy, and bounds every call with the configured gateway timeout.
"""

import asyncio
import logging
from typing import Any, Awaitable, Optional
from urllib.parse import urlencode

import httpx
from supabase import AsyncClient, AuthError, AuthRetryableError

from shared.config import Settings, get_settings
from shared.models import Session

from .interfaces import IIdentityProvider, SessionObserver
from .links import parse_verification_link
from .models import (
    EmailDispatchResult,
    ErrorDetail,
    LinkConsumeResult,
    SignInOutcome,
    SignUpOutcome,
)
from .exceptions import (
    ProviderError,
    InvalidCredentialsError,
    EmailAlreadyInUseError,
    EmailNotConfirmedError,
    PasswordRejectedError,
    TooManyRequestsError,
    NetworkUnavailableError,
    OperationCancelledError,
    AccountDisabledError,
    UnknownProviderError,
    NoActiveSessionError,
    NotAVerificationLinkError,
    LinkRejectedError,
)
from .validation import validate_credentials

logger = logging.getLogger(__name__)


_INVALID_CREDENTIALS_CODES = {"invalid_credentials", "invalid_grant"}
_ALREADY_IN_USE_CODES = {"user_already_exists", "email_exists"}
_RATE_LIMIT_CODES = {"over_request_rate_limit", "over_email_send_rate_limit"}
_DISABLED_CODES = {"user_banned"}
_CANCELLED_CODES = {"cancelled", "request_cancelled"}
_SESSION_MISSING_CODES = {"session_not_found", "session_expired"}


def classify_auth_error(error: Exception) -> ProviderError:
    """
    Convert a Supabase Auth (or transport) exception to a ProviderError.

    Args:
        error: Exception raised by the Supabase client

    Returns:
        The matching ProviderError subclass, UnknownProviderError otherwise
    """
    if isinstance(error, ProviderError):
        return error
    if isinstance(error, asyncio.TimeoutError):
        return NetworkUnavailableError("Identity provider call timed out", code="TIMEOUT")
    if isinstance(error, httpx.TransportError):
        return NetworkUnavailableError(f"Identity provider unreachable: {error}")

    code = getattr(error, "code", None) or ""
    status = getattr(error, "status", None)
    message = getattr(error, "message", None) or str(error)

    if code in _CANCELLED_CODES:
        return OperationCancelledError(message)
    if isinstance(error, AuthRetryableError):
        return NetworkUnavailableError(message)
    if code == "email_not_confirmed" or "email not confirmed" in message.lower():
        return EmailNotConfirmedError(message)
    if code in _INVALID_CREDENTIALS_CODES or "invalid login credentials" in message.lower():
        return InvalidCredentialsError(message)
    if code in _ALREADY_IN_USE_CODES:
        return EmailAlreadyInUseError(message)
    if code == "weak_password":
        return PasswordRejectedError(message)
    if code in _RATE_LIMIT_CODES or status == 429:
        return TooManyRequestsError(message)
    if code in _DISABLED_CODES:
        return AccountDisabledError(message)
    if code == "request_timeout" or status == 504:
        return NetworkUnavailableError(message, code="TIMEOUT")

    return UnknownProviderError(
        message,
        code=f"PROVIDER_{code.upper()}" if code else "UNKNOWN",
        details={"status": status} if status is not None else None,
    )


class SupabaseIdentityProvider(IIdentityProvider):
    """
    Identity gateway over Supabase Auth.

    Keeps a copy of the current session as last reported by the provider
    (sign-in/up responses, auth state events, reloads) so link consumption
    and email dispatch can check for a signed-in user without a round trip.
    """

    def __init__(self, client: AsyncClient, settings: Optional[Settings] = None):
        self._client = client
        self._settings = settings or get_settings()
        self._current: Optional[Session] = None
        self._observer: Optional[SessionObserver] = None
        self._subscription: Any = None

    @property
    def current_session(self) -> Optional[Session]:
        return self._current

    async def sign_up(self, email: str, password: str) -> SignUpOutcome:
        """Create the account; Supabase sends the confirmation email itself."""
        email = validate_credentials(email, password, self._settings.min_password_length)

        try:
            response = await self._bounded(
                self._client.auth.sign_up(
                    {
                        "email": email,
                        "password": password,
                        "options": {
                            "email_redirect_to": self._redirect_url(self._settings.default_language),
                            "data": {"preferred_language": self._settings.default_language},
                        },
                    }
                )
            )
        except (AuthError, httpx.HTTPError, asyncio.TimeoutError) as e:
            raise classify_auth_error(e)

        if response.user is None:
            raise UnknownProviderError("Sign-up returned no user", code="EMPTY_RESPONSE")

        session = self._map_user(response.user)
        self._current = session

        if session.provider_confirmed:
            return SignUpOutcome(session=session, verification_email_sent=False)

        if getattr(response.user, "confirmation_sent_at", None) is not None:
            return SignUpOutcome(session=session, verification_email_sent=True)

        # Confirmation mail wasn't reported as sent; try once explicitly.
        dispatch = await self.send_verification_email(self._settings.default_language)
        return SignUpOutcome(
            session=session,
            verification_email_sent=dispatch.success,
            verification_email_error=dispatch.error.message if dispatch.error else None,
        )

    async def sign_in(self, email: str, password: str) -> SignInOutcome:
        """Sign in with email and password."""
        email = validate_credentials(email, password, self._settings.min_password_length)

        try:
            response = await self._bounded(
                self._client.auth.sign_in_with_password({"email": email, "password": password})
            )
        except (AuthError, httpx.HTTPError, asyncio.TimeoutError) as e:
            raise classify_auth_error(e)

        if response.user is None:
            raise UnknownProviderError("Sign-in returned no user", code="EMPTY_RESPONSE")

        session = self._map_user(response.user)
        self._current = session
        return SignInOutcome(session=session)

    async def sign_out(self) -> None:
        """Sign out; a missing provider session is not an error."""
        self._current = None
        try:
            await self._bounded(self._client.auth.sign_out())
        except (AuthError, httpx.HTTPError, asyncio.TimeoutError) as e:
            if getattr(e, "code", None) in _SESSION_MISSING_CODES or getattr(e, "status", None) == 401:
                logger.debug("Sign-out with no provider session, nothing to do")
                return
            raise classify_auth_error(e)

    def observe_session_changes(self, callback: SessionObserver) -> None:
        """Register the single session observer, replacing any previous one."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            logger.debug("Replaced previous session observer")

        self._observer = callback
        self._subscription = self._client.auth.on_auth_state_change(self._on_auth_state_change)

    async def reload_session(self) -> Optional[Session]:
        """Fetch the user from the provider to refresh the confirmation claim."""
        if self._current is None:
            return None

        try:
            response = await self._bounded(self._client.auth.get_user())
        except (AuthError, httpx.HTTPError, asyncio.TimeoutError) as e:
            raise classify_auth_error(e)

        if response is None or response.user is None:
            # No access token yet (unconfirmed sign-up): the cached claim is all we have.
            return self._current

        self._current = self._map_user(response.user)
        return self._current

    async def send_verification_email(
        self,
        language_code: Optional[str] = None,
    ) -> EmailDispatchResult:
        """Resend the signup confirmation email to the current user."""
        if self._current is None:
            return EmailDispatchResult(
                success=False,
                error=ErrorDetail.from_error(NoActiveSessionError()),
            )

        language = language_code or self._settings.default_language
        try:
            await self._bounded(
                self._client.auth.resend(
                    {
                        "type": "signup",
                        "email": self._current.email,
                        "options": {"email_redirect_to": self._redirect_url(language)},
                    }
                )
            )
        except (AuthError, httpx.HTTPError, asyncio.TimeoutError) as e:
            error = classify_auth_error(e)
            logger.warning(
                f"Verification email dispatch failed for {self._current.uid}: {error.message}"
            )
            return EmailDispatchResult(success=False, error=ErrorDetail.from_error(error))

        logger.info(f"Verification email sent to user {self._current.uid}")
        return EmailDispatchResult(success=True)

    def is_verification_link(self, url: str) -> bool:
        return parse_verification_link(url) is not None

    async def consume_verification_link(self, url: str) -> LinkConsumeResult:
        """Apply a verification link; re-applying on a confirmed user succeeds."""
        if self._current is None:
            return LinkConsumeResult(
                success=False,
                error=ErrorDetail.from_error(NoActiveSessionError()),
            )

        link = parse_verification_link(url)
        if link is None:
            return LinkConsumeResult(
                success=False,
                error=ErrorDetail.from_error(NotAVerificationLinkError(url)),
            )

        try:
            if link.token_hash:
                response = await self._bounded(
                    self._client.auth.verify_otp({"type": link.type, "token_hash": link.token_hash})
                )
            else:
                response = await self._bounded(
                    self._client.auth.set_session(link.access_token, link.refresh_token)
                )
        except (AuthError, httpx.HTTPError, asyncio.TimeoutError) as e:
            return await self._recover_consumed_link(classify_auth_error(e))

        if response is not None and response.user is not None:
            self._current = self._map_user(response.user)
        return LinkConsumeResult(success=True)

    # -------------------------------------------------------------------------
    # Private helpers
    # -------------------------------------------------------------------------

    async def _recover_consumed_link(self, error: ProviderError) -> LinkConsumeResult:
        """
        Decide the outcome of a rejected link.

        Verification tokens are single-use, so the second application of a
        link fails at the provider. If the user is already confirmed the
        link has done its job and the call still succeeds.
        """
        try:
            session = await self.reload_session()
        except ProviderError as reload_error:
            logger.warning(f"Could not reload session after link rejection: {reload_error.message}")
            session = None

        if session is not None and session.provider_confirmed:
            logger.info(f"Verification link already applied for user {session.uid}")
            return LinkConsumeResult(success=True)

        logger.warning(f"Verification link rejected: {error.message}")
        return LinkConsumeResult(
            success=False,
            error=ErrorDetail.from_error(LinkRejectedError(error.message)),
        )

    def _on_auth_state_change(self, event: Any, supabase_session: Any) -> None:
        """Forward Supabase auth events to the registered observer."""
        user = getattr(supabase_session, "user", None) if supabase_session else None
        session = self._map_user(user) if user is not None else None
        self._current = session
        logger.debug(f"Auth state change {event}: {'signed in' if session else 'signed out'}")

        if self._observer is not None:
            self._observer(session)

    async def _bounded(self, operation: Awaitable[Any]) -> Any:
        return await asyncio.wait_for(operation, timeout=self._settings.gateway_timeout_seconds)

    def _redirect_url(self, language: str) -> str:
        base = self._settings.verification_redirect_url
        separator = "&" if "?" in base else "?"
        return f"{base}{separator}{urlencode({'lang': language})}"

    @staticmethod
    def _map_user(user: Any) -> Session:
        """Convert a Supabase user to the internal Session."""
        return Session(
            uid=str(user.id),
            email=user.email or "",
            provider_confirmed=getattr(user, "email_confirmed_at", None) is not None,
        )
