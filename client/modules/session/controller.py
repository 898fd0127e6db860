"""
Session controller.

Owns the app's view of who is signed in and whether their email is
verified. It combines three inputs:

- explicit user actions (sign-in, sign-up, sign-out, guest mode)
- session notifications from the identity provider
- verification links, via DeepLinkVerificationHandler

Provider notifications go through a single-consumer channel, so they are
handled in arrival order. Reconciliation for one uid is serialized by a
per-uid lock, and an epoch counter bumped on every clear makes a
reconciliation that was started before a sign-out discard its result.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from shared.config import Settings, get_settings
from shared.models import Session
from modules.identity.exceptions import (
    NoActiveSessionError,
    OperationCancelledError,
    ProviderError,
)
from modules.identity.interfaces import IIdentityProvider
from modules.identity.models import ErrorDetail
from modules.identity.validation import validate_credentials
from modules.verification import access
from modules.verification.cooldown import ResendCooldownGuard
from modules.verification.models import VerificationState
from modules.verification.reconciler import VerificationReconciler

from .channel import SessionChannel
from .exceptions import ProfileCreationError, RetryRequiredError
from .gate import AllowRestoreGate
from .models import ResendResult, SignInResult, SignUpResult

logger = logging.getLogger(__name__)

StateListener = Callable[[VerificationState], None]


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class SessionController:
    """
    Single owner of session and verification state.

    The controller subscribes to the identity provider on construction.
    Provider notifications must be delivered on the event loop thread.
    """

    def __init__(
        self,
        identity: IIdentityProvider,
        reconciler: VerificationReconciler,
        cooldown: Optional[ResendCooldownGuard] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self._settings = settings or get_settings()
        self._identity = identity
        self._reconciler = reconciler
        self._cooldown = cooldown or ResendCooldownGuard(self._settings.resend_cooldown_ms)
        self._clock = clock or _wall_clock_ms

        self._gate = AllowRestoreGate()
        self._session: Optional[Session] = None
        self._state = VerificationState.NONE
        self._is_guest = False
        self._preferred_language = self._settings.default_language
        self._epoch = 0
        self._locks: dict[str, asyncio.Lock] = {}
        self._listeners: list[StateListener] = []

        self._channel = SessionChannel(self._handle_session_change)
        self._identity.observe_session_changes(self._channel.submit)

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def state(self) -> VerificationState:
        return self._state

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_guest(self) -> bool:
        return self._is_guest

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def allow_restore(self) -> bool:
        """Whether provider-restored sessions are currently adopted."""
        return self._gate.is_open

    @property
    def preferred_language(self) -> str:
        return self._preferred_language

    def resend_retry_after_ms(self) -> int:
        """Milliseconds until the verification email may be resent."""
        return self._cooldown.remaining_ms(self._clock())

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, listener: StateListener) -> None:
        """Register a callback invoked with every new verification state."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def wait_for_notifications(self) -> None:
        """Wait until every queued provider notification has been handled."""
        await self._channel.join()

    async def close(self) -> None:
        await self._channel.close()

    # -------------------------------------------------------------------------
    # Explicit user actions
    # -------------------------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> SignInResult:
        """
        Sign in with email and password and reconcile verification state.

        When the user is still unverified and resending on sign-in is
        enabled, a reminder email is attempted (subject to the cooldown).

        Raises:
            ValidationError: Malformed email or short password (no I/O done)
            RetryRequiredError: The provider cancelled the request
            ProviderError: Any other provider failure
        """
        email = validate_credentials(email, password, self._settings.min_password_length)
        self._gate.open("sign-in")

        try:
            outcome = await self._identity.sign_in(email, password)
        except OperationCancelledError as e:
            self._close_gate_if_idle("sign-in cancelled")
            logger.warning(f"Sign-in cancelled by provider for {email}")
            raise RetryRequiredError("Sign-in", original_code=e.code) from e
        except ProviderError as e:
            self._close_gate_if_idle("sign-in failed")
            logger.warning(f"Sign-in failed for {email}: {e.code}")
            raise

        state = await self._adopt(outcome.session)
        logger.info(f"User {outcome.session.uid} signed in ({state.value})")

        email_sent: Optional[bool] = None
        if (
            state == VerificationState.PENDING_VERIFICATION
            and self._settings.resend_verification_on_sign_in
        ):
            resend = await self.resend_verification_email()
            email_sent = resend.sent

        return SignInResult(
            session=outcome.session,
            state=state,
            verification_email_sent=email_sent,
        )

    async def sign_up(self, email: str, password: str) -> SignUpResult:
        """
        Create an account, its profile record and reconcile.

        The profile record is created immediately, independent of any
        later sign-in.

        Raises:
            ValidationError: Malformed email or short password (no I/O done)
            RetryRequiredError: The provider cancelled the request
            ProviderError: Any other provider failure
            ProfileCreationError: The account exists but its profile could
                not be stored
        """
        email = validate_credentials(email, password, self._settings.min_password_length)
        self._gate.open("sign-up")

        try:
            outcome = await self._identity.sign_up(email, password)
        except OperationCancelledError as e:
            self._close_gate_if_idle("sign-up cancelled")
            logger.warning(f"Sign-up cancelled by provider for {email}")
            raise RetryRequiredError("Sign-up", original_code=e.code) from e
        except ProviderError as e:
            self._close_gate_if_idle("sign-up failed")
            logger.warning(f"Sign-up failed for {email}: {e.code}")
            raise

        session = outcome.session
        created = await self._reconciler.create_profile(session, self._preferred_language)
        if not created.ok:
            raise ProfileCreationError(session.uid, created.error)

        if outcome.verification_email_sent:
            self._cooldown.record_sent(self._clock())

        state = await self._adopt(session)
        logger.info(f"User {session.uid} signed up ({state.value})")

        return SignUpResult(
            session=session,
            state=state,
            email=session.email,
            needs_email_verification=not session.provider_confirmed,
            verification_email_sent=outcome.verification_email_sent,
            verification_email_error=outcome.verification_email_error,
        )

    async def sign_out(self) -> None:
        """
        Sign out.

        Local state is cleared before the provider call, so any
        notification or reconciliation racing with it cannot bring the
        session back.
        """
        uid = self._session.uid if self._session else None
        self._gate.close("sign-out")
        self._clear()
        self._is_guest = False

        try:
            await self._identity.sign_out()
        except ProviderError as e:
            logger.warning(f"Provider sign-out failed for {uid}: {e.code}")
            raise

        logger.info(f"User {uid} signed out")

    def enter_guest_mode(self) -> None:
        """Browse without an account. Any adopted session is dropped locally."""
        self._gate.close("guest mode")
        self._epoch += 1
        self._session = None
        self._is_guest = True
        self._publish(VerificationState.GUEST)
        logger.info("Entered guest mode")

    def exit_guest_mode(self) -> None:
        if not self._is_guest:
            return
        self._is_guest = False
        self._publish(VerificationState.NONE)
        logger.info("Exited guest mode")

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    async def on_foreground(self) -> VerificationState:
        """
        Re-check verification when the app returns to the foreground.

        Only pending users are re-checked; the link may have been opened
        in another app or on another device.
        """
        if self._session is None or self._state != VerificationState.PENDING_VERIFICATION:
            return self._state
        logger.debug(f"App foregrounded, re-checking verification for {self._session.uid}")
        return await self.refresh_verification()

    async def refresh_verification(self) -> VerificationState:
        """Reload the provider session and reconcile it."""
        if self._session is None:
            return self._state

        try:
            session = await self._identity.reload_session()
        except ProviderError as e:
            logger.warning(f"Session reload failed, keeping {self._state.value}: {e.code}")
            return self._state

        if session is None:
            logger.info("Provider no longer has a session, clearing")
            self._clear()
            return self._state

        return await self._adopt(session)

    async def resend_verification_email(self) -> ResendResult:
        """Send the verification email again, subject to the cooldown."""
        if self._session is None:
            return ResendResult(sent=False, error=ErrorDetail.from_error(NoActiveSessionError()))

        now = self._clock()
        if not self._cooldown.can_send(now):
            remaining = self._cooldown.remaining_ms(now)
            logger.debug(f"Verification email resend denied, {remaining}ms remaining")
            return ResendResult(sent=False, retry_after_ms=remaining)

        result = await self._identity.send_verification_email(
            language_code=self._preferred_language
        )
        if not result.success:
            logger.warning(f"Verification email resend failed: {result.error.code}")
            return ResendResult(sent=False, error=result.error)

        self._cooldown.record_sent(now)
        logger.info(f"Verification email resent to {self._session.email}")
        return ResendResult(sent=True, retry_after_ms=self._cooldown.window_ms)

    async def adopt_link_session(self, session: Session) -> VerificationState:
        """
        Adopt the session a verification link was applied to.

        Opening a verification link counts as an explicit action, so the
        restore gate is opened first.
        """
        self._gate.open("verification link")
        return await self._adopt(session)

    # -------------------------------------------------------------------------
    # Feature access
    # -------------------------------------------------------------------------

    def can_access_feature(self, feature: str) -> bool:
        return access.can_access_feature(
            self._state, self._is_guest, self.is_authenticated, feature
        )

    def should_prompt_login(self, feature: str) -> bool:
        return access.should_prompt_login(self._is_guest, feature)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _handle_session_change(self, session: Optional[Session]) -> None:
        if session is None:
            if self._session is not None:
                logger.info(f"Provider cleared session for {self._session.uid}")
            self._clear()
            return

        if not self._gate.admits(session):
            logger.info(f"Ignoring restored session for {session.uid}: no explicit sign-in yet")
            return

        await self._adopt(session)

    async def _adopt(self, session: Session) -> VerificationState:
        epoch = self._epoch
        async with self._lock_for(session.uid):
            if epoch != self._epoch:
                logger.debug(f"Dropping stale reconciliation for {session.uid}")
                return self._state

            reconciliation = await self._reconciler.reconcile_with_record(session)

            if epoch != self._epoch or not self._gate.is_open:
                logger.debug(f"Session for {session.uid} cleared during reconciliation")
                return self._state

            self._session = session
            self._is_guest = False
            if reconciliation.record is not None:
                self._preferred_language = reconciliation.record.preferred_language
            self._publish(reconciliation.state)
            return reconciliation.state

    def _lock_for(self, uid: str) -> asyncio.Lock:
        lock = self._locks.get(uid)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[uid] = lock
        return lock

    def _clear(self) -> None:
        self._epoch += 1
        self._session = None
        # Held locks belong to reconciliations that now fail the epoch check.
        self._locks = {uid: lock for uid, lock in self._locks.items() if lock.locked()}
        self._preferred_language = self._settings.default_language
        self._publish(VerificationState.NONE)

    def _close_gate_if_idle(self, reason: str) -> None:
        if self._session is None:
            self._gate.close(reason)

    def _publish(self, state: VerificationState) -> None:
        if state == self._state:
            return
        logger.info(f"Verification state {self._state.value} -> {state.value}")
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Verification state listener failed")
