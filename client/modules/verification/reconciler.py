"""
Verification reconciler.

Computes the authoritative VerificationState for a session from two
sources that can disagree: the provider's confirmation claim and the
profile record. The profile record wins; the provider claim can only
advance a record from unverified to verified (sync-back), never the
reverse.

Store failures are logged and swallowed, including exceptions a store
raises instead of returning. They degrade the result to
PENDING_VERIFICATION and never abort the caller.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from shared.models import Session
from modules.profiles.exceptions import StoreError
from modules.profiles.interfaces import IProfileStore
from modules.profiles.models import ProfileRecord, ProfileSeed, StoreResult

from .models import Reconciliation, VerificationState

logger = logging.getLogger(__name__)


class VerificationReconciler:
    """
    The only component that reads or writes the authoritative flag.

    A call performs at most three sequential store operations (read,
    optional create, optional write) and at most one write.
    """

    def __init__(self, profiles: IProfileStore, default_language: str = "zh-TW"):
        self._profiles = profiles
        self._default_language = default_language

    async def reconcile(self, session: Optional[Session]) -> VerificationState:
        """Return the verification state for a session."""
        return (await self.reconcile_with_record(session)).state

    async def reconcile_with_record(self, session: Optional[Session]) -> Reconciliation:
        """
        Reconcile and also return the profile record used for the decision.

        Args:
            session: Current provider session, or None

        Returns:
            Reconciliation with the state, the record (when readable) and
            whether a sync-back write was performed
        """
        if session is None:
            return Reconciliation(state=VerificationState.NONE)

        found = await self._guarded("get", session.uid, self._profiles.get, session.uid)
        if not found.ok:
            logger.warning(
                f"Profile read failed for {session.uid}, falling back to pending verification: "
                f"{found.error.message}"
            )
            return Reconciliation(state=VerificationState.PENDING_VERIFICATION)

        record = found.data
        if record is None:
            created = await self._guarded(
                "create",
                session.uid,
                self._profiles.create,
                ProfileSeed(
                    uid=session.uid,
                    email=session.email,
                    email_confirmed_authoritative=session.provider_confirmed,
                    preferred_language=self._default_language,
                ),
            )
            if not created.ok:
                logger.warning(
                    f"Profile create failed for {session.uid}, falling back to pending verification: "
                    f"{created.error.message}"
                )
                return Reconciliation(state=VerificationState.PENDING_VERIFICATION)
            record = created.data
            logger.info(
                f"Created profile for {session.uid} "
                f"(email_confirmed_authoritative={record.email_confirmed_authoritative})"
            )

        if record.email_confirmed_authoritative:
            return Reconciliation(state=VerificationState.VERIFIED, record=record)

        if not session.provider_confirmed:
            logger.debug(f"User {session.uid} not verified by store or provider")
            return Reconciliation(state=VerificationState.PENDING_VERIFICATION, record=record)

        # Provider is ahead of the store: advance the record.
        synced = await self._guarded("set_verified", session.uid, self._profiles.set_verified, session.uid)
        if not synced.ok:
            logger.warning(
                f"Sync-back of provider confirmation failed for {session.uid}: {synced.error.message}"
            )
            return Reconciliation(state=VerificationState.PENDING_VERIFICATION, record=record)

        logger.info(f"Synced provider confirmation to profile for {session.uid}")
        verified = record.model_copy(update={"email_confirmed_authoritative": True})
        return Reconciliation(state=VerificationState.VERIFIED, record=verified, synced_back=True)

    async def create_profile(
        self,
        session: Session,
        preferred_language: Optional[str] = None,
    ) -> StoreResult[ProfileRecord]:
        """
        Create the profile record for a freshly signed-up user.

        An existing record is returned unchanged, so a retried sign-up
        never resets the authoritative flag.
        """
        created = await self._guarded(
            "create",
            session.uid,
            self._profiles.create,
            ProfileSeed(
                uid=session.uid,
                email=session.email,
                email_confirmed_authoritative=session.provider_confirmed,
                preferred_language=preferred_language or self._default_language,
            ),
        )
        if created.ok:
            logger.info(f"Profile ready for new user {session.uid}")
        else:
            logger.error(f"Profile creation failed for new user {session.uid}: {created.error.message}")
        return created

    async def _guarded(
        self,
        operation: str,
        uid: str,
        call: Callable[..., Awaitable[StoreResult[Any]]],
        *args: Any,
    ) -> StoreResult[Any]:
        """Await a store call, turning anything it raises into a failed StoreResult."""
        try:
            return await call(*args)
        except Exception:
            logger.exception(f"Profile store {operation} raised for {uid}")
            return StoreResult.failure(
                StoreError(
                    f"Profile store {operation} raised unexpectedly",
                    code="STORE_EXCEPTION",
                    details={"operation": operation, "uid": uid},
                )
            )
