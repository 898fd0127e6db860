"""
Shared test fixtures and utilities.

Provides in-memory fakes for the identity provider and the profile store
so session and verification behavior can be tested without Supabase.
"""

import asyncio
from typing import Optional

import pytest

from shared.config import Settings, get_settings
from shared.database import reset_client_cache
from shared.models import Session
from app.dependencies import reset_container
from modules.identity.exceptions import (
    NoActiveSessionError,
    NotAVerificationLinkError,
    ProviderError,
)
from modules.identity.links import parse_verification_link
from modules.identity.models import (
    EmailDispatchResult,
    ErrorDetail,
    LinkConsumeResult,
    SignInOutcome,
    SignUpOutcome,
)
from modules.profiles.exceptions import StoreError
from modules.profiles.models import ProfileRecord, ProfileSeed, StoreResult
from modules.session.controller import SessionController
from modules.verification.cooldown import ResendCooldownGuard
from modules.verification.deep_links import DeepLinkVerificationHandler
from modules.verification.reconciler import VerificationReconciler


TEST_UID = "user-123"
TEST_EMAIL = "traveler@example.com"
TEST_PASSWORD = "secret123"
VERIFY_URL = "localite://auth/verify?token_hash=abc123&type=signup"


class InMemoryProfileStore:
    """
    Dict-backed IProfileStore with failure injection and call counters.

    Set `fail_get` / `fail_create` / `fail_set_verified` to make the
    matching operation return a StoreError. `get_delay` pauses reads so
    tests can interleave other work with a reconciliation in flight.
    """

    def __init__(self) -> None:
        self.records: dict[str, ProfileRecord] = {}
        self.fail_get = False
        self.fail_create = False
        self.fail_set_verified = False
        self.get_delay: float = 0.0
        self.get_calls = 0
        self.create_calls = 0
        self.set_verified_calls = 0

    def seed(self, uid: str = TEST_UID, email: str = TEST_EMAIL, verified: bool = False) -> ProfileRecord:
        record = ProfileRecord(id=uid, email=email, email_confirmed_authoritative=verified)
        self.records[uid] = record
        return record

    async def get(self, uid: str) -> StoreResult[Optional[ProfileRecord]]:
        self.get_calls += 1
        if self.get_delay:
            await asyncio.sleep(self.get_delay)
        if self.fail_get:
            return StoreResult.failure(StoreError("read failed", code="NETWORK_ERROR"))
        return StoreResult.success(self.records.get(uid))

    async def create(self, seed: ProfileSeed) -> StoreResult[ProfileRecord]:
        self.create_calls += 1
        if self.fail_create:
            return StoreResult.failure(StoreError("create failed", code="NETWORK_ERROR"))
        if seed.uid in self.records:
            return StoreResult.success(self.records[seed.uid])
        record = ProfileRecord(
            id=seed.uid,
            email=seed.email,
            email_confirmed_authoritative=seed.email_confirmed_authoritative,
            preferred_language=seed.preferred_language,
        )
        self.records[seed.uid] = record
        return StoreResult.success(record)

    async def set_verified(self, uid: str) -> StoreResult[None]:
        self.set_verified_calls += 1
        if self.fail_set_verified:
            return StoreResult.failure(StoreError("write failed", code="NETWORK_ERROR"))
        record = self.records.get(uid)
        if record is not None and not record.email_confirmed_authoritative:
            self.records[uid] = record.model_copy(update={"email_confirmed_authoritative": True})
        return StoreResult.success(None)


class FakeIdentityProvider:
    """
    Scriptable IIdentityProvider.

    `emit(session)` plays the role of a provider session notification.
    Errors placed in `sign_in_error` / `sign_up_error` are raised once.
    """

    def __init__(self) -> None:
        self.current: Optional[Session] = None
        self.observer = None
        self.sign_in_session = Session(uid=TEST_UID, email=TEST_EMAIL, provider_confirmed=False)
        self.sign_in_error: Optional[ProviderError] = None
        self.sign_up_error: Optional[ProviderError] = None
        self.sign_up_email_sent = True
        self.dispatch_error: Optional[ErrorDetail] = None
        self.reload_error: Optional[ProviderError] = None
        self.confirm_on_link = True
        self.consumed_tokens: set[str] = set()
        self.sign_in_calls = 0
        self.sign_up_calls = 0
        self.sign_out_calls = 0
        self.emails_sent: list[Optional[str]] = []

    def emit(self, session: Optional[Session]) -> None:
        self.current = session
        if self.observer is not None:
            self.observer(session)

    async def sign_up(self, email: str, password: str) -> SignUpOutcome:
        self.sign_up_calls += 1
        if self.sign_up_error is not None:
            error, self.sign_up_error = self.sign_up_error, None
            raise error
        self.current = Session(uid=TEST_UID, email=email, provider_confirmed=False)
        return SignUpOutcome(session=self.current, verification_email_sent=self.sign_up_email_sent)

    async def sign_in(self, email: str, password: str) -> SignInOutcome:
        self.sign_in_calls += 1
        if self.sign_in_error is not None:
            error, self.sign_in_error = self.sign_in_error, None
            raise error
        self.current = self.sign_in_session
        return SignInOutcome(session=self.current)

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        self.current = None

    def observe_session_changes(self, callback) -> None:
        self.observer = callback

    async def reload_session(self) -> Optional[Session]:
        if self.reload_error is not None:
            raise self.reload_error
        return self.current

    async def send_verification_email(self, language_code: Optional[str] = None) -> EmailDispatchResult:
        if self.current is None:
            return EmailDispatchResult(success=False, error=ErrorDetail.from_error(NoActiveSessionError()))
        if self.dispatch_error is not None:
            return EmailDispatchResult(success=False, error=self.dispatch_error)
        self.emails_sent.append(language_code)
        return EmailDispatchResult(success=True)

    def is_verification_link(self, url: str) -> bool:
        return parse_verification_link(url) is not None

    async def consume_verification_link(self, url: str) -> LinkConsumeResult:
        if self.current is None:
            return LinkConsumeResult(success=False, error=ErrorDetail.from_error(NoActiveSessionError()))
        link = parse_verification_link(url)
        if link is None:
            return LinkConsumeResult(
                success=False, error=ErrorDetail.from_error(NotAVerificationLinkError(url))
            )
        if link.token_hash in self.consumed_tokens and not self.current.provider_confirmed:
            return LinkConsumeResult(
                success=False, error=ErrorDetail(code="LINK_REJECTED", message="token reused")
            )
        self.consumed_tokens.add(link.token_hash)
        if self.confirm_on_link:
            self.current = self.current.model_copy(update={"provider_confirmed": True})
        return LinkConsumeResult(success=True)


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now_ms: int = 1_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings, client and container around each test."""
    get_settings.cache_clear()
    reset_client_cache()
    reset_container()
    yield
    get_settings.cache_clear()
    reset_client_cache()
    reset_container()


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the environment and any .env file."""
    return Settings(
        _env_file=None,
        supabase_url="https://test.supabase.co",
        supabase_anon_key="anon-key",
    )


@pytest.fixture
def store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def unverified_session() -> Session:
    return Session(uid=TEST_UID, email=TEST_EMAIL, provider_confirmed=False)


@pytest.fixture
def confirmed_session() -> Session:
    return Session(uid=TEST_UID, email=TEST_EMAIL, provider_confirmed=True)


@pytest.fixture
def reconciler(store: InMemoryProfileStore) -> VerificationReconciler:
    return VerificationReconciler(store, default_language="zh-TW")


@pytest.fixture
def controller(
    identity: FakeIdentityProvider,
    reconciler: VerificationReconciler,
    clock: FakeClock,
    settings: Settings,
) -> SessionController:
    return SessionController(
        identity=identity,
        reconciler=reconciler,
        cooldown=ResendCooldownGuard(settings.resend_cooldown_ms),
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def deep_links(identity: FakeIdentityProvider, controller: SessionController) -> DeepLinkVerificationHandler:
    return DeepLinkVerificationHandler(identity, controller)
