"""Tests for modules/verification/deep_links.py."""

from unittest.mock import AsyncMock

import pytest

from shared.models import Session
from modules.identity.exceptions import NetworkUnavailableError
from modules.verification.deep_links import DeepLinkVerificationHandler
from modules.verification.models import LinkStage, VerificationState


VERIFY_URL = "localite://auth/verify?token_hash=abc123&type=signup"


async def sign_in_unverified(controller, store):
    store.seed(verified=False)
    await controller.sign_in("traveler@example.com", "secret123")
    assert controller.state == VerificationState.PENDING_VERIFICATION


class TestHandleUrl:
    @pytest.mark.asyncio
    async def test_link_verifies_pending_user(self, deep_links, controller, store):
        """A consumed link with a confirmed reload syncs back and verifies."""
        await sign_in_unverified(controller, store)

        result = await deep_links.handle_url(VERIFY_URL)

        assert result.success is True
        assert result.stage == LinkStage.RECONCILED
        assert result.state == VerificationState.VERIFIED
        assert controller.state == VerificationState.VERIFIED
        assert store.records["user-123"].email_confirmed_authoritative is True
        assert store.set_verified_calls == 1

    @pytest.mark.asyncio
    async def test_same_link_twice_is_idempotent(self, deep_links, controller, store):
        """Re-applying a link on a verified session succeeds without new writes."""
        await sign_in_unverified(controller, store)

        first = await deep_links.handle_url(VERIFY_URL)
        second = await deep_links.handle_url(VERIFY_URL)

        assert first.success is True
        assert second.success is True
        assert store.records["user-123"].email_confirmed_authoritative is True
        assert store.set_verified_calls == 1

    @pytest.mark.asyncio
    async def test_other_links_forwarded(self, identity, controller):
        """Non-verification links are handed to the host app."""
        on_other = AsyncMock()
        handler = DeepLinkVerificationHandler(identity, controller, on_other_link=on_other)

        result = await handler.handle_url("localite://places/42")

        assert result.stage == LinkStage.FORWARDED
        assert result.success is False
        on_other.assert_awaited_once_with("localite://places/42")

    @pytest.mark.asyncio
    async def test_other_links_without_handler(self, deep_links):
        """Without a host handler, other links are ignored."""
        result = await deep_links.handle_url("localite://places/42")

        assert result.stage == LinkStage.FORWARDED

    @pytest.mark.asyncio
    async def test_link_without_session_fails(self, deep_links, controller):
        """A link opened while signed out is not applied."""
        result = await deep_links.handle_url(VERIFY_URL)

        assert result.success is False
        assert result.stage == LinkStage.CLASSIFIED
        assert result.error.code == "NO_ACTIVE_SESSION"
        assert controller.state == VerificationState.NONE

    @pytest.mark.asyncio
    async def test_rejected_link_keeps_state(self, deep_links, controller, identity, store):
        """A rejected link leaves the user pending."""
        await sign_in_unverified(controller, store)
        identity.consumed_tokens.add("abc123")

        result = await deep_links.handle_url(VERIFY_URL)

        assert result.success is False
        assert result.error.code == "LINK_REJECTED"
        assert controller.state == VerificationState.PENDING_VERIFICATION

    @pytest.mark.asyncio
    async def test_reload_failure_after_consume(self, deep_links, controller, identity, store):
        """The link counts as applied even when the reload fails."""
        await sign_in_unverified(controller, store)
        identity.reload_error = NetworkUnavailableError()

        result = await deep_links.handle_url(VERIFY_URL)

        assert result.success is True
        assert result.stage == LinkStage.CONSUMED
        assert result.error.code == "NETWORK_UNAVAILABLE"
        assert controller.state == VerificationState.PENDING_VERIFICATION

    @pytest.mark.asyncio
    async def test_link_opens_restore_gate(self, deep_links, controller, identity, store):
        """A restored session is adopted once a verification link is opened."""
        store.seed(verified=False)
        identity.emit(Session(uid="user-123", email="traveler@example.com"))
        await controller.wait_for_notifications()
        assert controller.state == VerificationState.NONE

        result = await deep_links.handle_url(VERIFY_URL)

        assert result.state == VerificationState.VERIFIED
        assert controller.allow_restore is True
        assert controller.session.uid == "user-123"


class TestHandleInitialUrl:
    @pytest.mark.asyncio
    async def test_no_launch_url(self, deep_links):
        """Nothing to do without a launch URL."""
        assert await deep_links.handle_initial_url(None) is None

    @pytest.mark.asyncio
    async def test_launch_url_handled(self, deep_links, controller, store):
        """A launch URL goes through the same pipeline."""
        await sign_in_unverified(controller, store)

        result = await deep_links.handle_initial_url(VERIFY_URL)

        assert result.state == VerificationState.VERIFIED
