"""Tests for modules/session/channel.py."""

import asyncio

import pytest

from shared.models import Session
from modules.session.channel import SessionChannel


def make_session(uid: str) -> Session:
    return Session(uid=uid, email=f"{uid}@example.com")


class TestSessionChannel:
    @pytest.mark.asyncio
    async def test_handles_in_arrival_order(self):
        """Notifications are handled one at a time in submission order."""
        seen = []
        active = 0
        max_active = 0

        async def handler(session):
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            await asyncio.sleep(0.01 if session and session.uid == "a" else 0)
            seen.append(session.uid if session else None)
            active -= 1

        channel = SessionChannel(handler)
        channel.submit(make_session("a"))
        channel.submit(None)
        channel.submit(make_session("b"))
        await channel.join()

        assert seen == ["a", None, "b"]
        assert max_active == 1

    @pytest.mark.asyncio
    async def test_handler_failure_does_not_stall_queue(self):
        """A failing notification is logged and the next one still runs."""
        seen = []

        async def handler(session):
            if session is None:
                raise RuntimeError("boom")
            seen.append(session.uid)

        channel = SessionChannel(handler)
        channel.submit(None)
        channel.submit(make_session("a"))
        await channel.join()

        assert seen == ["a"]

    @pytest.mark.asyncio
    async def test_consumer_restarts_after_idle(self):
        """Submissions after the queue drained are still handled."""
        seen = []

        async def handler(session):
            seen.append(session.uid)

        channel = SessionChannel(handler)
        channel.submit(make_session("a"))
        await channel.join()
        channel.submit(make_session("b"))
        await channel.join()

        assert seen == ["a", "b"]
        assert channel.pending == 0

    @pytest.mark.asyncio
    async def test_close_drops_pending(self):
        """Closing stops the consumer and empties the queue."""
        started = asyncio.Event()

        async def handler(session):
            started.set()
            await asyncio.sleep(10)

        channel = SessionChannel(handler)
        channel.submit(make_session("a"))
        channel.submit(make_session("b"))
        await started.wait()

        await channel.close()

        assert channel.pending == 0
        await asyncio.wait_for(channel.join(), timeout=1)
