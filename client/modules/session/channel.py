"""
Single-consumer channel for provider session notifications.

The identity provider reports session changes through a plain callback.
Handling a notification involves store round trips, so notifications are
queued and handled one at a time, in arrival order, by a single consumer
task. A slow reconciliation can therefore never overtake a newer
notification (such as a sign-out).
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from shared.models import Session

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[Optional[Session]], Awaitable[None]]


class SessionChannel:
    """
    Queue of session notifications drained by one consumer task.

    Usage:
        channel = SessionChannel(controller_handler)
        identity.observe_session_changes(channel.submit)
        ...
        await channel.join()  # wait until every queued notification is handled
    """

    def __init__(self, handler: NotificationHandler) -> None:
        self._handler = handler
        self._queue: asyncio.Queue[Optional[Session]] = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        """Number of notifications not yet handled."""
        return self._queue.qsize()

    def submit(self, session: Optional[Session]) -> None:
        """
        Enqueue a notification. Must be called from the event loop thread.

        Starts the consumer task if none is running.
        """
        loop = asyncio.get_running_loop()
        self._queue.put_nowait(session)
        if self._consumer is None or self._consumer.done():
            self._consumer = loop.create_task(self._consume())

    async def join(self) -> None:
        """Wait until all submitted notifications have been handled."""
        await self._queue.join()

    async def close(self) -> None:
        """Stop the consumer; queued notifications are dropped."""
        if self._consumer is not None and not self._consumer.done():
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

    async def _consume(self) -> None:
        while not self._queue.empty():
            session = self._queue.get_nowait()
            try:
                await self._handler(session)
            except Exception:
                # A failing notification must not stall the ones behind it.
                logger.exception("Session notification handler failed")
            finally:
                self._queue.task_done()
