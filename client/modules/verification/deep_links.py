"""
Deep link verification handler.

Every URL the app is opened with goes through a fixed pipeline:

    received -> classified -> consumed -> reconciled

URLs that are not verification links stop at classification and are
handed back to the host app. Links are handled one at a time, in the
order they arrive.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from modules.identity.exceptions import ProviderError
from modules.identity.interfaces import IIdentityProvider
from modules.identity.models import ErrorDetail

from .models import LinkHandlingResult, LinkStage

if TYPE_CHECKING:
    from modules.session.controller import SessionController

logger = logging.getLogger(__name__)

OtherLinkHandler = Callable[[str], Awaitable[None]]


class DeepLinkVerificationHandler:
    """
    Applies email verification links and reconciles the result.

    Example:
        handler = DeepLinkVerificationHandler(identity, controller, on_other_link=router.open)
        await handler.handle_initial_url(launch_url)
        ...
        await handler.handle_url(url)  # for each link opened while running
    """

    def __init__(
        self,
        identity: IIdentityProvider,
        controller: "SessionController",
        on_other_link: Optional[OtherLinkHandler] = None,
    ):
        self._identity = identity
        self._controller = controller
        self._on_other_link = on_other_link
        self._lock = asyncio.Lock()

    async def handle_initial_url(self, url: Optional[str]) -> Optional[LinkHandlingResult]:
        """Handle the URL the app was launched with, if any."""
        if not url:
            return None
        logger.debug("Handling launch URL")
        return await self.handle_url(url)

    async def handle_url(self, url: str) -> LinkHandlingResult:
        """Run one inbound URL through the verification pipeline."""
        async with self._lock:
            return await self._handle(url)

    async def _handle(self, url: str) -> LinkHandlingResult:
        logger.debug(f"Received deep link: {url}")

        if not self._identity.is_verification_link(url):
            if self._on_other_link is not None:
                await self._on_other_link(url)
            else:
                logger.info("Ignoring deep link that is not an email verification link")
            return LinkHandlingResult(url=url, stage=LinkStage.FORWARDED)

        consumed = await self._identity.consume_verification_link(url)
        if not consumed.success:
            logger.warning(f"Verification link not applied: {consumed.error.code}")
            return LinkHandlingResult(
                url=url,
                stage=LinkStage.CLASSIFIED,
                state=self._controller.state,
                error=consumed.error,
            )

        try:
            session = await self._identity.reload_session()
        except ProviderError as e:
            # The link was applied; a later foreground check picks it up.
            logger.warning(f"Session reload after verification link failed: {e.code}")
            return LinkHandlingResult(
                url=url,
                stage=LinkStage.CONSUMED,
                success=True,
                state=self._controller.state,
                error=ErrorDetail.from_error(e),
            )

        if session is None:
            return LinkHandlingResult(
                url=url,
                stage=LinkStage.CONSUMED,
                success=True,
                state=self._controller.state,
            )

        state = await self._controller.adopt_link_session(session)
        logger.info(f"Verification link applied for {session.uid} ({state.value})")
        return LinkHandlingResult(
            url=url,
            stage=LinkStage.RECONCILED,
            success=True,
            state=state,
        )
