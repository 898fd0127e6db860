"""
Restore gate.

Process-local switch that keeps the app from silently resuming a session
the provider restored from storage. It starts closed; only an explicit
sign-in, sign-up or verification link opens it, and sign-out closes it.
A notification that the session went away is always admitted.
"""

import logging
from typing import Optional

from shared.models import Session

logger = logging.getLogger(__name__)


class AllowRestoreGate:
    """Whether provider-originated sessions may be adopted."""

    def __init__(self) -> None:
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self, reason: str) -> None:
        if not self._open:
            logger.debug(f"Restore gate opened ({reason})")
        self._open = True

    def close(self, reason: str) -> None:
        if self._open:
            logger.debug(f"Restore gate closed ({reason})")
        self._open = False

    def admits(self, session: Optional[Session]) -> bool:
        """A cleared session always passes; a non-null one only while open."""
        return session is None or self._open
