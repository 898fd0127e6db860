"""
Resend cooldown guard.

A timer gate that keeps the user from spamming verification emails. It
holds one timestamp and never queues or retries: a denied send is a
no-op the caller re-triggers once remaining_ms() reaches zero.
"""

from typing import Optional

DEFAULT_WINDOW_MS = 60_000


class ResendCooldownGuard:
    """Allows one verification email per window."""

    def __init__(self, window_ms: int = DEFAULT_WINDOW_MS):
        if window_ms < 0:
            raise ValueError("window_ms must not be negative")
        self._window_ms = window_ms
        self._last_sent_at_ms: Optional[int] = None

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def last_sent_at_ms(self) -> Optional[int]:
        return self._last_sent_at_ms

    def can_send(self, now_ms: int) -> bool:
        """True when no email was sent yet or the window has fully elapsed."""
        if self._last_sent_at_ms is None:
            return True
        return now_ms - self._last_sent_at_ms >= self._window_ms

    def record_sent(self, now_ms: int) -> None:
        self._last_sent_at_ms = now_ms

    def remaining_ms(self, now_ms: int) -> int:
        """Milliseconds until the next send is allowed (0 if allowed now)."""
        if self._last_sent_at_ms is None:
            return 0
        elapsed = now_ms - self._last_sent_at_ms
        return max(self._window_ms - elapsed, 0)

    def reset(self) -> None:
        self._last_sent_at_ms = None
