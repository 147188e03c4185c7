"""
Debounce scheduling for high-frequency input events.

Each schedule() call cancels the previous, not-yet-fired call of the same
instance, so only the last call inside any delay window runs.
"""

import asyncio
from typing import Callable, Optional

from shared.logging import get_logger

log = get_logger("grid", "debounce")


class DebounceScheduler:
    """Single-shot timer that re-arms on every call."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        """True while a scheduled callback has not fired yet."""
        return self._handle is not None and not self._handle.cancelled()

    def schedule(self, callback: Callable[[], None], delay_ms: int) -> None:
        """
        Run callback after delay_ms of quiescence.

        Args:
            callback: Zero-argument callable run on the event loop
            delay_ms: Quiet period in milliseconds
        """
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(max(delay_ms, 0) / 1000.0, self._fire, callback)

    def cancel(self) -> None:
        """Drop the pending callback, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[[], None]) -> None:
        self._handle = None
        try:
            callback()
        except Exception as e:
            # Timer callbacks have no caller to propagate to
            log.exception(e, "grid.debounce.callback_failed")
