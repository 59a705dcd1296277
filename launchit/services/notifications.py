"""Single transient notification channel (one message at a time)."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from launchit.schemas.submission import Notification, Severity
from launchit.services.timers import Clock, TimerHandle

logger = logging.getLogger(__name__)


class Notifier:
    """Holds the current message and dismisses it after a fixed delay."""

    def __init__(
        self,
        clock: Clock,
        dismiss_after: float,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._clock = clock
        self._dismiss_after = dismiss_after
        self._on_change = on_change
        self._dismiss_handle: Optional[TimerHandle] = None
        self.current: Optional[Notification] = None

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
        self.current = Notification(message=message, severity=severity)
        logger.debug(f"notification [{severity.value}] {message}")
        self._dismiss_handle = self._clock.call_later(self._dismiss_after, self._expire)
        self._changed()

    def dismiss(self) -> None:
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
            self._dismiss_handle = None
        if self.current is not None:
            self.current = None
            self._changed()

    async def _expire(self) -> None:
        self._dismiss_handle = None
        self.current = None
        self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
