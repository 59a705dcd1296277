"""Cancellable timers and a trailing-edge debouncer.

Sessions never call ``asyncio.sleep`` directly; they schedule work through a
:class:`Clock` so tests can drive time with a virtual clock.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol, Set

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[None]]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callback) -> TimerHandle: ...


class _AsyncioTimer:
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioClock:
    """Clock backed by the running event loop."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def now(self) -> float:
        return asyncio.get_running_loop().time()

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        loop = asyncio.get_running_loop()
        handle = loop.call_later(delay, self._spawn, callback)
        return _AsyncioTimer(handle)

    def _spawn(self, callback: Callback) -> None:
        task = asyncio.ensure_future(callback())
        self._tasks.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Scheduled callback failed: {exc!r}")


class Debouncer:
    """Run ``action`` once mutations have been quiet for ``delay`` seconds."""

    def __init__(self, clock: Clock, delay: float, action: Callback) -> None:
        self._clock = clock
        self._delay = delay
        self._action = action
        self._handle: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        self._handle = self._clock.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def _fire(self) -> None:
        self._handle = None
        await self._action()
