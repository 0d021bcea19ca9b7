"""
Tick Schedulers
===============

The orchestrator never sleeps or loops on its own. It asks an injected
scheduler for the next tick and returns; the scheduler calls back later.

    request_tick(callback)   run ``callback()`` once, at the next tick
    cancel()                 drop the pending request, if any

AsyncioTickScheduler drives ticks from a running event loop at a fixed
interval. ManualTickScheduler is a fake clock: nothing happens until
``advance()`` is called, which makes runs reproducible.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol

from .errors import SchedulerUnavailableError

TickCallback = Callable[[], None]


class TickScheduler(Protocol):
    def request_tick(self, callback: TickCallback) -> None: ...

    def cancel(self) -> None: ...


class ManualTickScheduler:
    """Deterministic scheduler; ticks run only when advanced."""

    def __init__(self):
        self._pending: Optional[TickCallback] = None
        self.ticks_run = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def request_tick(self, callback: TickCallback) -> None:
        self._pending = callback

    def cancel(self) -> None:
        self._pending = None

    def advance(self, n: int = 1) -> int:
        """Run up to ``n`` pending ticks; returns how many actually ran."""
        ran = 0
        for _ in range(n):
            callback, self._pending = self._pending, None
            if callback is None:
                break
            callback()
            ran += 1
            self.ticks_run += 1
        return ran


class AsyncioTickScheduler:
    """Schedules ticks on an asyncio event loop every ``interval`` seconds.

    Without an explicit loop, the running loop of the calling thread is used;
    requesting a tick with no loop running raises SchedulerUnavailableError.
    """

    def __init__(self, interval: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.interval = interval
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            if self._loop.is_closed():
                raise SchedulerUnavailableError("event loop is closed")
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as exc:
            raise SchedulerUnavailableError("no running asyncio event loop") from exc

    def request_tick(self, callback: TickCallback) -> None:
        loop = self._get_loop()
        self._handle = loop.call_later(self.interval, self._fire, callback)

    def _fire(self, callback: TickCallback) -> None:
        self._handle = None
        callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
