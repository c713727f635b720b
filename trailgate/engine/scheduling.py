"""
Periodic sampler timers for watch-time tracking.

The tracker only needs `call_every(interval, callback) -> handle` where the
handle exposes `cancel()`. Two implementations are provided:

- AsyncioScheduler: cooperative timers on an asyncio event loop
- PollingScheduler: fires due callbacks when `run_pending()` is called
  (rerun-driven UIs and deterministic tests with ManualClock)
"""

import asyncio
import itertools
import time
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle: ...


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self._now = start

    def __call__(self) -> float:
        return self._now

    def advance(self, seconds: float):
        self._now += seconds

    def set(self, value: float):
        self._now = value


# -----------------------------------------------------------------------------
# asyncio
# -----------------------------------------------------------------------------

class _RepeatingCall:
    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle = loop.call_later(interval, self._run)

    def _run(self):
        if self._cancelled:
            return
        self._callback()
        if not self._cancelled:
            self._handle = self._loop.call_later(self._interval, self._run)

    def cancel(self):
        self._cancelled = True
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler:
    """Schedule repeating callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> _RepeatingCall:
        loop = self._loop or asyncio.get_running_loop()
        return _RepeatingCall(loop, interval, callback)


# -----------------------------------------------------------------------------
# Polling
# -----------------------------------------------------------------------------

class _PolledCall:
    def __init__(self, scheduler: "PollingScheduler", interval: float,
                 callback: Callable[[], None], due_at: float, call_id: int):
        self._scheduler = scheduler
        self.id = call_id
        self.interval = interval
        self.callback = callback
        self.due_at = due_at
        self.cancelled = False

    def cancel(self):
        self.cancelled = True
        self._scheduler._discard(self)


class PollingScheduler:
    """
    Repeating timers fired by explicit polling.

    Callbacks whose due time has passed run in due order on `run_pending()`.
    A timer that fell several intervals behind fires once per missed interval.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._timers: dict[int, _PolledCall] = {}
        self._ids = itertools.count()

    def call_every(self, interval: float, callback: Callable[[], None]) -> _PolledCall:
        call = _PolledCall(self, interval, callback, self.clock() + interval, next(self._ids))
        self._timers[call.id] = call
        return call

    def _discard(self, call: _PolledCall):
        self._timers.pop(call.id, None)

    @property
    def active_count(self) -> int:
        return len(self._timers)

    def run_pending(self) -> int:
        """Fire every due callback. Returns the number of callbacks run."""
        now = self.clock()
        fired = 0
        while True:
            due = [c for c in self._timers.values() if c.due_at <= now]
            if not due:
                return fired
            call = min(due, key=lambda c: (c.due_at, c.id))
            call.due_at += call.interval
            call.callback()
            fired += 1
