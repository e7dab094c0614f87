"""Cancellable periodic timer for the asyncio event loop."""
from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Optional


class PeriodicTimer:
    """
    Call *callback* every *interval* seconds until it returns ``False``
    or :meth:`cancel` is called.  Coroutine callbacks are awaited before
    the next tick is scheduled.

    The timer belongs to whoever started it; that owner is responsible for
    stopping it on its terminal condition.
    """

    def __init__(self, interval: float, callback: Callable[[], Any]) -> None:
        self.interval = interval
        self.callback = callback
        self.ticks = 0
        self._stop: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop = asyncio.Event()
        self._task = asyncio.ensure_future(self._run())

    def cancel(self) -> None:
        if self._stop is not None:
            self._stop.set()

    async def wait(self) -> None:
        """Wait until the timer has stopped; re-raises callback errors."""
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        assert self._stop is not None
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                pass

            self.ticks += 1
            outcome = self.callback()
            if inspect.isawaitable(outcome):
                outcome = await outcome
            if outcome is False:
                break
        self._stop.set()
