"""
Display ramp.

Moves a *displayed* number from its current value to an already-final
target in equal steps, one step per timer tick.  It only paces what the
user sees; the measurement is finished before a ramp starts.
"""
from __future__ import annotations

from typing import Callable

from .constants import RAMP_INTERVAL, RAMP_STEPS
from .timer import PeriodicTimer


class DisplayRamp:
    """Animate ``start -> target`` over *steps* ticks of *interval* seconds."""

    def __init__(
        self,
        start: float,
        target: float,
        on_update: Callable[[float], None],
        steps: int = RAMP_STEPS,
        interval: float = RAMP_INTERVAL,
    ) -> None:
        if steps < 1:
            raise ValueError("steps must be at least 1")
        self.start_value = start
        self.target = target
        self.steps = steps
        self.step = (target - start) / steps
        self.value = start
        self.on_update = on_update
        self._timer = PeriodicTimer(interval, self._tick)

    @property
    def ticks(self) -> int:
        return self._timer.ticks

    @property
    def done(self) -> bool:
        return self.value == self.target

    def start(self) -> None:
        self._timer.start()

    def cancel(self) -> None:
        self._timer.cancel()

    async def wait(self) -> None:
        await self._timer.wait()

    async def run(self) -> float:
        """Start the ramp and wait for it to land on the target."""
        self.start()
        await self.wait()
        return self.value

    # -- Internals ----------------------------------------------------------

    def _passed(self, value: float) -> bool:
        if self.step >= 0:
            return value >= self.target
        return value <= self.target

    def _tick(self) -> bool:
        n = self._timer.ticks
        nxt = self.start_value + self.step * n
        if n >= self.steps or self._passed(nxt):
            self.value = self.target
            self.on_update(self.value)
            return False

        self.value = nxt
        self.on_update(self.value)
        return True
