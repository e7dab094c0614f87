"""
Connectivity monitor.

Periodically fetches a tiny resource and records a "Connection Lost" or
"Connection Restored" event whenever reachability flips.
"""
from __future__ import annotations

import logging
from typing import Optional

from .constants import MONITOR_INTERVAL, PING_URL
from .events import ERROR, SUCCESS, EventLog
from .exceptions import ProbeError
from .probe import TransferProbe
from .timer import PeriodicTimer

logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    def __init__(
        self,
        probe: TransferProbe,
        log: EventLog,
        url: str = PING_URL,
        interval: float = MONITOR_INTERVAL,
    ) -> None:
        self.probe = probe
        self.log = log
        self.url = url
        self.online: Optional[bool] = None
        self._timer = PeriodicTimer(interval, self._tick)

    async def check(self) -> bool:
        """Probe once and log a transition if the state changed."""
        try:
            await self.probe.fetch(self.url)
            online = True
        except ProbeError as exc:
            logger.debug("connectivity check failed: %s", exc)
            online = False

        previous, self.online = self.online, online
        if online and previous is False:
            self.log.add(SUCCESS, "Connection Restored")
        elif not online and previous is not False:
            self.log.add(ERROR, "Connection Lost")
        return online

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.cancel()

    async def wait(self) -> None:
        await self._timer.wait()

    async def _tick(self) -> None:
        await self.check()
