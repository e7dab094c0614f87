"""
In-memory event log.

Newest-first, bounded to ``LOG_LIMIT`` entries.  Every entry is mirrored to
the standard ``logging`` module so it also shows up in the process log.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .constants import LOG_LIMIT
from .models import LogEntry

logger = logging.getLogger(__name__)

ERROR = "error"
SUCCESS = "success"
INFO = "info"

_LEVELS = {
    ERROR: logging.ERROR,
    SUCCESS: logging.INFO,
    INFO: logging.INFO,
}

TIME_FORMAT = "%H:%M:%S"


class EventLog:
    def __init__(
        self,
        limit: int = LOG_LIMIT,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.limit = limit
        self._now = now
        self._entries: List[LogEntry] = []
        self.on_entry: Optional[Callable[[LogEntry], None]] = None

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, kind: str, message: str) -> LogEntry:
        if kind not in _LEVELS:
            raise ValueError(f"Unknown log kind: {kind!r}")

        entry = LogEntry(time=self._now().strftime(TIME_FORMAT), kind=kind, message=message)
        self._entries = [entry, *self._entries][: self.limit]
        logger.log(_LEVELS[kind], "[%s] %s", kind, message)

        if self.on_entry:
            self.on_entry(entry)
        return entry

    def clear(self) -> None:
        self._entries = []
