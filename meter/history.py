"""
Result history persistence and export.

The most recent results are kept newest-first, bounded to
``HISTORY_LIMIT`` entries, and stored as a single JSON array under one key
of a durable key-value store.  The array is loaded once and rewritten in
full on every append.
"""
from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from typing import List, Optional

from .constants import HISTORY_KEY, HISTORY_LIMIT
from .models import SpeedTestResult
from .store import KeyValueStore

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

REPORT_HEADERS = ["Date", "Download (Mbps)", "Upload (Mbps)", "Ping (ms)", "ISP"]


class ResultHistory:
    """Bounded, newest-first log of completed runs."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str = HISTORY_KEY,
        limit: int = HISTORY_LIMIT,
    ) -> None:
        self.store = store
        self.key = key
        self.limit = limit
        self._entries: List[SpeedTestResult] = []
        self._last_id = 0

    @property
    def entries(self) -> List[SpeedTestResult]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    # -- Read ---------------------------------------------------------------

    def load(self) -> List[SpeedTestResult]:
        """Read the stored array; a missing or corrupt record yields ``[]``."""
        raw = self.store.get(self.key)
        entries: List[SpeedTestResult] = []

        if raw:
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as exc:
                logger.warning("discarding corrupt history record: %s", exc)
                data = []
            if not isinstance(data, list):
                logger.warning("discarding history record of type %s", type(data).__name__)
                data = []
            for item in data:
                if not isinstance(item, dict):
                    continue
                try:
                    entries.append(SpeedTestResult.from_dict(item))
                except (TypeError, ValueError):
                    continue  # skip corrupt rows

        self._entries = entries[: self.limit]
        if self._entries:
            self._last_id = max(e.id for e in self._entries)
        return self.entries

    # -- Write --------------------------------------------------------------

    def create(
        self,
        download: float,
        upload: float,
        ping: float,
        isp: str,
        now: Optional[datetime] = None,
    ) -> SpeedTestResult:
        """Build a result stamped with a strictly increasing millisecond id."""
        now = now or datetime.now()
        new_id = max(int(time.time() * 1000), self._last_id + 1)
        self._last_id = new_id
        return SpeedTestResult(
            id=new_id,
            date=now.strftime(DATE_FORMAT),
            download=download,
            upload=upload,
            ping=ping,
            isp=isp,
        )

    def append(self, result: SpeedTestResult) -> List[SpeedTestResult]:
        """
        Insert *result* at the front, evict beyond the limit, persist.

        The in-memory list only changes once the store accepted the write, so
        a failing store leaves both sides as they were.
        """
        entries = [result, *self._entries][: self.limit]
        self._save(entries)
        self._entries = entries
        self._last_id = max(self._last_id, result.id)
        return self.entries

    def clear(self) -> None:
        self._save([])
        self._entries = []

    def _save(self, entries: List[SpeedTestResult]) -> None:
        payload = json.dumps([e.to_dict() for e in entries], ensure_ascii=False)
        self.store.set(self.key, payload)

    # -- Export -------------------------------------------------------------

    def export_csv(self) -> str:
        """Header row plus one comma-joined row per retained result."""
        lines = [",".join(REPORT_HEADERS)]
        for e in self._entries:
            fields = [e.date, _number(e.download), _number(e.upload), _number(e.ping), e.isp]
            lines.append(",".join(fields))
        return "\n".join(lines)


def _number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(round(value, 2))
