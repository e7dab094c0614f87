"""
Durable key-value storage.

The engine only needs ``get(key) -> str | None`` and ``set(key, str)``.
``JsonFileStore`` keeps every key in one JSON object on disk and rewrites
it atomically (write-tmp then rename) on each ``set``.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

_DEFAULT_DIR = os.path.join(Path.home(), ".netdash")
_DEFAULT_FILE = "store.json"


def default_store_path() -> str:
    return os.path.join(_DEFAULT_DIR, _DEFAULT_FILE)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Process-local store, handy for tests and one-shot runs."""

    def __init__(self, data: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """String values under string keys, persisted as one JSON object."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or default_store_path()

    def _read_all(self) -> Dict[str, str]:
        if not os.path.isfile(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, IOError) as exc:
            logger.warning("ignoring unreadable store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value

        dir_path = os.path.dirname(self.path) or "."
        os.makedirs(dir_path, exist_ok=True)
        tmp = os.path.join(dir_path, f".tmp_{os.path.basename(self.path)}")

        try:
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except (IOError, OSError) as exc:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise IOError(f"Failed to write store {self.path}: {exc}") from exc
