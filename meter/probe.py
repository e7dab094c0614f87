"""
HTTP transfer probe.

One probe is one full HTTP round trip: the request is sent, the *entire*
body is read, and the elapsed monotonic time is reported together with the
number of body bytes received.  All HTTP work goes through a single
``aiohttp.ClientSession`` managed via the async-context-manager protocol
(``async with HttpProbe() as probe: ...``).
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

import aiohttp

from .constants import CACHE_BUST_PARAM, COMMON_HEADERS, DEFAULT_PROBE_TIMEOUT
from .exceptions import ProbeError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class ProbeResult:
    """Outcome of a single transfer."""

    elapsed_ms: float = 0.0
    bytes_read: int = 0


class TransferProbe(Protocol):
    """Anything that can perform one timed fetch."""

    async def fetch(self, url: str) -> ProbeResult:
        ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def cache_bust(url: str, token: Optional[str] = None) -> str:
    """Append a unique query value so no cache can answer the request."""
    token = token or uuid.uuid4().hex
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{CACHE_BUST_PARAM}={token}"


# ---------------------------------------------------------------------------
# Probe
# ---------------------------------------------------------------------------

class HttpProbe:
    """
    Timed HTTP GETs over a shared ``aiohttp`` session.

    *timeout* bounds how long a socket may sit idle, not the whole transfer:
    a slow body that keeps arriving is read to the end.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.timeout = timeout
        self._clock = clock
        self._session: Optional[aiohttp.ClientSession] = None

    # -- Context manager ----------------------------------------------------

    async def __aenter__(self) -> HttpProbe:
        self._session = aiohttp.ClientSession(
            headers=COMMON_HEADERS,
            timeout=aiohttp.ClientTimeout(total=None, connect=5, sock_read=self.timeout),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._session:
            await self._session.close()
            self._session = None

    # -- Internal helpers ---------------------------------------------------

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError(
                "HttpProbe must be used as an async context manager "
                "(async with HttpProbe() as probe: ...)"
            )
        return self._session

    # -- Public methods -----------------------------------------------------

    async def fetch(self, url: str) -> ProbeResult:
        """GET a cache-busted *url*, read the whole body, and time it."""
        session = self._ensure_session()
        target = cache_bust(url)
        bytes_read = 0

        start = self._clock()
        try:
            async with session.get(target) as resp:
                resp.raise_for_status()
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    bytes_read += len(chunk)
        except asyncio.TimeoutError as exc:
            raise ProbeError(f"Probe stalled for {self.timeout:g}s", url=url) from exc
        except (aiohttp.ClientError, OSError) as exc:
            raise ProbeError(f"Probe failed: {exc}", url=url) from exc

        elapsed_ms = (self._clock() - start) * 1000
        logger.debug("fetched %s: %d bytes in %.1f ms", url, bytes_read, elapsed_ms)
        return ProbeResult(elapsed_ms=elapsed_ms, bytes_read=bytes_read)

    async def get_json(self, url: str) -> Dict[str, Any]:
        """GET *url* and decode a JSON object body."""
        session = self._ensure_session()
        try:
            async with session.get(url) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
        except asyncio.TimeoutError as exc:
            raise ProbeError("Request timed out", url=url) from exc
        except (aiohttp.ClientError, OSError, ValueError) as exc:
            raise ProbeError(f"Request failed: {exc}", url=url) from exc

        if not isinstance(data, dict):
            raise ProbeError("Unexpected response body", url=url)
        return data
