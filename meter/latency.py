"""
HTTP round-trip latency measurement.

Probe flow::

    1. GET  {ping_url}?cache={token}     (tiny, cache-busted resource)
    2. Record the elapsed time of the full round trip.
    3. Repeat 1-2 sequentially for the desired number of samples.

Probes are never issued concurrently: overlapping requests would queue
behind each other and inflate the individual RTT readings.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .constants import DEFAULT_PING_COUNT, PING_URL
from .probe import TransferProbe
from .stats import calculate_jitter, calculate_mean

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class LatencyResult:
    """Aggregated latency data for one run."""

    samples: List[float] = field(default_factory=list)
    avg_ms: float = 0.0
    jitter_ms: float = 0.0

    def calculate(self) -> None:
        """Derive mean RTT and jitter from the collected samples."""
        self.avg_ms = calculate_mean(self.samples)
        self.jitter_ms = calculate_jitter(self.samples)

    @property
    def min_ms(self) -> float:
        return min(self.samples) if self.samples else 0.0

    @property
    def max_ms(self) -> float:
        return max(self.samples) if self.samples else 0.0

    def to_dict(self) -> dict:
        return {
            "samples": [round(s, 1) for s in self.samples],
            "avg_ms": round(self.avg_ms, 1),
            "jitter_ms": round(self.jitter_ms, 1),
        }


# ---------------------------------------------------------------------------
# Sampler
# ---------------------------------------------------------------------------

class LatencySampler:
    """Sequential round-trip sampler on top of a transfer probe."""

    def __init__(self, probe: TransferProbe, url: str = PING_URL) -> None:
        self.probe = probe
        self.url = url

    async def measure(
        self,
        probe_count: int = DEFAULT_PING_COUNT,
        on_step: Optional[Callable[[int, int], None]] = None,
    ) -> LatencyResult:
        """
        Issue *probe_count* probes one after another.

        *on_step* is called as ``on_step(done, total)`` after every probe.
        A failing probe raises ``ProbeError`` straight through; the phase is
        not retried and no partial result is returned.
        """
        if probe_count < 1:
            raise ValueError("probe_count must be at least 1")

        result = LatencyResult()
        for i in range(probe_count):
            pr = await self.probe.fetch(self.url)
            result.samples.append(pr.elapsed_ms)
            if on_step:
                on_step(i + 1, probe_count)

        result.calculate()
        logger.info(
            "latency: avg %.1f ms, jitter %.1f ms over %d probes",
            result.avg_ms, result.jitter_ms, len(result.samples),
        )
        return result
