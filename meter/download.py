"""
Download throughput test module.

Issues batches of concurrent full-body GETs against a resource of known
size.  Each batch is joined before the next one starts, turned into one
bandwidth sample, and folded into a running mean that callers can display
while the test is in flight.  The phase is time-boxed: batches keep coming
until the budget is used up, and the batch in flight when the budget runs
out is allowed to finish.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .constants import (
    DEFAULT_CONNECTIONS,
    DEFAULT_TIME_BUDGET,
    DOWNLOAD_SIZE,
    DOWNLOAD_URL,
    MAX_CONNECTIONS,
    MIN_CONNECTIONS,
)
from .exceptions import AggregationError
from .probe import ProbeResult, TransferProbe
from .stats import batch_mbps, calculate_mean, trimmed_mean

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class ThroughputSample:
    """Bandwidth derived from one batch."""

    mbps: float
    measured_at: float   # monotonic seconds


@dataclass
class ThroughputResult:
    """Download test result."""

    samples: List[ThroughputSample] = field(default_factory=list)
    final_mbps: float = 0.0
    duration_ms: float = 0.0
    batches: int = 0

    @property
    def speeds(self) -> List[float]:
        return [s.mbps for s in self.samples]

    def calculate(self) -> None:
        """Trimmed mean of the batch samples."""
        self.final_mbps = trimmed_mean(self.speeds)

    def to_dict(self) -> dict:
        return {
            "speed_mbps": round(self.final_mbps, 2),
            "duration_ms": round(self.duration_ms, 2),
            "batches": self.batches,
            "samples": [round(s, 2) for s in self.speeds],
        }


# ---------------------------------------------------------------------------
# Sampler
# ---------------------------------------------------------------------------

SampleCallback = Callable[[ThroughputSample, float, float], None]


class ThroughputSampler:
    """
    Time-boxed batch download tester.

    ``on_sample(sample, running_mean, elapsed_ms)`` is invoked after every
    batch so the caller can publish a progressive estimate.
    """

    def __init__(
        self,
        probe: TransferProbe,
        url: str = DOWNLOAD_URL,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.probe = probe
        self.url = url
        self._clock = clock
        self.on_sample: Optional[SampleCallback] = None

    async def measure(
        self,
        resource_size_bits: float = DOWNLOAD_SIZE * 8,
        concurrency: int = DEFAULT_CONNECTIONS,
        time_budget_ms: float = DEFAULT_TIME_BUDGET * 1000,
    ) -> ThroughputResult:
        if not MIN_CONNECTIONS <= concurrency <= MAX_CONNECTIONS:
            raise ValueError(
                f"concurrency must be between {MIN_CONNECTIONS} and {MAX_CONNECTIONS}"
            )

        result = ThroughputResult()
        start = self._clock()

        while (self._clock() - start) * 1000 < time_budget_ms:
            t0 = self._clock()
            await self._run_batch(concurrency)
            t1 = self._clock()
            result.batches += 1

            mbps = batch_mbps(resource_size_bits, concurrency, t1 - t0)
            if mbps <= 0:
                logger.debug("batch %d finished in zero time; skipped", result.batches)
                continue

            sample = ThroughputSample(mbps=mbps, measured_at=t1)
            result.samples.append(sample)

            if self.on_sample:
                running = calculate_mean(result.speeds)
                self.on_sample(sample, running, (t1 - start) * 1000)

        result.duration_ms = (self._clock() - start) * 1000

        if not result.samples:
            raise AggregationError("No throughput samples collected", url=self.url)

        result.calculate()
        logger.info(
            "download: %.2f Mbps from %d samples (%d batches, %.0f ms)",
            result.final_mbps, len(result.samples), result.batches, result.duration_ms,
        )
        return result

    # -- Internals ----------------------------------------------------------

    async def _run_batch(self, concurrency: int) -> List[ProbeResult]:
        """Fetch the resource *concurrency* times at once and wait for all."""
        tasks = [
            asyncio.ensure_future(self.probe.fetch(self.url))
            for _ in range(concurrency)
        ]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
