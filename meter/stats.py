"""
Network measurement statistics.

Pure functions -- no I/O, no side effects.  Everything here is
deterministic and easy to unit-test.
"""
from __future__ import annotations

import statistics
from typing import List, Sequence

from .constants import BITS_PER_MEGABIT


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def calculate_mean(samples: Sequence[float]) -> float:
    """Arithmetic mean, ``0.0`` for an empty sequence."""
    if not samples:
        return 0.0
    return statistics.mean(samples)


def calculate_jitter(samples: Sequence[float]) -> float:
    """Jitter as the range of the samples (max - min)."""
    if len(samples) < 2:
        return 0.0
    return max(samples) - min(samples)


def trimmed_mean(samples: Sequence[float]) -> float:
    """
    Mean after dropping the single lowest and single highest sample.

    The trim is fixed at one sample per side and only applies from three
    samples upwards; one or two samples are averaged as they are.
    """
    if not samples:
        return 0.0

    ordered: List[float] = sorted(samples)
    if len(ordered) >= 3:
        ordered = ordered[1:-1]
    return statistics.mean(ordered)


def batch_mbps(resource_size_bits: float, concurrency: int, duration_s: float) -> float:
    """Bandwidth of one batch of *concurrency* full-resource transfers."""
    if duration_s <= 0:
        return 0.0
    return (resource_size_bits * concurrency) / duration_s / BITS_PER_MEGABIT


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_speed(speed_mbps: float) -> str:
    """Human-readable speed string."""
    if speed_mbps >= 1000:
        return f"{speed_mbps / 1000:.2f} Gbps"
    return f"{speed_mbps:.2f} Mbps"


def format_latency(latency_ms: float) -> str:
    """Human-readable latency string."""
    if latency_ms >= 1000:
        return f"{latency_ms / 1000:.2f} s"
    return f"{latency_ms:.1f} ms"
