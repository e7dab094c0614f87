"""
Overall test progress.

Each phase owns a disjoint, ordered band of the 0-100 range, so mapping
"fraction of the current phase done" through the band can never move the
overall figure backwards across a phase transition.
"""
from __future__ import annotations

from typing import Dict, Tuple

LATENCY = "latency"
THROUGHPUT = "throughput"
UPLOAD_RAMP = "upload_ramp"

BANDS: Dict[str, Tuple[float, float]] = {
    LATENCY: (0.0, 20.0),
    THROUGHPUT: (20.0, 80.0),
    UPLOAD_RAMP: (80.0, 100.0),
}


def phase_progress(phase: str, fraction: float) -> float:
    """Map *fraction* (clamped to 0..1) of *phase* onto its band."""
    try:
        lo, hi = BANDS[phase]
    except KeyError:
        raise ValueError(f"Unknown phase: {phase!r}") from None
    fraction = max(0.0, min(fraction, 1.0))
    return lo + (hi - lo) * fraction


def throughput_progress(elapsed_ms: float, time_budget_ms: float) -> float:
    """``min(20 + elapsed/budget * 60, 80)``."""
    if time_budget_ms <= 0:
        return BANDS[THROUGHPUT][1]
    return phase_progress(THROUGHPUT, elapsed_ms / time_budget_ms)


class ProgressTracker:
    """Holds the published progress value and keeps it monotonic."""

    def __init__(self) -> None:
        self.value = 0.0

    def reset(self) -> float:
        self.value = 0.0
        return self.value

    def advance(self, value: float) -> float:
        """Move forward to *value*; lower values are ignored."""
        self.value = max(self.value, min(value, 100.0))
        return self.value

    def finish(self) -> float:
        self.value = 100.0
        return self.value
