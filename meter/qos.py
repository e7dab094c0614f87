"""
Quality-of-service verdicts and signal helpers.

Pure functions of the current metrics: no state, recomputed on demand.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .models import ConnectionHint, Metrics


@dataclass(frozen=True)
class QoSVerdict:
    name: str
    passed: bool

    def to_dict(self) -> dict:
        return {"name": self.name, "pass": self.passed}


# ---------------------------------------------------------------------------
# Capability thresholds
# ---------------------------------------------------------------------------

_CHECKS: List[Tuple[str, Callable[[Metrics], bool]]] = [
    ("4K Streaming", lambda m: m.download > 25),
    ("Online Gaming", lambda m: 0 < m.ping < 50),
    ("Video Calls", lambda m: m.download > 10 and m.upload > 2),
    ("Large Files", lambda m: m.download > 50),
]


def classify(metrics: Metrics) -> List[QoSVerdict]:
    """Return one verdict per capability, always in the same order."""
    return [QoSVerdict(name, check(metrics)) for name, check in _CHECKS]


def verdict_label(passed: bool) -> str:
    return "Excellent" if passed else "Poor"


# ---------------------------------------------------------------------------
# Signal
# ---------------------------------------------------------------------------

def signal_strength(ping_ms: float) -> float:
    """0..100 score, 100 meaning no measurable latency."""
    return max(0.0, min(100.0, 100.0 - ping_ms))


def describe_link(hint: Optional[ConnectionHint]) -> str:
    """Short label for the link type reported by the host."""
    if hint is None or not hint.effective_type:
        return "WiFi / Ethernet"
    if hint.effective_type == "4g":
        return "4G+ / 5G / Fiber"
    return hint.effective_type.upper()
