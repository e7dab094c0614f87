"""
Upload speed estimation.

Upload is *not* measured.  A controlled large upload needs a cooperating
server endpoint, which this client does not have, so the figure is derived
from the measured download speed and a coarse connection-quality hint.
Anything that displays it must label it as an estimate.
"""
from __future__ import annotations

from typing import Optional

from .models import ConnectionHint

UPLOAD_IS_ESTIMATE = True

FAST_LINK_RATIO = 0.3       # wired / wifi / low-latency links
SLOW_LINK_RATIO = 0.1       # cellular / high-latency links

_SLOW_EFFECTIVE_TYPES = ("slow-2g", "2g", "3g")
_HIGH_RTT_MS = 100.0
_LOW_PING_MS = 50.0


def upload_ratio(hint: Optional[ConnectionHint], ping_ms: float = 0.0) -> float:
    """Pick the upload/download ratio for *hint*, falling back to *ping_ms*."""
    if hint is None:
        if 0 < ping_ms < _LOW_PING_MS:
            return FAST_LINK_RATIO
        return SLOW_LINK_RATIO

    if hint.type == "cellular":
        return SLOW_LINK_RATIO
    if hint.effective_type in _SLOW_EFFECTIVE_TYPES:
        return SLOW_LINK_RATIO
    if hint.rtt_ms is not None and hint.rtt_ms >= _HIGH_RTT_MS:
        return SLOW_LINK_RATIO
    return FAST_LINK_RATIO


def estimate_upload(
    download_mbps: float,
    hint: Optional[ConnectionHint] = None,
    ping_ms: float = 0.0,
) -> float:
    """Estimated upload speed in Mbps."""
    if download_mbps <= 0:
        return 0.0
    return download_mbps * upload_ratio(hint, ping_ms)
