"""
Public network-info lookup.

Fetches the client's public IP and ISP from a geo-IP JSON endpoint so
results can be labelled with the provider they were measured on.
"""
from __future__ import annotations

import logging

from .constants import NETWORK_INFO_URL
from .exceptions import ProbeError
from .models import NetworkInfo
from .probe import HttpProbe

logger = logging.getLogger(__name__)


async def fetch_network_info(probe: HttpProbe, url: str = NETWORK_INFO_URL) -> NetworkInfo:
    """Return the client's :class:`NetworkInfo`; raises ``ProbeError``."""
    data = await probe.get_json(url)
    if data.get("error"):
        # ipapi.co reports rate limiting in a 200 body
        raise ProbeError(str(data.get("reason") or "lookup refused"), url=url)

    info = NetworkInfo.from_dict(data)
    logger.debug("network info: %s", info.to_dict())
    return info
