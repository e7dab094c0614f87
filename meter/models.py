"""
Data models shared between the engine and its consumers.

Plain dataclasses with ``to_dict`` / ``from_dict`` helpers for JSON
persistence.  No I/O happens here.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Live metrics
# ---------------------------------------------------------------------------

@dataclass
class Metrics:
    """The currently displayed figures.  One live instance per engine."""

    download: float = 0.0        # Mbps
    upload: float = 0.0          # Mbps, estimated
    ping: float = 0.0            # ms
    jitter: float = 0.0          # ms
    signal_strength: float = 0.0 # 0..100

    def copy(self) -> Metrics:
        return Metrics(**asdict(self))

    def restore(self, other: Metrics) -> None:
        """Overwrite every field in place with the values of *other*."""
        for key, value in asdict(other).items():
            setattr(self, key, value)

    def to_dict(self) -> Dict[str, float]:
        return {
            "download": round(self.download, 2),
            "upload": round(self.upload, 2),
            "ping": round(self.ping, 1),
            "jitter": round(self.jitter, 1),
            "signalStrength": round(self.signal_strength, 1),
        }


# ---------------------------------------------------------------------------
# Persisted result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SpeedTestResult:
    """One completed run, as kept in the result history."""

    id: int
    date: str
    download: float
    upload: float
    ping: float
    isp: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SpeedTestResult:
        return cls(
            id=int(data.get("id", 0)),
            date=str(data.get("date", "")),
            download=float(data.get("download", 0)),
            upload=float(data.get("upload", 0)),
            ping=float(data.get("ping", 0)),
            isp=str(data.get("isp", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "download": self.download,
            "upload": self.upload,
            "ping": self.ping,
            "isp": self.isp,
        }


# ---------------------------------------------------------------------------
# Event log
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LogEntry:
    time: str
    kind: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"time": self.time, "type": self.kind, "message": self.message}


# ---------------------------------------------------------------------------
# Host-supplied descriptors
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConnectionHint:
    """
    Coarse link descriptor supplied by the host environment.

    Every field is optional; environments expose as much or as little as
    they know.  ``type`` is e.g. ``"cellular"``, ``"wifi"`` or
    ``"ethernet"``; ``effective_type`` is one of ``"slow-2g"``, ``"2g"``,
    ``"3g"``, ``"4g"``.
    """

    type: Optional[str] = None
    effective_type: Optional[str] = None
    rtt_ms: Optional[float] = None


@dataclass
class NetworkInfo:
    """Public address details of the client, used to label results."""

    ip: str = "Unavailable"
    isp: str = "Unavailable"
    city: str = ""
    country: str = ""
    asn: str = ""
    timezone: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> NetworkInfo:
        return cls(
            ip=str(data.get("ip") or "Unavailable"),
            isp=str(data.get("org") or "Unavailable"),
            city=str(data.get("city") or ""),
            country=str(data.get("country_name") or ""),
            asn=str(data.get("asn") or ""),
            timezone=str(data.get("timezone") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)
