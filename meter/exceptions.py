"""Exception hierarchy for the measurement engine."""


class NetDashError(Exception):
    """Base class for every error raised by the ``meter`` package."""


class ProbeError(NetDashError):
    """A transfer probe failed (timeout, DNS, refused connection, HTTP error)."""

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class AggregationError(ProbeError):
    """A phase finished without collecting a single usable sample."""


class ConfigError(NetDashError, ValueError):
    """A configuration value is missing or out of range."""
