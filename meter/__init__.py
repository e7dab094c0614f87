"""NetDash measurement engine -- probing, sampling, aggregation, retention."""

from .download import ThroughputResult, ThroughputSample, ThroughputSampler
from .engine import SpeedTestEngine
from .events import EventLog
from .exceptions import AggregationError, ConfigError, NetDashError, ProbeError
from .history import ResultHistory
from .latency import LatencyResult, LatencySampler
from .models import ConnectionHint, LogEntry, Metrics, NetworkInfo, SpeedTestResult
from .monitor import ConnectivityMonitor
from .probe import HttpProbe, ProbeResult, cache_bust
from .progress import ProgressTracker, phase_progress, throughput_progress
from .qos import QoSVerdict, classify, describe_link, signal_strength
from .ramp import DisplayRamp
from .stats import calculate_jitter, calculate_mean, format_latency, format_speed, trimmed_mean
from .store import JsonFileStore, MemoryStore
from .timer import PeriodicTimer
from .upload import UPLOAD_IS_ESTIMATE, estimate_upload

__all__ = [
    "AggregationError",
    "ConfigError",
    "ConnectionHint",
    "ConnectivityMonitor",
    "DisplayRamp",
    "EventLog",
    "HttpProbe",
    "JsonFileStore",
    "LatencyResult",
    "LatencySampler",
    "LogEntry",
    "MemoryStore",
    "Metrics",
    "NetDashError",
    "NetworkInfo",
    "PeriodicTimer",
    "ProbeError",
    "ProbeResult",
    "ProgressTracker",
    "QoSVerdict",
    "ResultHistory",
    "SpeedTestEngine",
    "SpeedTestResult",
    "ThroughputResult",
    "ThroughputSample",
    "ThroughputSampler",
    "UPLOAD_IS_ESTIMATE",
    "cache_bust",
    "calculate_jitter",
    "calculate_mean",
    "classify",
    "describe_link",
    "estimate_upload",
    "format_latency",
    "format_speed",
    "phase_progress",
    "signal_strength",
    "throughput_progress",
    "trimmed_mean",
]
