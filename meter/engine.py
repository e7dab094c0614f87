"""
Measurement engine.

Owns the live :class:`Metrics`, the progress value, the ``testing`` flag,
the result history and the event log, and drives one test run::

    latency (0-20%) -> download (20-80%) -> upload estimate + ramp (80-100%)
      -> history append -> event log entry

Consumers never touch that state directly; they ``subscribe`` and receive
``(event, payload)`` notifications:

==========  ======================================
event       payload
==========  ======================================
progress    float, 0..100
metrics     the live ``Metrics`` instance
testing     bool
history     list of ``SpeedTestResult``
log         the new ``LogEntry``
network     ``NetworkInfo``
==========  ======================================

All state is mutated from the single event-loop thread driving the run.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from .api import fetch_network_info
from .config import DEFAULTS, validate_config
from .download import ThroughputResult, ThroughputSample, ThroughputSampler
from .events import ERROR, INFO, SUCCESS, EventLog
from .exceptions import ProbeError
from .history import ResultHistory
from .latency import LatencyResult, LatencySampler
from .models import ConnectionHint, Metrics, NetworkInfo, SpeedTestResult
from .probe import TransferProbe
from .progress import (
    LATENCY,
    THROUGHPUT,
    UPLOAD_RAMP,
    ProgressTracker,
    phase_progress,
    throughput_progress,
)
from .qos import QoSVerdict, classify, describe_link, signal_strength
from .ramp import DisplayRamp
from .store import KeyValueStore
from .upload import estimate_upload

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]
HintProvider = Callable[[], Optional[ConnectionHint]]


class SpeedTestEngine:
    def __init__(
        self,
        probe: TransferProbe,
        store: KeyValueStore,
        config: Optional[Dict[str, Any]] = None,
        hint_provider: Optional[HintProvider] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.config: Dict[str, Any] = {**DEFAULTS, **(config or {})}
        validate_config(self.config)
        self.probe = probe
        self.hint_provider = hint_provider

        self.metrics = Metrics()
        self.progress = ProgressTracker()
        self.testing = False
        self.network = NetworkInfo()

        self.history = ResultHistory(store)
        self.log = EventLog()
        self.log.on_entry = lambda entry: self._emit("log", entry)

        self.latency = LatencySampler(probe, url=self.config["ping_url"])
        self.throughput = ThroughputSampler(probe, url=self.config["download_url"], clock=clock)

        self.last_latency: Optional[LatencyResult] = None
        self.last_throughput: Optional[ThroughputResult] = None

        self._listeners: List[Listener] = []

    # -- Subscription -------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: str, payload: Any) -> None:
        for listener in list(self._listeners):
            listener(event, payload)

    def _set_progress(self, value: float) -> None:
        before = self.progress.value
        if self.progress.advance(value) != before:
            self._emit("progress", self.progress.value)

    # -- Startup ------------------------------------------------------------

    def load_history(self) -> List[SpeedTestResult]:
        entries = self.history.load()
        self._emit("history", entries)
        return entries

    async def refresh_network_info(self) -> NetworkInfo:
        """Look up the public IP / ISP used to label results."""
        try:
            info = await fetch_network_info(self.probe)  # type: ignore[arg-type]
        except ProbeError as exc:
            logger.warning("network info lookup failed: %s", exc)
            self.network = NetworkInfo(ip="Unavailable", isp="Unavailable")
            self.log.add(ERROR, "Failed to fetch ISP info")
        else:
            self.network = info
            self.log.add(INFO, f"Connected to {info.isp}")

        self._emit("network", self.network)
        return self.network

    # -- Derived views ------------------------------------------------------

    def qos(self) -> List[QoSVerdict]:
        return classify(self.metrics)

    def connection_hint(self) -> Optional[ConnectionHint]:
        return self.hint_provider() if self.hint_provider else None

    def link_label(self) -> str:
        return describe_link(self.connection_hint())

    # -- Run ----------------------------------------------------------------

    async def run_test(self) -> Optional[SpeedTestResult]:
        """
        Run one full test.

        Returns the stored result, or ``None`` when the run failed or another
        run was already in progress (in which case nothing happens at all).
        Measurement, storage and settings errors never escape: they end up
        in the event log.
        """
        if self.testing:
            return None

        self.testing = True
        self._emit("testing", True)
        self.progress.reset()
        self._emit("progress", self.progress.value)

        snapshot = self.metrics.copy()
        self.log.add(INFO, "Starting Diagnostics...")

        try:
            return await self._run()
        except ProbeError as exc:
            logger.warning("test run aborted: %s", exc)
            self._abort(snapshot, "Speed test failed (Network Error)")
            return None
        except IOError as exc:
            logger.error("could not save result: %s", exc)
            self._abort(snapshot, "Speed test failed (Storage Error)")
            return None
        except ValueError as exc:
            logger.error("test run aborted: %s", exc)
            self._abort(snapshot, "Speed test failed (Invalid Settings)")
            return None
        finally:
            self._set_progress(100.0)
            self.testing = False
            self._emit("testing", False)

    def _abort(self, snapshot: Metrics, message: str) -> None:
        self.metrics.restore(snapshot)
        self._emit("metrics", self.metrics)
        self.log.add(ERROR, message)

    async def _run(self) -> SpeedTestResult:
        cfg = self.config

        # -- Latency --------------------------------------------------------
        lat = await self.latency.measure(
            int(cfg["ping_count"]),
            on_step=lambda done, total: self._set_progress(phase_progress(LATENCY, done / total)),
        )
        self.last_latency = lat
        self.metrics.ping = lat.avg_ms
        self.metrics.jitter = lat.jitter_ms
        self._emit("metrics", self.metrics)

        # -- Download -------------------------------------------------------
        budget_ms = float(cfg["time_budget"]) * 1000

        def _on_sample(sample: ThroughputSample, running: float, elapsed_ms: float) -> None:
            self.metrics.download = running
            self._emit("metrics", self.metrics)
            self._set_progress(throughput_progress(elapsed_ms, budget_ms))

        self.throughput.on_sample = _on_sample
        try:
            tp = await self.throughput.measure(
                resource_size_bits=int(cfg["download_size"]) * 8,
                concurrency=int(cfg["concurrency"]),
                time_budget_ms=budget_ms,
            )
        finally:
            self.throughput.on_sample = None
        self.last_throughput = tp
        self._set_progress(phase_progress(THROUGHPUT, 1.0))

        # -- Upload estimate + display ramp ---------------------------------
        upload = estimate_upload(tp.final_mbps, self.connection_hint(), lat.avg_ms)
        await self._ramp(tp.final_mbps, upload)

        self.metrics.download = tp.final_mbps
        self.metrics.upload = upload
        self.metrics.signal_strength = signal_strength(lat.avg_ms)
        self._emit("metrics", self.metrics)

        # -- Retention ------------------------------------------------------
        result = self.history.create(
            download=round(tp.final_mbps, 2),
            upload=round(upload, 2),
            ping=round(lat.avg_ms, 1),
            isp=self.network.isp,
        )
        self._emit("history", self.history.append(result))
        self.log.add(SUCCESS, f"Test Complete: {tp.final_mbps:.2f} Mbps")
        return result

    async def _ramp(self, download: float, upload: float) -> None:
        steps = int(self.config["ramp_steps"])
        interval = float(self.config["ramp_interval"])

        def _on_download(value: float) -> None:
            self.metrics.download = value
            self._emit("metrics", self.metrics)
            self._set_progress(phase_progress(UPLOAD_RAMP, dl_ramp.ticks / steps))

        def _on_upload(value: float) -> None:
            self.metrics.upload = value
            self._emit("metrics", self.metrics)

        dl_ramp = DisplayRamp(self.metrics.download, download, _on_download, steps, interval)
        ul_ramp = DisplayRamp(self.metrics.upload, upload, _on_upload, steps, interval)

        dl_ramp.start()
        ul_ramp.start()
        try:
            await asyncio.gather(dl_ramp.wait(), ul_ramp.wait())
        finally:
            dl_ramp.cancel()
            ul_ramp.cancel()
