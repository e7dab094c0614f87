"""
Rich-based terminal dashboard for NetDash.

All numbers come from the engine -- this module only does presentation via
the ``rich`` library and never computes a measurement.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from meter.models import LogEntry, Metrics, NetworkInfo, SpeedTestResult
from meter.qos import QoSVerdict, verdict_label
from meter.stats import format_latency, format_speed

if TYPE_CHECKING:
    from meter.download import ThroughputResult
    from meter.latency import LatencyResult

console = Console()

_KIND_STYLES = {"error": "red", "success": "green", "info": "cyan"}


# ---------------------------------------------------------------------------
# Histogram helper
# ---------------------------------------------------------------------------

_BARS = "▁▂▃▄▅▆▇█"


def create_histogram(values: List[float]) -> str:
    """Return a single-line Unicode bar-chart."""
    if not values:
        return "No data"

    lo, hi = min(values), max(values)
    span = hi - lo if hi > lo else 1.0
    return "".join(
        _BARS[min(int((v - lo) / span * (len(_BARS) - 1)), len(_BARS) - 1)]
        for v in values
    )


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header() -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]NetDash[/bold cyan]\n"
            "[dim]Network telemetry from the client's point of view[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def print_network_info(info: NetworkInfo, link: str = "") -> None:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="dim")
    table.add_column(style="bold")
    table.add_row("IP Address:", info.ip)
    table.add_row("ISP:", info.isp)
    if info.city or info.country:
        table.add_row("Location:", ", ".join(p for p in (info.city, info.country) if p))
    if link:
        table.add_row("Link:", link)
    console.print(Panel(table, title="[bold]Network[/bold]", border_style="blue"))


def print_latency_details(result: LatencyResult) -> None:
    """Print latency statistics and a histogram."""
    samples = result.samples
    if not samples:
        console.print("[dim]No latency samples[/dim]")
        return

    table = Table(title="Latency Details", box=box.ROUNDED)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Min", format_latency(result.min_ms))
    table.add_row("Max", format_latency(result.max_ms))
    table.add_row("Mean", format_latency(result.avg_ms))
    table.add_row("Jitter", f"{result.jitter_ms:.1f} ms")
    table.add_row("Samples", str(len(samples)))
    console.print(table)

    console.print(
        Panel(
            f"[cyan]{create_histogram(samples)}[/cyan]",
            title="Ping Histogram",
        )
    )


def print_speed_result(result: ThroughputResult, title: str, color: str = "green") -> None:
    """Print a throughput result panel."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Speed", f"[bold {color}]{format_speed(result.final_mbps)}[/bold {color}]")
    table.add_row("Batches", str(result.batches))
    table.add_row("Samples", str(len(result.samples)))
    table.add_row("Duration", f"{result.duration_ms / 1000:.1f} s")
    console.print(table)

    speeds = result.speeds
    if speeds:
        console.print(
            Panel(
                f"[{color}]{create_histogram(speeds)}[/{color}]\n"
                f"[dim]Min: {min(speeds):.1f} Mbps  Max: {max(speeds):.1f} Mbps[/dim]",
                title="Speed Per Batch",
            )
        )


def print_final_results(metrics: Metrics, isp: str = "") -> None:
    console.print()
    console.print(
        Panel.fit(
            (f"[bold cyan]ISP:[/bold cyan] {isp}\n\n" if isp else "")
            + f"[bold white]   Ping:[/bold white]  [bold yellow]{metrics.ping:.1f} ms[/bold yellow]  "
            f"[dim](jitter: {metrics.jitter:.1f} ms)[/dim]\n"
            f"[bold white]   Download:[/bold white]  [bold green]{format_speed(metrics.download)}[/bold green]\n"
            f"[bold white]   Upload (est.):[/bold white]  [bold blue]{format_speed(metrics.upload)}[/bold blue]\n"
            f"[bold white]   Signal:[/bold white]  {metrics.signal_strength:.0f}/100",
            title="[bold]Results[/bold]",
            border_style="cyan",
        )
    )
    console.print(
        "[dim]Upload is estimated from the download speed and link type, "
        "not measured.[/dim]"
    )
    console.print()


def print_qos(verdicts: List[QoSVerdict]) -> None:
    table = Table(title="QoS Scorecard", box=box.ROUNDED)
    table.add_column("Use case", style="bold")
    table.add_column("Verdict", justify="right")
    for v in verdicts:
        color = "green" if v.passed else "red"
        table.add_row(v.name, f"[{color}]{verdict_label(v.passed)}[/{color}]")
    console.print(table)


def print_history(entries: List[SpeedTestResult]) -> None:
    if not entries:
        console.print("[dim]No results yet.[/dim]")
        return

    table = Table(title="Recent Tests", box=box.ROUNDED)
    table.add_column("Date", style="dim")
    table.add_column("Download", justify="right")
    table.add_column("Upload (est.)", justify="right")
    table.add_column("Ping", justify="right")
    table.add_column("ISP")
    for e in entries:
        table.add_row(
            e.date,
            format_speed(e.download),
            format_speed(e.upload),
            format_latency(e.ping),
            e.isp,
        )
    console.print(table)


def print_event_log(entries: List[LogEntry], limit: int = 10) -> None:
    if not entries:
        return

    table = Table(title="Event Log", box=box.SIMPLE)
    table.add_column("Time", style="dim")
    table.add_column("Event")
    for e in entries[:limit]:
        style = _KIND_STYLES.get(e.kind, "white")
        table.add_row(e.time, f"[{style}]{e.message}[/{style}]")
    console.print(table)


# ---------------------------------------------------------------------------
# Progress display
# ---------------------------------------------------------------------------

class ProgressDisplay:
    """
    ``rich`` progress bar fed by engine events.

    Pass the instance to ``SpeedTestEngine.subscribe``; it reacts to the
    ``progress`` and ``metrics`` events and ignores the rest.
    """

    def __init__(self) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TextColumn("[bold cyan]{task.fields[speed]}[/bold cyan]"),
            TimeElapsedColumn(),
            console=console,
        )
        self._task_id = None

    def start(self, description: str = "Testing") -> None:
        self.progress.start()
        self._task_id = self.progress.add_task(description, total=100, speed="")

    def __call__(self, event: str, payload: Any) -> None:
        if self._task_id is None:
            return
        if event == "progress":
            self.progress.update(self._task_id, completed=payload)
        elif event == "metrics":
            speed = format_speed(payload.download) if payload.download > 0 else "..."
            self.progress.update(self._task_id, speed=speed)

    def stop(self) -> None:
        self.progress.stop()
        self._task_id = None
