#!/usr/bin/env python3
"""
NetDash CLI -- client-side network telemetry from the terminal.

Usage::

    python netdash.py                       # rich dashboard
    python netdash.py --simple              # plain text
    python netdash.py --json                # JSON to stdout
    python netdash.py -o result.json        # save to file
    python netdash.py --history             # show past results
    python netdash.py --export report.csv   # export history table
    python netdash.py --repeat 5 --interval 60
    python netdash.py --link cellular       # hint for the upload estimate
    python netdash.py --watch 300           # log connectivity changes
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from typing import Any, Dict, Optional

from meter.config import load_config, validate_config
from meter.constants import MONITOR_INTERVAL
from meter.engine import SpeedTestEngine
from meter.events import EventLog
from meter.exceptions import NetDashError
from meter.history import ResultHistory
from meter.logging_setup import setup_logging
from meter.models import ConnectionHint, LogEntry
from meter.monitor import ConnectivityMonitor
from meter.probe import HttpProbe
from meter.store import JsonFileStore
from ui.dashboard import (
    ProgressDisplay,
    console,
    print_event_log,
    print_final_results,
    print_header,
    print_history,
    print_latency_details,
    print_network_info,
    print_qos,
    print_speed_result,
)
from ui.output import create_result_json, format_text_result, save_json, save_report


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def _build_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Merge CLI overrides over the config file; raises ``ConfigError``."""
    config = load_config()
    overrides = {
        "ping_count": args.ping_count,
        "time_budget": args.duration,
        "concurrency": args.connections,
        "log_level": args.log_level,
    }
    config.update({k: v for k, v in overrides.items() if v is not None})
    validate_config(config)
    return config


def _store(config: Dict[str, Any]) -> JsonFileStore:
    return JsonFileStore(config.get("history_file") or None)


# ---------------------------------------------------------------------------
# Core test runner
# ---------------------------------------------------------------------------

async def run_netdash(
    config: Dict[str, Any],
    *,
    json_output: bool = False,
    output_file: Optional[str] = None,
    simple: bool = False,
    link: Optional[str] = None,
) -> Optional[dict]:
    """Execute one full test and return a JSON-serialisable dict."""

    show_ui = not json_output and not simple
    hint = ConnectionHint(type=link) if link else None

    async with HttpProbe(timeout=float(config["probe_timeout"])) as probe:
        engine = SpeedTestEngine(
            probe,
            _store(config),
            config=config,
            hint_provider=lambda: hint,
        )
        engine.load_history()

        # -- Network info ---------------------------------------------------
        if show_ui:
            print_header()
            console.print("[dim]Fetching network info...[/dim]")

        await engine.refresh_network_info()

        if show_ui:
            print_network_info(engine.network, engine.link_label())

        # -- Test -----------------------------------------------------------
        progress = None
        unsubscribe = None
        if show_ui:
            progress = ProgressDisplay()
            unsubscribe = engine.subscribe(progress)
            progress.start("Testing")

        try:
            stored = await engine.run_test()
        finally:
            if progress:
                progress.stop()
            if unsubscribe:
                unsubscribe()

        if stored is None:
            if show_ui:
                print_event_log(engine.log.entries)
            else:
                print("Error: speed test failed (network error)", file=sys.stderr)
            return None

        # -- Summary --------------------------------------------------------
        if show_ui:
            print_latency_details(engine.last_latency)
            print_speed_result(engine.last_throughput, "Download Results", "green")
            print_final_results(engine.metrics, engine.network.isp)
            print_qos(engine.qos())
            print_event_log(engine.log.entries)
        elif simple:
            print(format_text_result(engine.metrics, engine.network.isp))

        # -- JSON result ----------------------------------------------------
        result_json = create_result_json(
            metrics=engine.metrics,
            network=engine.network,
            latency_results=engine.last_latency.to_dict() if engine.last_latency else None,
            download_results=engine.last_throughput.to_dict() if engine.last_throughput else None,
            qos=engine.qos(),
        )

        if json_output:
            print(json.dumps(result_json, indent=2))

        if output_file:
            save_json(result_json, output_file)
            if not json_output:
                console.print(f"\n[green]Results saved to:[/green] {output_file}")

        return result_json


# ---------------------------------------------------------------------------
# Connectivity watch
# ---------------------------------------------------------------------------

async def watch_connectivity(config: Dict[str, Any], seconds: float) -> None:
    """Log connectivity transitions for *seconds*."""
    log = EventLog()

    def _print(entry: LogEntry) -> None:
        color = "red" if entry.kind == "error" else "green"
        console.print(f"[dim]{entry.time}[/dim] [{color}]{entry.message}[/{color}]")

    log.on_entry = _print

    async with HttpProbe(timeout=float(config["probe_timeout"])) as probe:
        monitor = ConnectivityMonitor(probe, log, url=config["ping_url"], interval=MONITOR_INTERVAL)
        online = await monitor.check()
        console.print(f"[dim]Watching connectivity ({'online' if online else 'offline'})...[/dim]")

        monitor.start()
        try:
            await asyncio.sleep(seconds)
        finally:
            monitor.stop()
            await monitor.wait()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main() -> None:
    parser = argparse.ArgumentParser(
        description="NetDash -- client-side network telemetry",
    )
    # Output modes
    parser.add_argument("--json", "-j", action="store_true", help="Output results as JSON")
    parser.add_argument("--output", "-o", type=str, metavar="FILE", help="Save results to JSON file")
    parser.add_argument("--simple", "-s", action="store_true", help="Simple output mode (no dashboard)")

    # Test parameters (default: config file)
    parser.add_argument("--ping-count", type=int, metavar="N", help="Number of latency probes")
    parser.add_argument("--duration", type=float, metavar="SECS", help="Download test time budget in seconds")
    parser.add_argument("--connections", type=int, metavar="N", help="Concurrent transfers per batch")
    parser.add_argument(
        "--link",
        choices=["cellular", "wifi", "ethernet"],
        help="Link type, used to pick the upload estimate ratio",
    )

    # Repeat mode
    parser.add_argument("--repeat", type=int, default=1, metavar="N", help="Run the test N times (default: 1)")
    parser.add_argument("--interval", type=float, default=60.0, metavar="SECS", help="Seconds between repeated tests (default: 60)")

    # History
    parser.add_argument("--history", action="store_true", help="Show past test results and exit")
    parser.add_argument("--export", type=str, metavar="FILE", help="Export history as a CSV report and exit")
    parser.add_argument("--clear-history", action="store_true", help="Delete stored results and exit")

    # Monitoring / diagnostics
    parser.add_argument("--watch", type=float, metavar="SECS", help="Log connectivity changes for SECS seconds")
    parser.add_argument("--log-level", type=str, metavar="LEVEL", help="Logging level (default: WARNING)")

    args = parser.parse_args()

    try:
        config = _build_config(args)
    except NetDashError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    setup_logging(config["log_level"])

    # History modes
    if args.history or args.export or args.clear_history:
        history = ResultHistory(_store(config))
        history.load()
        if args.clear_history:
            history.clear()
            console.print("[green]History cleared[/green]")
        elif args.export:
            save_report(history.export_csv(), args.export)
            console.print(f"[green]Report written to:[/green] {args.export}")
        else:
            print_history(history.entries)
        return

    if args.repeat < 1:
        console.print("[red]Error: --repeat must be >= 1[/red]")
        sys.exit(1)

    try:
        if args.watch:
            asyncio.run(watch_connectivity(config, args.watch))
            return

        failed = False
        for run_idx in range(args.repeat):
            if args.repeat > 1:
                console.print(f"\n[bold cyan]--- Run {run_idx + 1}/{args.repeat} ---[/bold cyan]")

            result = asyncio.run(
                run_netdash(
                    config,
                    json_output=args.json,
                    output_file=args.output,
                    simple=args.simple,
                    link=args.link,
                )
            )
            failed = failed or result is None

            # Wait between runs (but not after the last one)
            if run_idx < args.repeat - 1:
                if not args.json:
                    console.print(f"[dim]Next run in {args.interval:.0f}s...[/dim]")
                time.sleep(args.interval)

    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(1)
    except (NetDashError, IOError) as exc:
        console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
