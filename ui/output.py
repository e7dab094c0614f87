"""
Output formatting -- JSON export, plain text, and report files.
"""
from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from meter.models import Metrics, NetworkInfo
from meter.qos import QoSVerdict
from meter.upload import UPLOAD_IS_ESTIMATE


def create_result_json(
    metrics: Metrics,
    network: NetworkInfo,
    latency_results: Optional[Dict[str, Any]] = None,
    download_results: Optional[Dict[str, Any]] = None,
    qos: Optional[List[QoSVerdict]] = None,
) -> Dict[str, Any]:
    """Build a JSON-serialisable summary of one run."""
    result: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "network": network.to_dict(),
        "metrics": metrics.to_dict(),
        "upload": {
            "speed_mbps": round(metrics.upload, 2),
            "estimated": UPLOAD_IS_ESTIMATE,
        },
    }
    if latency_results:
        result["latency"] = latency_results
    if download_results:
        result["download"] = download_results
    if qos is not None:
        result["qos"] = [v.to_dict() for v in qos]
    return result


def _write_atomic(filepath: str, write) -> None:  # noqa: ANN001
    dir_path = os.path.dirname(filepath) or "."
    tmp = os.path.join(dir_path, f".tmp_{os.path.basename(filepath)}")

    try:
        with open(tmp, "w", encoding="utf-8") as fh:
            write(fh)
        os.replace(tmp, filepath)
    except (IOError, OSError) as exc:
        # Clean up partial temp file
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise IOError(f"Failed to write {filepath}: {exc}") from exc


def save_json(result: Dict[str, Any], filepath: str) -> None:
    """Write *result* to *filepath* atomically (write-tmp then rename)."""
    _write_atomic(filepath, lambda fh: json.dump(result, fh, indent=2, ensure_ascii=False))


def save_report(report: str, filepath: str) -> None:
    """Write an exported history table to *filepath*."""
    _write_atomic(filepath, lambda fh: fh.write(report + "\n"))


# ---------------------------------------------------------------------------
# Plain-text helpers
# ---------------------------------------------------------------------------

def format_text_result(metrics: Metrics, isp: str) -> str:
    sep = "=" * 50
    mid = "-" * 50
    return (
        f"{sep}\n"
        f"NetDash Results\n"
        f"{sep}\n"
        f"ISP: {isp}\n"
        f"{mid}\n"
        f"Ping: {metrics.ping:.1f} ms (jitter: {metrics.jitter:.1f} ms)\n"
        f"Download: {metrics.download:.2f} Mbps\n"
        f"Upload (estimated): {metrics.upload:.2f} Mbps\n"
        f"{sep}"
    )
