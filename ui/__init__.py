"""UI layer -- Rich dashboard and output formatters."""

from .dashboard import (
    ProgressDisplay,
    console,
    create_histogram,
    print_event_log,
    print_final_results,
    print_header,
    print_history,
    print_latency_details,
    print_network_info,
    print_qos,
    print_speed_result,
)
from .output import (
    create_result_json,
    format_text_result,
    save_json,
    save_report,
)

__all__ = [
    "ProgressDisplay",
    "console",
    "create_histogram",
    "create_result_json",
    "format_text_result",
    "print_event_log",
    "print_final_results",
    "print_header",
    "print_history",
    "print_latency_details",
    "print_network_info",
    "print_qos",
    "print_speed_result",
    "save_json",
    "save_report",
]
