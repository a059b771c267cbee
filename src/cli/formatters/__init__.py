from src.cli.formatters.graph_formatter import format_graph
from src.cli.formatters.result_formatter import (
    format_duration,
    format_error,
    format_failure_details,
    format_resolved,
    format_summary,
    format_task_result,
    format_task_started,
)

__all__ = [
    "format_duration",
    "format_error",
    "format_failure_details",
    "format_graph",
    "format_resolved",
    "format_summary",
    "format_task_result",
    "format_task_started",
]
