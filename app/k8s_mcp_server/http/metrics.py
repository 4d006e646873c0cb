"""
Prometheus metrics.

Counts tool calls by tool name and by outcome code and renders them in the
Prometheus text exposition format for the /metrics endpoint.
"""

import threading
import time
from dataclasses import dataclass, field

from k8s_mcp_server import __version__

METRIC_PREFIX = "k8s_mcp"

OUTCOME_OK = "OK"


@dataclass
class MetricsCollector:
    """
    In-process metrics collector for Prometheus exposition.

    Counters are updated from the event loop and from the /metrics route,
    so updates go through a lock.
    """

    tool_calls_total: int = 0
    tool_calls_success: int = 0
    tool_calls_error: int = 0

    start_time: float = field(default_factory=time.time)

    tool_counts: dict[str, int] = field(default_factory=dict)
    outcome_counts: dict[str, int] = field(default_factory=dict)

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def inc_tool_call(self, tool_name: str, outcome: str = OUTCOME_OK) -> None:
        """
        Record one finished tool call.

        Args:
            tool_name: Name of the tool called
            outcome: OK, or the error code the call failed with
        """
        with self._lock:
            self.tool_calls_total += 1
            if outcome == OUTCOME_OK:
                self.tool_calls_success += 1
            else:
                self.tool_calls_error += 1

            self.tool_counts[tool_name] = self.tool_counts.get(tool_name, 0) + 1
            self.outcome_counts[outcome] = self.outcome_counts.get(outcome, 0) + 1

    def format_prometheus(self) -> str:
        """Format metrics in Prometheus exposition format."""
        with self._lock:
            uptime = time.time() - self.start_time
            tool_counts = sorted(self.tool_counts.items())
            outcome_counts = sorted(self.outcome_counts.items())
            total, success, error = (
                self.tool_calls_total,
                self.tool_calls_success,
                self.tool_calls_error,
            )

        p = METRIC_PREFIX
        lines = [
            f"# HELP {p}_info Server information",
            f"# TYPE {p}_info gauge",
            f'{p}_info{{version="{__version__}"}} 1',
            "",
            f"# HELP {p}_uptime_seconds Server uptime in seconds",
            f"# TYPE {p}_uptime_seconds gauge",
            f"{p}_uptime_seconds {uptime:.2f}",
            "",
            f"# HELP {p}_tool_calls_total Total tool calls",
            f"# TYPE {p}_tool_calls_total counter",
            f"{p}_tool_calls_total {total}",
            "",
            f"# HELP {p}_tool_calls_success_total Successful tool calls",
            f"# TYPE {p}_tool_calls_success_total counter",
            f"{p}_tool_calls_success_total {success}",
            "",
            f"# HELP {p}_tool_calls_error_total Failed tool calls",
            f"# TYPE {p}_tool_calls_error_total counter",
            f"{p}_tool_calls_error_total {error}",
        ]

        if tool_counts:
            lines.extend([
                "",
                f"# HELP {p}_tool_calls_by_name Tool calls by tool name",
                f"# TYPE {p}_tool_calls_by_name counter",
            ])
            for tool_name, count in tool_counts:
                lines.append(f'{p}_tool_calls_by_name{{tool="{tool_name}"}} {count}')

        if outcome_counts:
            lines.extend([
                "",
                f"# HELP {p}_tool_calls_by_outcome Tool calls by outcome code",
                f"# TYPE {p}_tool_calls_by_outcome counter",
            ])
            for outcome, count in outcome_counts:
                lines.append(f'{p}_tool_calls_by_outcome{{code="{outcome}"}} {count}')

        return "\n".join(lines) + "\n"
