"""
HTTP endpoints for health checks and metrics.

Provides:
- /health: Kubernetes liveness check
- /ready: Kubernetes readiness check
- /metrics: Prometheus-format metrics
"""

from k8s_mcp_server.http.metrics import OUTCOME_OK, MetricsCollector
from k8s_mcp_server.http.routes import register_http_routes

__all__ = [
    "MetricsCollector",
    "OUTCOME_OK",
    "register_http_routes",
]
