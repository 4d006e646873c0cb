"""
HTTP endpoints for Kubernetes health checks and Prometheus.

- /health (also /): liveness, always healthy while the process serves requests
- /ready: readiness, lists the registered tools
- /metrics: Prometheus text exposition
"""

from typing import Callable

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse

from k8s_mcp_server import __version__
from k8s_mcp_server.http.metrics import MetricsCollector

SERVICE_NAME = "k8s_mcp_server"
PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def register_http_routes(
    mcp: FastMCP,
    metrics: MetricsCollector,
    get_registered_tools: Callable[[], list[str]],
) -> None:
    """Register custom HTTP routes for health checks and metrics."""

    # The container image HEALTHCHECK requests "/"
    @mcp.custom_route("/", methods=["GET"])
    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> JSONResponse:
        """Kubernetes liveness endpoint."""
        return JSONResponse({
            "status": "healthy",
            "version": __version__,
            "service": SERVICE_NAME,
        })

    @mcp.custom_route("/ready", methods=["GET"])
    async def ready_check(request: Request) -> JSONResponse:
        """
        Kubernetes readiness endpoint.

        The cluster connection is made lazily on the first tool call, so
        readiness only reflects that the tools are registered.
        """
        tools = get_registered_tools()
        checks = {
            "server": True,
            "tools_registered": len(tools) > 0,
        }
        is_ready = all(checks.values())
        return JSONResponse(
            {
                "status": "ready" if is_ready else "not_ready",
                "checks": checks,
                "registered_tools": tools,
            },
            status_code=200 if is_ready else 503,
        )

    @mcp.custom_route("/metrics", methods=["GET"])
    async def metrics_endpoint(request: Request) -> PlainTextResponse:
        """Prometheus metrics endpoint."""
        return PlainTextResponse(
            metrics.format_prometheus(),
            media_type=PROMETHEUS_CONTENT_TYPE,
        )
