"""
FastMCP Server Setup.

This module creates and configures the MCP server instance.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from fastmcp import FastMCP

from k8s_mcp_server import __version__
from k8s_mcp_server.cluster import ClusterClient, KubernetesClusterClient
from k8s_mcp_server.config import K8sMCPServerConfig
from k8s_mcp_server.http import MetricsCollector, register_http_routes
from k8s_mcp_server.middleware import ToolCallMiddleware
from k8s_mcp_server.tools import ClusterToolHandlers, register_cluster_tools
from k8s_mcp_server.utils.logging import get_logger

logger = get_logger(__name__)

SERVER_NAME = "k8s_mcp_server"
PING_TOOL = "k8s_ping"


@dataclass
class ServerBundle:
    """Bundle containing server and related components."""

    server: FastMCP
    handlers: ClusterToolHandlers
    metrics: MetricsCollector
    cluster_client: ClusterClient


def create_cluster_client(config: K8sMCPServerConfig) -> KubernetesClusterClient:
    """Build the Kubernetes-backed client from configuration."""
    settings = config.kubernetes
    return KubernetesClusterClient(
        kubeconfig=settings.kubeconfig,
        context=settings.context,
        in_cluster=settings.in_cluster,
    )


def create_server(
    config: K8sMCPServerConfig,
    cluster_client: Optional[ClusterClient] = None,
) -> ServerBundle:
    """
    Create and configure the MCP server.

    No cluster connection is made here; the client connects on the first
    tool call, so the server starts without a reachable cluster.

    Args:
        config: Server configuration
        cluster_client: Backend to use (default: built from config.kubernetes)

    Returns:
        ServerBundle containing the FastMCP instance and its components
    """
    if cluster_client is None:
        cluster_client = create_cluster_client(config)

    metrics = MetricsCollector()
    handlers = ClusterToolHandlers(
        cluster_client,
        request_timeout=config.kubernetes.request_timeout,
        event_settings=config.events,
    )

    # Track registered tools for readiness check
    registered_tools: list[str] = []

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[dict]:
        """
        Server lifespan manager.

        Yields a state dict that's available to all tools via context and
        releases the cluster connection at shutdown.
        """
        logger.info(f"K8s MCP Server v{__version__} starting...")

        state = {
            "config": config,
            "metrics": metrics,
            "handlers": handlers,
        }

        try:
            yield state
        finally:
            logger.info("K8s MCP Server shutting down...")
            cluster_client.close()

    # Note: host/port are passed to server.run() at startup time
    mcp = FastMCP(
        name=SERVER_NAME,
        lifespan=lifespan,
    )

    _register_middleware(mcp, config, metrics)

    registered_tools.extend(register_cluster_tools(mcp, handlers))
    registered_tools.append(_register_builtin_tools(mcp))

    register_http_routes(mcp, metrics, lambda: list(registered_tools))

    return ServerBundle(
        server=mcp,
        handlers=handlers,
        metrics=metrics,
        cluster_client=cluster_client,
    )


def _register_builtin_tools(mcp: FastMCP) -> str:
    """
    Register built-in MCP tools.

    These don't touch the cluster.
    """

    @mcp.tool(
        name=PING_TOOL,
        annotations={
            "title": "Ping",
            "readOnlyHint": True,
            "destructiveHint": False,
        },
    )
    async def k8s_ping() -> str:
        """
        Simple ping tool to verify server is responding.

        Returns:
            str: Pong response with server version
        """
        return f"pong from {SERVER_NAME} v{__version__}"

    return PING_TOOL


def _register_middleware(
    mcp: FastMCP,
    config: K8sMCPServerConfig,
    metrics: MetricsCollector,
) -> None:
    """
    Register MCP middleware for request processing.

    Args:
        mcp: FastMCP server instance
        config: Server configuration
        metrics: Collector for tool call outcomes
    """
    verbose = config.server.log_level == "debug"
    mcp.add_middleware(ToolCallMiddleware(metrics=metrics, verbose=verbose))
    logger.info(f"Registered ToolCallMiddleware (verbose={verbose})")
