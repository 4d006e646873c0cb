"""
Tool Registry.

Registers the cluster inspection handlers with FastMCP. Handler failures
are re-raised as ToolError so clients receive an error result
(isError: true) carrying the error code and message.
"""

from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from k8s_mcp_server.cluster.errors import ClusterToolError
from k8s_mcp_server.tools.handlers import ClusterToolHandlers
from k8s_mcp_server.utils.logging import get_logger

logger = get_logger(__name__)

READ_ONLY_ANNOTATIONS = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": True,
}


async def _invoke(handlers: ClusterToolHandlers, name: str, arguments: dict[str, Any]) -> str:
    """Run a handler, converting domain errors to ToolError."""
    try:
        return await handlers.dispatch(name, arguments)
    except ClusterToolError as e:
        logger.warning(f"{name} failed: {e}")
        raise ToolError(str(e)) from e


def register_cluster_tools(mcp: FastMCP, handlers: ClusterToolHandlers) -> list[str]:
    """
    Register the cluster inspection tools.

    Parameters are declared optional so that a missing required argument
    reaches the handler and is reported as "missing required parameter".

    Args:
        mcp: FastMCP server instance
        handlers: Handlers bound to a cluster client

    Returns:
        Names of the registered tools
    """

    @mcp.tool(
        name="listResources",
        annotations={"title": "List Resources", **READ_ONLY_ANNOTATIONS},
    )
    async def list_resources(
        Kind: str | None = None,
        namespace: str | None = None,
        labelSelector: str | None = None,
        fieldSelector: str | None = None,
        fieldPaths: str | None = None,
    ) -> str:
        """
        List Kubernetes resources of any kind as JSON.

        Args:
            Kind: Resource kind, e.g. Pod, Deployment, Node (required)
            namespace: Namespace to list in; omit for all namespaces
            labelSelector: Label selector, e.g. "app=nginx,tier!=db"
            fieldSelector: Field selector, e.g. "status.phase=Running"
            fieldPaths: Comma-separated dot paths to keep in each item,
                e.g. "metadata.name,status.phase". Omit for full objects.
        """
        return await _invoke(
            handlers,
            "listResources",
            {
                "Kind": Kind,
                "namespace": namespace,
                "labelSelector": labelSelector,
                "fieldSelector": fieldSelector,
                "fieldPaths": fieldPaths,
            },
        )

    @mcp.tool(
        name="getResource",
        annotations={"title": "Get Resource", **READ_ONLY_ANNOTATIONS},
    )
    async def get_resource(
        kind: str | None = None,
        name: str | None = None,
        namespace: str | None = None,
        fieldPaths: str | None = None,
    ) -> str:
        """
        Get a single Kubernetes resource as JSON.

        Args:
            kind: Resource kind, e.g. Pod (required)
            name: Resource name (required)
            namespace: Namespace of the resource; omit for cluster-scoped kinds
            fieldPaths: Comma-separated dot paths to keep, e.g. "spec.replicas"
        """
        return await _invoke(
            handlers,
            "getResource",
            {"kind": kind, "name": name, "namespace": namespace, "fieldPaths": fieldPaths},
        )

    @mcp.tool(
        name="getAPIResources",
        annotations={"title": "Get API Resources", **READ_ONLY_ANNOTATIONS},
    )
    async def get_api_resources(
        includeNamespaceScoped: bool | None = True,
        includeClusterScoped: bool | None = True,
    ) -> str:
        """
        List the resource kinds the cluster serves, with group, version,
        kind, plural name and scope.

        Args:
            includeNamespaceScoped: Include namespaced kinds (default true)
            includeClusterScoped: Include cluster-scoped kinds (default true)
        """
        return await _invoke(
            handlers,
            "getAPIResources",
            {
                "includeNamespaceScoped": includeNamespaceScoped,
                "includeClusterScoped": includeClusterScoped,
            },
        )

    @mcp.tool(
        name="getEvents",
        annotations={"title": "Get Events", **READ_ONLY_ANNOTATIONS},
    )
    async def get_events(
        namespace: str | None = None,
        messageFilter: str | None = None,
        sortBy: str | None = None,
        maxEvents: float | None = None,
    ) -> str:
        """
        Get recent Kubernetes events, most recent first.

        Args:
            namespace: Namespace to read events from; omit for all namespaces
            messageFilter: Keep only events whose message contains this text
                (case-insensitive)
            sortBy: Timestamp to sort by: lastTime (default), firstTime or eventTime
            maxEvents: Maximum number of events to return (default 20)
        """
        return await _invoke(
            handlers,
            "getEvents",
            {
                "namespace": namespace,
                "messageFilter": messageFilter,
                "sortBy": sortBy,
                "maxEvents": maxEvents,
            },
        )

    logger.info(f"Registered cluster tools: {', '.join(handlers.names)}")
    return handlers.names
