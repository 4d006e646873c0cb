"""
MCP Tools for Kubernetes cluster inspection.

- listResources: list resources of any kind, with optional field projection
- getResource: get one resource by kind and name
- getAPIResources: enumerate the resource kinds the cluster serves
- getEvents: recent events, filtered and sorted
"""

from k8s_mcp_server.tools.handlers import ClusterToolHandlers, to_json
from k8s_mcp_server.tools.registry import register_cluster_tools

__all__ = [
    "ClusterToolHandlers",
    "register_cluster_tools",
    "to_json",
]
