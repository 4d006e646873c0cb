"""
Read-only access to the Kubernetes cluster.

This module handles:
- Generic list/get of any resource kind
- API resource discovery
- Event retrieval, filtering and ordering
"""

from k8s_mcp_server.cluster.accessor import ResourceAccessor
from k8s_mcp_server.cluster.client import ClusterClient, KubernetesClusterClient
from k8s_mcp_server.cluster.discovery import APIDiscovery
from k8s_mcp_server.cluster.errors import (
    BackendUnavailable,
    ClusterToolError,
    InvalidArgument,
    NotFound,
    SerializationError,
)
from k8s_mcp_server.cluster.events import EventPipeline, summarize_event
from k8s_mcp_server.cluster.types import (
    APIResourceDescriptor,
    EventQuery,
    EventSortField,
    ResourceQuery,
)

__all__ = [
    # Types
    "ResourceQuery",
    "EventQuery",
    "EventSortField",
    "APIResourceDescriptor",
    # Exceptions
    "ClusterToolError",
    "InvalidArgument",
    "NotFound",
    "BackendUnavailable",
    "SerializationError",
    # Client
    "ClusterClient",
    "KubernetesClusterClient",
    # Operations
    "ResourceAccessor",
    "APIDiscovery",
    "EventPipeline",
    "summarize_event",
]
