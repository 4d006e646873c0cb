"""
API resource discovery.
"""

from k8s_mcp_server.cluster.client import ClusterClient
from k8s_mcp_server.cluster.runner import DEFAULT_TIMEOUT, run_blocking
from k8s_mcp_server.cluster.types import APIResourceDescriptor


class APIDiscovery:
    """Enumerates the resource kinds the cluster serves."""

    def __init__(self, client: ClusterClient, timeout: float = DEFAULT_TIMEOUT):
        self.client = client
        self.timeout = timeout

    async def discover(
        self,
        include_namespace_scoped: bool = True,
        include_cluster_scoped: bool = True,
    ) -> list[APIResourceDescriptor]:
        """
        List API resource kinds, filtered by scope.

        The registry is queried on every call (no caching) and its order is
        kept as-is.

        Args:
            include_namespace_scoped: Include kinds such as Pod or Deployment
            include_cluster_scoped: Include kinds such as Node or Namespace

        Returns:
            Descriptors for the selected partitions

        Raises:
            BackendUnavailable: If the discovery endpoints cannot be read
        """
        descriptors = await run_blocking(
            "discover API resources",
            self.client.discover_resources,
            timeout=self.timeout,
            request_timeout=self.timeout,
        )

        return [
            d
            for d in descriptors
            if (include_namespace_scoped if d.namespaced else include_cluster_scoped)
        ]
