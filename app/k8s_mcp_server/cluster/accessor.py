"""
Generic resource retrieval.

Lists or fetches resources of any kind through a ClusterClient and applies
optional field projection to the results.
"""

from typing import Optional, Sequence

from k8s_mcp_server.cluster.client import ClusterClient
from k8s_mcp_server.cluster.errors import BackendUnavailable, InvalidArgument, NotFound
from k8s_mcp_server.cluster.runner import DEFAULT_TIMEOUT, run_blocking
from k8s_mcp_server.cluster.types import ResourceQuery
from k8s_mcp_server.projection import Document, project_fields
from k8s_mcp_server.utils.logging import get_logger

logger = get_logger(__name__)


class ResourceAccessor:
    """
    Retrieves resources of any kind.

    Selectors are passed to the API server unchanged; no filtering happens
    client-side.
    """

    def __init__(self, client: ClusterClient, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the accessor.

        Args:
            client: Cluster API capability
            timeout: Deadline in seconds for each API call
        """
        self.client = client
        self.timeout = timeout

    async def list(
        self,
        query: ResourceQuery,
        field_paths: Optional[Sequence[str]] = None,
    ) -> list[Document]:
        """
        List resources matching a query.

        Args:
            query: Kind, namespace and selectors
            field_paths: Optional paths to project each item onto

        Returns:
            Resources as documents, projected when field_paths is non-empty

        Raises:
            InvalidArgument: If the kind is empty
            BackendUnavailable: If the API call fails, including unknown kinds
        """
        if not query.kind:
            raise InvalidArgument.missing("Kind")

        description = f"list {query.kind}"
        try:
            items = await run_blocking(
                description,
                self.client.list_resources,
                query,
                timeout=self.timeout,
                request_timeout=self.timeout,
            )
        except NotFound as e:
            raise BackendUnavailable(e.message) from e

        logger.debug(f"{description}: {len(items)} item(s)")

        if not field_paths:
            return items
        return [project_fields(item, field_paths) for item in items]

    async def get(
        self,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        field_paths: Optional[Sequence[str]] = None,
    ) -> Document:
        """
        Get a single resource by name.

        Raises:
            InvalidArgument: If kind or name is empty
            NotFound: If the kind or the object does not exist
            BackendUnavailable: If the API call fails
        """
        if not kind:
            raise InvalidArgument.missing("kind")
        if not name:
            raise InvalidArgument.missing("name")

        item = await run_blocking(
            f"get {kind} {name}",
            self.client.get_resource,
            kind,
            name,
            namespace,
            timeout=self.timeout,
            request_timeout=self.timeout,
        )

        if not field_paths:
            return item
        return project_fields(item, field_paths)
