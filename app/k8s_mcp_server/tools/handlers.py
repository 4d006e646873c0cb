"""
Cluster inspection tool handlers.

Each handler takes the flat argument mapping of an MCP tool call, validates
it, runs the matching operation and returns the result as JSON text. Failures
are raised as ClusterToolError subclasses.
"""

import json
import math
from typing import Any, Awaitable, Callable, Mapping, Optional

from k8s_mcp_server.cluster import (
    APIDiscovery,
    ClusterClient,
    EventPipeline,
    EventQuery,
    EventSortField,
    InvalidArgument,
    ResourceAccessor,
    ResourceQuery,
    SerializationError,
)
from k8s_mcp_server.cluster.runner import DEFAULT_TIMEOUT
from k8s_mcp_server.config.models import EventSettings
from k8s_mcp_server.projection import parse_field_paths
from k8s_mcp_server.utils.logging import get_logger

logger = get_logger(__name__)

Arguments = Mapping[str, Any]

_TRUE_STRINGS = {"true", "yes", "1"}
_FALSE_STRINGS = {"false", "no", "0"}


def _optional_string(args: Arguments, name: str) -> Optional[str]:
    value = args.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f"parameter {name} must be a string")
    return value.strip() or None


def _optional_text(args: Arguments, name: str) -> Optional[str]:
    """Read a string verbatim; only an empty string counts as absent."""
    value = args.get(name)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f"parameter {name} must be a string")
    return value


def _require_string(args: Arguments, name: str) -> str:
    value = _optional_string(args, name)
    if value is None:
        raise InvalidArgument.missing(name)
    return value


def _optional_bool(args: Arguments, name: str, default: bool) -> bool:
    value = args.get(name)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise InvalidArgument(f"parameter {name} must be a boolean")


def _optional_int(args: Arguments, name: str) -> Optional[int]:
    """Read a number; JSON clients often send integers as floats (5.0)."""
    value = args.get(name)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidArgument(f"parameter {name} must be a number")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise InvalidArgument(f"parameter {name} must be a number") from None
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidArgument(f"parameter {name} must be a finite number")
        return int(value)
    if isinstance(value, int):
        return value
    raise InvalidArgument(f"parameter {name} must be a number")


def _optional_sort_field(args: Arguments, name: str) -> Optional[EventSortField]:
    value = _optional_string(args, name)
    if value is None:
        return None
    try:
        return EventSortField(value)
    except ValueError:
        allowed = ", ".join(EventSortField.values())
        raise InvalidArgument(
            f"parameter {name} must be one of: {allowed} (got {value!r})"
        ) from None


def to_json(result: Any) -> str:
    """Encode a handler result, raising SerializationError on failure."""
    try:
        return json.dumps(result, indent=2, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"result cannot be encoded as JSON: {e}") from e


class ClusterToolHandlers:
    """
    The four cluster inspection handlers.

    Holds no per-call state; one instance serves concurrent calls.
    """

    def __init__(
        self,
        client: ClusterClient,
        request_timeout: float = DEFAULT_TIMEOUT,
        event_settings: Optional[EventSettings] = None,
    ):
        """
        Initialize handlers.

        Args:
            client: Cluster API capability shared by all calls
            request_timeout: Deadline in seconds for each API call
            event_settings: Defaults for getEvents
        """
        event_settings = event_settings or EventSettings()

        self.accessor = ResourceAccessor(client, timeout=request_timeout)
        self.discovery = APIDiscovery(client, timeout=request_timeout)
        self.events = EventPipeline(
            client,
            timeout=request_timeout,
            default_max_events=event_settings.default_max_events,
            default_sort_by=event_settings.default_sort_by,
        )

        self._handlers: dict[str, Callable[[Arguments], Awaitable[str]]] = {
            "listResources": self.list_resources,
            "getResource": self.get_resource,
            "getAPIResources": self.get_api_resources,
            "getEvents": self.get_events,
        }

    @property
    def names(self) -> list[str]:
        """Names of all handlers."""
        return list(self._handlers)

    async def dispatch(self, name: str, arguments: Optional[Arguments] = None) -> str:
        """
        Invoke a handler by name.

        Raises:
            InvalidArgument: If no handler has that name
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise InvalidArgument(f"unknown tool: {name}")
        return await handler(arguments or {})

    async def list_resources(self, args: Arguments) -> str:
        """List resources of a kind; arguments: Kind, namespace, labelSelector, fieldSelector, fieldPaths."""
        query = ResourceQuery(
            kind=_require_string(args, "Kind"),
            namespace=_optional_string(args, "namespace"),
            label_selector=_optional_string(args, "labelSelector"),
            field_selector=_optional_string(args, "fieldSelector"),
        )
        field_paths = parse_field_paths(_optional_string(args, "fieldPaths"))

        logger.info(
            f"listResources kind={query.kind} namespace={query.namespace or '*'}"
            f" projected={bool(field_paths)}"
        )
        items = await self.accessor.list(query, field_paths=field_paths)
        return to_json(items)

    async def get_resource(self, args: Arguments) -> str:
        """Get one resource; arguments: kind, name, namespace, fieldPaths."""
        kind = _require_string(args, "kind")
        name = _require_string(args, "name")
        namespace = _optional_string(args, "namespace")
        field_paths = parse_field_paths(_optional_string(args, "fieldPaths"))

        logger.info(f"getResource kind={kind} name={name} namespace={namespace or '-'}")
        item = await self.accessor.get(kind, name, namespace, field_paths=field_paths)
        return to_json(item)

    async def get_api_resources(self, args: Arguments) -> str:
        """List API resource kinds; arguments: includeNamespaceScoped, includeClusterScoped."""
        include_namespaced = _optional_bool(args, "includeNamespaceScoped", True)
        include_cluster = _optional_bool(args, "includeClusterScoped", True)

        logger.info(
            f"getAPIResources namespaced={include_namespaced} cluster={include_cluster}"
        )
        descriptors = await self.discovery.discover(
            include_namespace_scoped=include_namespaced,
            include_cluster_scoped=include_cluster,
        )
        return to_json([d.to_dict() for d in descriptors])

    async def get_events(self, args: Arguments) -> str:
        """Get recent events; arguments: namespace, messageFilter, sortBy, maxEvents."""
        query = EventQuery(
            namespace=_optional_string(args, "namespace"),
            message_filter=_optional_text(args, "messageFilter"),
            sort_by=_optional_sort_field(args, "sortBy"),
            max_events=_optional_int(args, "maxEvents"),
        )

        logger.info(
            f"getEvents namespace={query.namespace or '*'} filter={query.message_filter!r}"
            f" sortBy={query.sort_by.value if query.sort_by else 'default'}"
        )
        events = await self.events.get_events(query)
        return to_json(events)
