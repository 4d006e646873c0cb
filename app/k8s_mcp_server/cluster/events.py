"""
Event retrieval pipeline.

Fetches core/v1 events, reduces each to a compact summary, then filters by
message text, sorts most-recent-first and truncates.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from k8s_mcp_server.cluster.client import ClusterClient
from k8s_mcp_server.cluster.runner import DEFAULT_TIMEOUT, run_blocking
from k8s_mcp_server.cluster.types import EventQuery, EventSortField
from k8s_mcp_server.projection import Document, extract_field
from k8s_mcp_server.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_EVENTS = 20
DEFAULT_SORT_FIELD = EventSortField.LAST_TIME


def _first_present(event: dict, *paths: str) -> Any:
    """Value of the first path that holds a non-empty value."""
    for path in paths:
        value, found = extract_field(event, path)
        if found and value not in (None, ""):
            return value
    return None


def summarize_event(event: dict) -> dict:
    """
    Reduce a raw Event object to the fields useful for troubleshooting.

    Events written through events.k8s.io only carry ``eventTime`` (and
    ``series`` for repeats), so the first/last times fall back to it.
    """
    event_time = _first_present(event, "eventTime")
    first_time = _first_present(
        event, "firstTimestamp", "eventTime", "metadata.creationTimestamp"
    )
    last_time = _first_present(
        event, "lastTimestamp", "series.lastObservedTime", "eventTime"
    ) or first_time

    count = _first_present(event, "count", "series.count")
    if count is None:
        count = 1

    involved = event.get("involvedObject") or {}
    source = event.get("source") or {}

    return {
        "name": _first_present(event, "metadata.name"),
        "namespace": _first_present(event, "metadata.namespace", "involvedObject.namespace"),
        "type": event.get("type"),
        "reason": event.get("reason"),
        "message": event.get("message"),
        "count": count,
        "firstTime": first_time,
        "lastTime": last_time,
        "eventTime": event_time,
        "involvedObject": {
            "kind": involved.get("kind"),
            "name": involved.get("name"),
            "namespace": involved.get("namespace"),
        },
        "source": {
            "component": source.get("component") or event.get("reportingComponent"),
            "host": source.get("host") or event.get("reportingInstance"),
        },
    }


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an RFC 3339 API timestamp, None when absent or malformed."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def message_matches(event: dict, message_filter: str) -> bool:
    """Case-insensitive substring match on the event message."""
    message = event.get("message")
    if not isinstance(message, str):
        return False
    return message_filter.lower() in message.lower()


def sort_events(events: list[dict], sort_by: EventSortField) -> list[dict]:
    """
    Sort events most recent first.

    Events without a usable timestamp go last. The sort is stable, so ties
    keep their input order.
    """
    epoch = datetime.min.replace(tzinfo=timezone.utc)

    def key(event: dict) -> tuple[bool, datetime]:
        timestamp = parse_timestamp(event.get(sort_by.value))
        return timestamp is not None, timestamp or epoch

    return sorted(events, key=key, reverse=True)


class EventPipeline:
    """
    Retrieves recent events.

    Defaults for the sort field and the result limit are passed in
    explicitly (they come from configuration).
    """

    def __init__(
        self,
        client: ClusterClient,
        timeout: float = DEFAULT_TIMEOUT,
        default_max_events: int = DEFAULT_MAX_EVENTS,
        default_sort_by: EventSortField = DEFAULT_SORT_FIELD,
    ):
        self.client = client
        self.timeout = timeout
        self.default_max_events = default_max_events
        self.default_sort_by = default_sort_by

    def _limit(self, max_events: Optional[int]) -> int:
        if max_events is None or max_events <= 0:
            return self.default_max_events
        return max_events

    async def get_events(self, query: EventQuery) -> list[Document]:
        """
        Get events matching a query, most recent first.

        Args:
            query: Namespace, message filter, sort field and limit

        Returns:
            At most ``max_events`` event summaries

        Raises:
            BackendUnavailable: If events cannot be listed
        """
        scope = query.namespace or "all namespaces"
        raw_events = await run_blocking(
            f"list events in {scope}",
            self.client.list_events,
            query.namespace,
            timeout=self.timeout,
            request_timeout=self.timeout,
        )

        events = [summarize_event(e) for e in raw_events if isinstance(e, dict)]

        if query.message_filter:
            events = [e for e in events if message_matches(e, query.message_filter)]

        events = sort_events(events, query.sort_by or self.default_sort_by)
        limit = self._limit(query.max_events)

        logger.debug(
            f"Events in {scope}: {len(raw_events)} listed, "
            f"{len(events)} after filtering, returning {min(limit, len(events))}"
        )
        return events[:limit]
