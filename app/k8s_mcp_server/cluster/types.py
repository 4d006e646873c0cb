"""
Type definitions for cluster queries.

All of these are built per call from the caller's arguments and discarded
when the call completes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class EventSortField(str, Enum):
    """Event timestamp fields that results can be ordered by."""

    LAST_TIME = "lastTime"
    FIRST_TIME = "firstTime"
    EVENT_TIME = "eventTime"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


@dataclass(frozen=True)
class ResourceQuery:
    """
    Describes which resources to list.

    Attributes:
        kind: Resource kind, e.g. "Pod" or "Deployment"
        namespace: Namespace scope; None lists across all namespaces
        label_selector: Label selector passed verbatim to the API server
        field_selector: Field selector passed verbatim to the API server
    """

    kind: str
    namespace: Optional[str] = None
    label_selector: Optional[str] = None
    field_selector: Optional[str] = None


@dataclass(frozen=True)
class EventQuery:
    """
    Describes which events to return and how.

    Attributes:
        namespace: Namespace scope; None means cluster-wide
        message_filter: Case-insensitive substring the message must contain
        sort_by: Timestamp field to sort by, most recent first; None means the default
        max_events: Maximum number of events; None or <= 0 means the default
    """

    namespace: Optional[str] = None
    message_filter: Optional[str] = None
    sort_by: Optional[EventSortField] = None
    max_events: Optional[int] = None


@dataclass(frozen=True)
class APIResourceDescriptor:
    """A resource kind served by the cluster's API."""

    group: str
    version: str
    kind: str
    name: str
    namespaced: bool
    verbs: list[str] = field(default_factory=list)
    short_names: list[str] = field(default_factory=list)

    @property
    def api_version(self) -> str:
        """The apiVersion string, e.g. "apps/v1" or "v1" for the core group."""
        return f"{self.group}/{self.version}" if self.group else self.version

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "group": self.group,
            "version": self.version,
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "namespaced": self.namespaced,
            "verbs": list(self.verbs),
            "shortNames": list(self.short_names),
        }
