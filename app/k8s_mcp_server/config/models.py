"""
Pydantic models for server configuration.

Configuration is loaded once at startup and passed explicitly to the
components that need it.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from k8s_mcp_server.cluster.types import EventSortField


class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = Field(
        default="127.0.0.1",
        description="Host to bind the server to",
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port to listen on",
    )
    transport: Literal["streamable-http", "sse", "stdio"] = Field(
        default="streamable-http",
        description="Transport protocol to use",
    )
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file in addition to stderr",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept INFO, Info, etc."""
        return v.lower() if isinstance(v, str) else v


class KubernetesSettings(BaseModel):
    """How to reach the Kubernetes API."""

    kubeconfig: Optional[str] = Field(
        default=None,
        description="Path to kubeconfig (default: $KUBECONFIG or ~/.kube/config)",
    )
    context: Optional[str] = Field(
        default=None,
        description="kubeconfig context (default: current context)",
    )
    in_cluster: Optional[bool] = Field(
        default=None,
        description="Use the pod service account; unset tries kubeconfig first",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="Timeout in seconds for each Kubernetes API call",
    )


class EventSettings(BaseModel):
    """Defaults for the getEvents tool."""

    default_max_events: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Events returned when the caller gives no positive maxEvents",
    )
    default_sort_by: EventSortField = Field(
        default=EventSortField.LAST_TIME,
        description="Timestamp field events are sorted by when sortBy is omitted",
    )


class K8sMCPServerConfig(BaseModel):
    """
    Main configuration container for the K8s MCP Server.

    Loaded from YAML files and environment variables, then passed to
    server components via dependency injection.
    """

    server: ServerSettings = Field(default_factory=ServerSettings)
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    events: EventSettings = Field(default_factory=EventSettings)

    # Allow extra fields to be ignored (forward compatibility)
    model_config = ConfigDict(extra="ignore")
