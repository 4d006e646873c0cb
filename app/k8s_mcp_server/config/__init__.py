"""
Configuration system for the K8s MCP Server.

Exports:
    K8sMCPServerConfig: Main configuration container
    load_config: Load configuration from YAML/env
"""

from k8s_mcp_server.config.models import (
    EventSettings,
    K8sMCPServerConfig,
    KubernetesSettings,
    ServerSettings,
)
from k8s_mcp_server.config.loader import load_config

__all__ = [
    "K8sMCPServerConfig",
    "ServerSettings",
    "KubernetesSettings",
    "EventSettings",
    "load_config",
]
