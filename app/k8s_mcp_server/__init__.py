"""
K8s MCP Server.

This MCP server gives LLMs read-only inspection of a Kubernetes cluster:
listing and fetching resources of any kind (with field projection),
API resource discovery, and recent events.
"""

__version__ = "1.0.0"
