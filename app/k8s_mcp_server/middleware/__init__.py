"""
MCP Middleware for request preprocessing.

Contains:
- ToolCallMiddleware: filters undeclared arguments and records outcomes
"""

from k8s_mcp_server.middleware.tool_calls import ToolCallMiddleware, outcome_code

__all__ = [
    "ToolCallMiddleware",
    "outcome_code",
]
