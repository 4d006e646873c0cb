"""
Tool Call Middleware.

Filters undeclared arguments from tool calls and records each call's
outcome in the metrics collector.
"""

from typing import Optional

from fastmcp.exceptions import NotFoundError
from fastmcp.server.middleware import Middleware, MiddlewareContext
from fastmcp.server.middleware.middleware import CallNext, ToolResult
from pydantic import ValidationError

from k8s_mcp_server.cluster.errors import ClusterToolError, InvalidArgument
from k8s_mcp_server.http.metrics import OUTCOME_OK, MetricsCollector
from k8s_mcp_server.utils.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR = ClusterToolError.code


def outcome_code(error: BaseException) -> str:
    """
    Find the error code for a failed tool call.

    Tool errors wrap the domain error as their cause; the chain is walked
    until a ClusterToolError or a pydantic ValidationError is found.
    """
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ClusterToolError):
            return current.code
        if isinstance(current, ValidationError):
            return InvalidArgument.code
        current = current.__cause__ or current.__context__
    return INTERNAL_ERROR


class ToolCallMiddleware(Middleware):
    """
    Preprocess tool calls and count their outcomes.

    Argument filtering is whitelist-based: arguments not declared in the
    tool's input schema are removed before FastMCP validates them. Some
    clients (n8n, for example) add fields such as toolCallId.

    Example:
        Incoming: {"Kind": "Pod", "toolCallId": "call_xxx"}
        Schema allows: ["Kind", "namespace", ...]
        Outgoing: {"Kind": "Pod"}
    """

    def __init__(self, metrics: Optional[MetricsCollector] = None, verbose: bool = False):
        """
        Initialize middleware.

        Args:
            metrics: Collector to record outcomes in; None disables counting
            verbose: If True, log filtered fields
        """
        self.metrics = metrics
        self.verbose = verbose

    async def on_call_tool(
        self,
        context: MiddlewareContext,
        call_next: CallNext,
    ) -> ToolResult:
        tool_name = context.message.name
        await self._filter_to_schema(context)

        try:
            result = await call_next(context)
        except Exception as e:
            self._record(tool_name, outcome_code(e))
            raise

        self._record(tool_name, OUTCOME_OK)
        return result

    def _record(self, tool_name: str, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.inc_tool_call(tool_name, outcome)

    async def _filter_to_schema(self, context: MiddlewareContext) -> None:
        """Keep only arguments declared in the tool's input schema."""
        message = context.message
        if not message.arguments:
            return

        fastmcp_context = context.fastmcp_context
        if fastmcp_context is None:
            return

        tool_name = message.name
        try:
            tool = await fastmcp_context.fastmcp.get_tool(tool_name)
        except NotFoundError:
            # Unknown tools are reported by FastMCP itself
            return

        allowed_params = _allowed_params(tool.parameters)
        if allowed_params is None:
            if self.verbose:
                logger.debug(f"Tool '{tool_name}' has no usable input schema")
            return

        original_args = dict(message.arguments)
        filtered_args = {
            key: value for key, value in original_args.items() if key in allowed_params
        }

        removed_fields = set(original_args) - set(filtered_args)
        if not removed_fields:
            return

        if self.verbose:
            logger.debug(f"Tool '{tool_name}': filtered {sorted(removed_fields)}")

        message.arguments.clear()
        message.arguments.update(filtered_args)


def _allowed_params(schema: object) -> Optional[set[str]]:
    """Parameter names declared by a JSON Schema, or None if malformed."""
    if not isinstance(schema, dict):
        return None
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return None
    return set(properties)
