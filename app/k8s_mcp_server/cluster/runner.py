"""
Async execution of blocking Kubernetes API calls.

The kubernetes client is synchronous. Calls run in a worker thread with a
deadline so one slow API server never stalls other in-flight tool calls.
"""

import asyncio
from typing import Any, Callable, Optional, TypeVar

from k8s_mcp_server.cluster.errors import BackendUnavailable

T = TypeVar("T")

DEFAULT_TIMEOUT = 30.0


async def run_blocking(
    description: str,
    func: Callable[..., T],
    *args: Any,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    **kwargs: Any,
) -> T:
    """
    Run a blocking call in a worker thread with a timeout.

    Args:
        description: What the call does, used in error messages
        func: Blocking callable
        *args: Positional arguments for func
        timeout: Deadline in seconds; None waits indefinitely
        **kwargs: Keyword arguments for func

    Returns:
        The callable's return value

    Raises:
        BackendUnavailable: If the call does not finish within the timeout.
            The worker thread is abandoned, not killed; the client's own
            request timeout ends it.
        asyncio.CancelledError: If the calling task is cancelled
    """
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args, **kwargs),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise BackendUnavailable(f"{description}: timed out after {timeout}s") from e
