"""
Command line entry point.

Supports the stdio, sse and streamable-http transports.
"""

import argparse
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from k8s_mcp_server import __version__
from k8s_mcp_server.config import K8sMCPServerConfig, load_config
from k8s_mcp_server.server import create_server
from k8s_mcp_server.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

TRANSPORTS = ("stdio", "sse", "streamable-http")
LOG_LEVELS = ("debug", "info", "warning", "error")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Read-only MCP server for Kubernetes cluster inspection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start with stdio transport (for local MCP clients)
  k8s-mcp-server --transport stdio

  # Start with HTTP transport against a specific context
  k8s-mcp-server --transport streamable-http --port 8080 --context staging

  # Use custom config directory
  k8s-mcp-server --config-dir /path/to/config
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"k8s-mcp-server {__version__}",
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        help="Configuration directory path (default: ~/.k8smcp/)",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        help="Transport protocol (overrides config)",
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Host to bind to (for HTTP transports, overrides config)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (for HTTP transports, overrides config)",
    )
    parser.add_argument(
        "--kubeconfig",
        type=str,
        help="Path to kubeconfig (overrides config)",
    )
    parser.add_argument(
        "--context",
        type=str,
        help="kubeconfig context to use (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Logging level (overrides config)",
    )
    return parser.parse_args(argv)


def apply_overrides(config: K8sMCPServerConfig, args: argparse.Namespace) -> K8sMCPServerConfig:
    """
    Apply command line overrides and re-validate the result.

    Raises:
        pydantic.ValidationError: If an override is out of range
    """
    data = config.model_dump()
    if args.transport:
        data["server"]["transport"] = args.transport
    if args.host:
        data["server"]["host"] = args.host
    if args.port:
        data["server"]["port"] = args.port
    if args.log_level:
        data["server"]["log_level"] = args.log_level
    if args.kubeconfig:
        data["kubernetes"]["kubeconfig"] = args.kubeconfig
    if args.context:
        data["kubernetes"]["context"] = args.context
    return K8sMCPServerConfig.model_validate(data)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = apply_overrides(load_config(args.config_dir), args)
    except (ValidationError, OSError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.server.log_level, config.server.log_file)

    bundle = create_server(config)
    server = config.server

    logger.info(f"Starting K8s MCP Server v{__version__}")
    logger.info(f"Transport: {server.transport}")

    try:
        if server.transport == "stdio":
            bundle.server.run(transport="stdio")
        else:
            logger.info(f"Running on http://{server.host}:{server.port}")
            bundle.server.run(
                transport=server.transport,
                host=server.host,
                port=server.port,
            )
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        return 0
    except Exception:
        logger.exception("Server error")
        return 1

    return 0
