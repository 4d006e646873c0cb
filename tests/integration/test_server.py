#!/usr/bin/env python3
"""
Integration tests for MCP server.

Tests the server as a whole: startup, HTTP endpoints and MCP tool calls
over streamable HTTP, without a reachable cluster.
"""

import json

import httpx
import pytest
from fastmcp import Client

pytestmark = pytest.mark.integration

MCP_HEADERS = {"Accept": "application/json, text/event-stream"}


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_health_endpoint_returns_200(self, client: httpx.Client):
        """Test /health endpoint returns healthy status."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert data["service"] == "k8s_mcp_server"

    def test_root_answers_like_health(self, client: httpx.Client):
        """Container HEALTHCHECK requests the root path."""
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_lists_tools(self, client: httpx.Client):
        """Test /ready endpoint reports the registered tools."""
        response = client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["tools_registered"] is True
        assert set(data["registered_tools"]) == {
            "listResources", "getResource", "getAPIResources", "getEvents", "k8s_ping",
        }


class TestMetricsEndpoint:
    """Test Prometheus metrics endpoint."""

    def test_metrics_endpoint_returns_prometheus_format(self, client: httpx.Client):
        """Test /metrics endpoint returns Prometheus format."""
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]

        text = response.text
        assert "k8s_mcp_info" in text
        assert "k8s_mcp_uptime_seconds" in text
        assert "k8s_mcp_tool_calls_total" in text


class TestMCPProtocol:
    """Test MCP protocol over streamable HTTP."""

    def test_mcp_initialize(self, client: httpx.Client):
        """Test MCP initialize request."""
        request = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "initialize",
            "params": {
                "protocolVersion": "2024-11-05",
                "capabilities": {},
                "clientInfo": {"name": "test-client", "version": "1.0.0"},
            },
        }

        response = client.post("/mcp", json=request, headers=MCP_HEADERS)

        assert response.status_code == 200

        # Parse response - could be JSON or SSE
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            data = response.json()
        else:
            data_lines = [l for l in response.text.splitlines() if l.startswith("data:")]
            data = json.loads(data_lines[0][5:].strip())
        assert data["result"]["serverInfo"]["name"] == "k8s_mcp_server"

    @pytest.mark.asyncio
    async def test_ping_tool(self, server):
        """Built-in tool works without a cluster."""
        async with Client(f"{server.url}/mcp") as mcp_client:
            result = await mcp_client.call_tool("k8s_ping", {})

        assert result.content[0].text.startswith("pong from k8s_mcp_server")

    @pytest.mark.asyncio
    async def test_unreachable_cluster_is_tool_error(self, server):
        """Cluster tools fail as error results while the server stays up."""
        async with Client(f"{server.url}/mcp") as mcp_client:
            result = await mcp_client.call_tool(
                "listResources", {"Kind": "Pod"}, raise_on_error=False
            )

        assert result.is_error
        assert "[BACKEND_UNAVAILABLE]" in result.content[0].text

    @pytest.mark.asyncio
    async def test_missing_argument_is_tool_error(self, server):
        async with Client(f"{server.url}/mcp") as mcp_client:
            result = await mcp_client.call_tool("listResources", {}, raise_on_error=False)

        assert result.is_error
        assert "missing required parameter: Kind" in result.content[0].text


class TestServerStartup:
    """Test server startup and configuration."""

    def test_server_is_running(self, server):
        """Test that server process is running."""
        assert server.process is not None
        assert server.process.poll() is None  # Still running


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
