"""
Pytest configuration for k8s_mcp_server tests.
"""

import sys
from pathlib import Path

import pytest

# Add app directory (package) and this directory (fakes) to path
TEST_DIR = Path(__file__).parent
APP_DIR = TEST_DIR.parent / "app"
sys.path.insert(0, str(APP_DIR))
sys.path.insert(0, str(TEST_DIR))

from fakes import FakeClusterClient, make_event, make_pod  # noqa: E402


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test"
    )


@pytest.fixture
def pods() -> list[dict]:
    """Three pods across two namespaces."""
    return [
        make_pod("web-1", "default"),
        make_pod("web-2", "default", phase="Pending"),
        make_pod("db-1", "data"),
    ]


@pytest.fixture
def events() -> list[dict]:
    """Twenty synthetic events in the default namespace."""
    return [make_event(i) for i in range(20)]


@pytest.fixture
def fake_client(pods, events) -> FakeClusterClient:
    """In-memory cluster with pods and events."""
    return FakeClusterClient(resources={"Pod": pods}, events=events)
