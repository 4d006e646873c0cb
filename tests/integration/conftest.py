"""
Integration test fixtures.

Provides fixtures for starting and stopping the MCP server.
"""

import os
import subprocess
import sys
import time
from pathlib import Path
from typing import Generator

import httpx
import pytest

# Paths
TEST_DIR = Path(__file__).parent
APP_DIR = TEST_DIR.parent.parent / "app"

# Test server settings
TEST_HOST = "127.0.0.1"
TEST_PORT = 8765
TEST_URL = f"http://{TEST_HOST}:{TEST_PORT}"


class ServerProcess:
    """Manages the MCP server subprocess for testing."""

    def __init__(self, config_dir: Path, host: str = TEST_HOST, port: int = TEST_PORT):
        self.config_dir = config_dir
        self.host = host
        self.port = port
        self.process: subprocess.Popen | None = None
        self.url = f"http://{host}:{port}"

    def _env(self) -> dict[str, str]:
        env = {
            key: value
            for key, value in os.environ.items()
            if not key.startswith("K8S_MCP_")
            and key not in ("SERVER_MODE", "SERVER_PORT", "KUBERNETES_SERVICE_HOST")
        }
        env["PYTHONPATH"] = str(APP_DIR)
        # No cluster is reachable; tool calls must fail as BACKEND_UNAVAILABLE
        env["KUBECONFIG"] = str(self.config_dir / "missing-kubeconfig")
        return env

    def start(self, timeout: float = 15.0) -> None:
        """Start the server and wait for it to be ready."""
        self.process = subprocess.Popen(
            [
                sys.executable,
                str(APP_DIR / "main.py"),
                "--transport", "streamable-http",
                "--host", self.host,
                "--port", str(self.port),
                "--config-dir", str(self.config_dir),
                "--kubeconfig", str(self.config_dir / "missing-kubeconfig"),
            ],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            env=self._env(),
        )

        # Wait for server to be ready
        start_time = time.time()
        while time.time() - start_time < timeout:
            if self.process.poll() is not None:
                raise RuntimeError(f"Server exited with code {self.process.returncode}")
            try:
                response = httpx.get(f"{self.url}/health", timeout=1.0)
                if response.status_code == 200:
                    return
            except httpx.RequestError:
                pass
            time.sleep(0.1)

        # Server didn't start in time
        self.stop()
        raise RuntimeError(f"Server failed to start within {timeout}s")

    def stop(self) -> None:
        """Stop the server."""
        if self.process:
            self.process.terminate()
            try:
                self.process.wait(timeout=5.0)
            except subprocess.TimeoutExpired:
                self.process.kill()
                self.process.wait()
            self.process = None


@pytest.fixture(scope="module")
def server(tmp_path_factory) -> Generator[ServerProcess, None, None]:
    """
    Start the MCP server for the test module.

    Yields:
        ServerProcess instance with running server
    """
    config_dir = tmp_path_factory.mktemp("config")
    (config_dir / "config.yaml").write_text(
        "kubernetes:\n"
        "  in_cluster: false\n"
        "  request_timeout: 5\n"
    )

    server = ServerProcess(config_dir)
    server.start()
    yield server
    server.stop()


@pytest.fixture
def client(server: ServerProcess) -> Generator[httpx.Client, None, None]:
    """
    Get HTTP client configured for the test server.

    Args:
        server: Running server process
    """
    with httpx.Client(base_url=server.url, timeout=10.0) as client:
        yield client
