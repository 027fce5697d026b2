"""Pytest configuration and fixtures."""

import json

import httpx
import pytest

from core.config import Settings


@pytest.fixture
def sample_requirements():
    """Sample requirements.txt content for testing."""
    return "fastapi==0.85.0\nuvicorn>=0.18.0"


@pytest.fixture
def sample_package_json():
    """Sample package.json content for testing."""
    return """
{
  "name": "test-project",
  "dependencies": {
    "express": "^4.18.0",
    "lodash": "~4.17.21"
  }
}
"""


@pytest.fixture
def sample_cargo_toml():
    """Sample Cargo.toml content for testing."""
    return """
[package]
name = "demo"
version = "0.1.0"

[dependencies]
serde = "1.0"
tokio = { version = "1.28", features = ["full"] }
"""


@pytest.fixture
def temp_manifest_file(tmp_path):
    """Create a temporary manifest file for testing."""
    manifest = tmp_path / "requirements.txt"
    manifest.write_text("fastapi==0.85.0")
    return manifest


@pytest.fixture
def settings():
    """Settings isolated from the environment, with the CLI fallback off."""
    return Settings(_env_file=None, cli_fallback=False, registry_timeout=2.0)


@pytest.fixture
def registry_transport():
    """Build an httpx.MockTransport serving JSON documents by URL path.

    Usage:
        transport = registry_transport({"/left-pad": {...}})

    Values may be a dict (served as 200 JSON), an int (bare status code) or
    an exception instance (raised as a transport failure).
    """

    def build(routes: dict):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.raw_path.decode()
            seen.append(path)
            outcome = routes.get(path, 404)
            if isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, int):
                return httpx.Response(outcome)
            return httpx.Response(200, content=json.dumps(outcome), headers={"Content-Type": "application/json"})

        transport = httpx.MockTransport(handler)
        transport.seen = seen
        return transport

    return build
