"""
Pytest fixtures for tracking client tests.
"""

import logging
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from universal_analytics.config import TrackerConfig
from universal_analytics.logging_config import PACKAGE_LOGGER
from universal_analytics.visitor import Visitor


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Keep UA_* variables from the developer's shell out of the tests."""
    for name in (
        "UA_HOSTNAME",
        "UA_PATH",
        "UA_BATCH_PATH",
        "UA_HTTPS",
        "UA_ENABLE_BATCHING",
        "UA_BATCH_SIZE",
        "UA_DEBUG",
        "UA_CONFIG_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Restore the package logger level changed by debug toggles."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    level = logger.level
    yield
    logger.setLevel(level)


def make_response(status_code: int = 200) -> MagicMock:
    """Build a fake httpx response whose raise_for_status honours the status code."""
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"{status_code} Error",
            request=MagicMock(),
            response=response,
        )
    return response


@pytest.fixture
def mock_client() -> MagicMock:
    """HTTP client double whose post() always succeeds."""
    client = MagicMock(spec=httpx.AsyncClient)
    client.post = AsyncMock(return_value=make_response(200))
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def test_config() -> TrackerConfig:
    """Create a test configuration with sensible defaults."""
    return TrackerConfig(
        hostname="https://collector.example.com",
        path="/collect",
        batch_path="/batch",
        enable_batching=False,
        batch_size=10,
        request_timeout=2.0,
    )


@pytest.fixture
def batching_config(test_config) -> TrackerConfig:
    """Test configuration with batching enabled and batches of two hits."""
    return test_config.model_copy(update={"enable_batching": True, "batch_size": 2})


@pytest.fixture
def visitor(test_config, mock_client) -> Visitor:
    """Root visitor wired to the mock client."""
    return Visitor(test_config, tid="UA-XXXXX-1", cid="test-client-id", client=mock_client)


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
    """Create a temporary config file."""
    config_file = tmp_path / "config.yaml"
    config_content = """
hostname: http://localhost:8080
path: /collect
enable_batching: true
batch_size: 5
https: false
headers:
  User-Agent: Test User Agent
"""
    config_file.write_text(config_content)
    return config_file
