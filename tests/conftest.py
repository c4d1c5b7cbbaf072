"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides test settings, fresh instance stores, the MCP server and an HTTP client.
"""

import os

os.environ.setdefault("NLUI_ENVIRONMENT", "testing")
os.environ.setdefault("NLUI_LOG_LEVEL", "DEBUG")

from typing import Any, Dict, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sse_starlette.sse import AppStatus

from nlui_mcp.config.settings import Settings
from nlui_mcp.core.storage import InstanceStore
from nlui_mcp.mcp_server.server import NLUIMCPServer
from nlui_mcp.api.main import create_app

from tests.utils.helpers import FakeClock


TEST_BASE_URL = "http://ui.test"


@pytest.fixture(autouse=True)
def reset_sse_app_status() -> Generator[None, None, None]:
    """Drop the sse-starlette exit event, which binds to the loop of the first test client."""
    AppStatus.should_exit_event = None
    yield
    AppStatus.should_exit_event = None


@pytest.fixture
def test_settings() -> Settings:
    """Test settings fixture."""
    return Settings(
        environment="testing",
        debug=True,
        base_url=TEST_BASE_URL,
        log_level="DEBUG",
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def instance_store(fake_clock: FakeClock) -> InstanceStore:
    """Fresh instance store driven by the fake clock."""
    return InstanceStore(ttl_seconds=24 * 60 * 60, sweep_interval_seconds=60 * 60, clock=fake_clock)


@pytest.fixture
def mcp_server(instance_store: InstanceStore, test_settings: Settings) -> NLUIMCPServer:
    """MCP server backed by the fresh store."""
    return NLUIMCPServer(instance_store, test_settings)


@pytest.fixture
def app(test_settings: Settings, instance_store: InstanceStore) -> FastAPI:
    """Application wired to the fresh store."""
    return create_app(test_settings, instance_store)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """FastAPI test client with the lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_nlui_props() -> Dict[str, Any]:
    """Card document accepted by ui-render."""
    return {
        "block": {
            "main": {
                "kind": "card",
                "cardProps": {"title": "Quarterly report", "body": "Revenue is up 12%"},
            }
        },
        "showTools": False,
        "showDebug": False,
    }
