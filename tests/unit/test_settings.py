"""
Unit Tests for Settings
=======================

Unit tests for environment driven configuration.
"""

import pytest
from pydantic import ValidationError

from nlui_mcp.config.settings import Settings, get_settings, reload_settings


class TestSettings:
    """Test settings validation."""

    def test_defaults(self, monkeypatch):
        """Test default values."""
        monkeypatch.delenv("NLUI_ENVIRONMENT", raising=False)
        monkeypatch.delenv("NLUI_LOG_LEVEL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.base_url == "http://localhost:5173"
        assert settings.mcp_server_name == "nlui-mcp-server"
        assert settings.mcp_path == "/mcp"
        assert settings.instance_ttl_seconds == 24 * 60 * 60
        assert settings.instance_sweep_interval_seconds == 60 * 60

    def test_environment_variables(self, monkeypatch):
        """Test reading prefixed environment variables."""
        monkeypatch.setenv("NLUI_BASE_URL", "https://ui.example.com/")
        monkeypatch.setenv("NLUI_MCP_JSON_RESPONSE", "true")
        monkeypatch.setenv("NLUI_LOG_LEVEL", "warning")

        settings = Settings(_env_file=None)

        assert settings.base_url == "https://ui.example.com"
        assert settings.mcp_json_response is True
        assert settings.log_level == "WARNING"

    def test_invalid_environment(self):
        """Test environment validation."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="staging")

    def test_invalid_log_level(self):
        """Test log level validation."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="VERBOSE")

    def test_empty_base_url(self):
        """Test that a base URL is required."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, base_url="  ")

    def test_sweep_interval_must_be_shorter_than_ttl(self):
        """Test that expired instances are swept before the next TTL elapses."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, instance_ttl_seconds=60, instance_sweep_interval_seconds=120)

    @pytest.mark.parametrize(
        "value,expected",
        [
            ('["http://a", "http://b"]', ["http://a", "http://b"]),
            ("http://a, http://b", ["http://a", "http://b"]),
            (["*"], ["*"]),
        ],
    )
    def test_allowed_hosts_parsing(self, value, expected):
        """Test CORS hosts given as JSON, CSV or list."""
        assert Settings(_env_file=None, allowed_hosts=value).allowed_hosts == expected

    def test_reload_settings(self, monkeypatch):
        """Test that reload picks up environment changes."""
        monkeypatch.setenv("NLUI_MCP_SERVER_NAME", "renamed")

        try:
            assert reload_settings().mcp_server_name == "renamed"
            assert get_settings().mcp_server_name == "renamed"
        finally:
            monkeypatch.delenv("NLUI_MCP_SERVER_NAME")
            reload_settings()
