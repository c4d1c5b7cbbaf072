"""
Unit Tests for MCP Tools and Prompts
====================================

Unit tests for the ui-render tool and the init-session prompt.
"""

import json
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import pytest
from mcp.types import EmbeddedResource, TextContent

from nlui_mcp.core.errors import ValidationError
from nlui_mcp.core.storage import InstanceStore
from nlui_mcp.mcp_server.prompts import SYSTEM_PROMPT, InitSessionPrompt
from nlui_mcp.mcp_server.tools import UIRenderTool, build_ui_render_description

from tests.utils.helpers import instance_id_from_uri


@pytest.fixture
def ui_render_tool(instance_store: InstanceStore) -> UIRenderTool:
    """ui-render tool on a fresh store."""
    return UIRenderTool(instance_store, "http://ui.test")


class TestUIRenderDefinition:
    """Test the tool definition."""

    def test_definition(self, ui_render_tool):
        """Test name and input schema."""
        tool = ui_render_tool.definition()

        assert tool.name == "ui-render"
        assert tool.inputSchema["type"] == "object"
        assert tool.inputSchema["required"] == ["block"]
        assert set(tool.inputSchema["properties"]) >= {"block", "showTools", "showDebug"}

    def test_description_documents_format(self):
        """Test that the description embeds the schema and examples."""
        description = build_ui_render_description()

        assert '"block"' in description
        assert '"kind": "card"' in description
        assert '"kind": "table"' in description


class TestUIRenderURL:
    """Test reference URL building."""

    def test_query_parameter_appended(self, instance_store):
        """Test a base URL without query."""
        tool = UIRenderTool(instance_store, "http://ui.test")

        assert tool.build_instance_url("abc") == "http://ui.test?instanceId=abc"

    def test_existing_query_extended(self, instance_store):
        """Test a base URL that already has a query."""
        tool = UIRenderTool(instance_store, "http://ui.test/view?theme=dark")

        url = tool.build_instance_url("abc")

        assert parse_qs(urlsplit(url).query) == {"theme": ["dark"], "instanceId": ["abc"]}


class TestUIRenderValidation:
    """Test argument validation."""

    def test_valid_arguments(self, ui_render_tool, sample_nlui_props):
        """Test that valid arguments come back unchanged."""
        assert ui_render_tool.validate(sample_nlui_props) == sample_nlui_props

    def test_extra_fields_are_kept(self, ui_render_tool):
        """Test that unknown top-level fields are stored verbatim."""
        arguments = {"block": {}, "theme": "dark"}

        assert ui_render_tool.validate(arguments) == arguments

    @pytest.mark.parametrize(
        "arguments",
        [
            None,
            [],
            "block",
            {},
            {"showTools": True},
            {"block": "not an object"},
            {"block": {}, "showDebug": "maybe"},
        ],
    )
    def test_invalid_arguments(self, ui_render_tool, arguments):
        """Test that malformed arguments are rejected."""
        with pytest.raises(ValidationError):
            ui_render_tool.validate(arguments)


class TestUIRenderExecute:
    """Test tool execution."""

    @pytest.mark.asyncio
    async def test_execute_stores_instance(self, ui_render_tool, instance_store, sample_nlui_props):
        """Test that a render stores the document and references it."""
        result = await ui_render_tool.execute(sample_nlui_props)

        assert len(result) == 1
        content = result[0]
        assert isinstance(content, EmbeddedResource)
        assert content.type == "resource"
        assert content.resource.mimeType == "text/html"
        assert content.resource.text

        instance_id = instance_id_from_uri(content.resource.uri)
        assert instance_store.get(instance_id) == sample_nlui_props

    @pytest.mark.asyncio
    async def test_execute_twice_creates_two_instances(self, ui_render_tool, instance_store, sample_nlui_props):
        """Test that identical renders are stored separately."""
        first = await ui_render_tool.execute(sample_nlui_props)
        second = await ui_render_tool.execute(sample_nlui_props)

        assert instance_id_from_uri(first[0].resource.uri) != instance_id_from_uri(second[0].resource.uri)
        assert len(instance_store) == 2

    @pytest.mark.asyncio
    async def test_execute_missing_block(self, ui_render_tool, instance_store):
        """Test that validation failures are returned as error content."""
        result = await ui_render_tool.execute({"showTools": True})

        assert len(result) == 1
        assert isinstance(result[0], TextContent)
        payload = json.loads(result[0].text)
        assert payload["success"] is False
        assert payload["error_type"] == "VALIDATION"
        assert "block is required" in payload["error"]
        assert payload["timestamp"]
        assert len(instance_store) == 0

    @pytest.mark.asyncio
    async def test_execute_store_failure(self, ui_render_tool, sample_nlui_props):
        """Test that store failures do not escape the tool."""
        with patch.object(ui_render_tool.store, "put", side_effect=RuntimeError("disk on fire")):
            result = await ui_render_tool.execute(sample_nlui_props)

        payload = json.loads(result[0].text)
        assert payload["success"] is False
        assert payload["error_type"] == "INTERNAL"
        assert "disk on fire" not in payload["error"]


class TestInitSessionPrompt:
    """Test the init-session prompt."""

    def test_definition(self):
        """Test name and optional language argument."""
        prompt = InitSessionPrompt().definition()

        assert prompt.name == "init-session"
        assert [argument.name for argument in prompt.arguments] == ["language"]
        assert prompt.arguments[0].required is False

    @pytest.mark.asyncio
    async def test_render(self):
        """Test the rendered message."""
        result = await InitSessionPrompt().render({"language": "fr"})

        assert len(result.messages) == 1
        message = result.messages[0]
        assert message.role == "user"
        assert message.content.text == SYSTEM_PROMPT
        assert "ui-render" in message.content.text

    @pytest.mark.asyncio
    async def test_render_without_arguments(self):
        """Test rendering with no arguments."""
        result = await InitSessionPrompt().render()

        assert result.messages[0].content.text == SYSTEM_PROMPT
