"""
MCP Server Tools
================

Tool implementations for the MCP (Model Context Protocol) server.
Provides the ui-render tool, which stores a UI description and answers with
a URL the browser renderer can open.
"""

from typing import Any, Dict, List, Mapping, Union
from datetime import datetime, timezone
from urllib.parse import urlencode, urlsplit
import json
import time

from mcp.types import EmbeddedResource, TextContent, TextResourceContents, Tool
from pydantic import ValidationError as PydanticValidationError

from nlui_mcp.config.logging import get_logger
from nlui_mcp.core.errors import ErrorHandler
from nlui_mcp.core.schema_docs import format_schema_as_documentation
from nlui_mcp.core.storage import InstanceStore
from nlui_mcp.models.schemas import NLUIProps, ToolErrorPayload

logger = get_logger(__name__)

ToolResult = List[Union[TextContent, EmbeddedResource]]

UI_RENDER_EXAMPLES = [
    {
        "block": {
            "main": {
                "kind": "card",
                "cardProps": {"title": "Example title", "body": "Example content"},
            }
        },
        "showTools": False,
        "showDebug": False,
    },
    {
        "block": {
            "main": {
                "kind": "table",
                "tableProps": {
                    "caption": "Team",
                    "columns": [
                        {"key": "name", "title": "Name", "sortable": True},
                        {"key": "email", "title": "Email", "align": "right"},
                        {"key": "role", "title": "Role", "align": "center"},
                    ],
                    "rows": [
                        {
                            "id": 1,
                            "data": {"name": "Ada", "email": "ada@example.com", "role": "Admin"},
                            "actions": [{"label": "View", "onClickLink": "/people/1"}],
                        }
                    ],
                    "striped": True,
                },
            }
        },
        "showTools": True,
    },
]


def build_ui_render_description() -> str:
    """Usage instructions of the ui-render tool."""
    examples = "\n\n".join(json.dumps(example, indent=2) for example in UI_RENDER_EXAMPLES)
    schema_doc = format_schema_as_documentation("NLUIProps", NLUIProps.model_json_schema())
    return (
        "Generate the URL of an interactive interface from an NLUIProps configuration.\n\n"
        "The tool stores the configuration and returns a link to a web page that renders it.\n\n"
        "## Format\n\n"
        "The arguments must match this JSON Schema:\n\n"
        f"{schema_doc}\n\n"
        "## Examples\n\n"
        f"{examples}"
    )


class UIRenderTool:
    """Tool storing a UI description and returning a reference URL."""

    name = "ui-render"

    def __init__(self, store: InstanceStore, base_url: str) -> None:
        self.store = store
        self.base_url = base_url
        self.logger: Any = logger.bind(tool=self.name)

    def definition(self) -> Tool:
        """MCP tool definition."""
        return Tool(
            name=self.name,
            description=build_ui_render_description(),
            inputSchema=NLUIProps.model_json_schema(),
        )

    def build_instance_url(self, instance_id: str) -> str:
        """Reference URL of a stored instance."""
        separator = "&" if urlsplit(self.base_url).query else "?"
        return f"{self.base_url}{separator}{urlencode({'instanceId': instance_id})}"

    def validate(self, arguments: Any) -> Dict[str, Any]:
        """
        Validate tool arguments.

        Returns:
            The arguments as a plain dict

        Raises:
            ValidationError: If arguments are not an object or lack a block mapping
        """
        if not isinstance(arguments, Mapping):
            raise ErrorHandler.create_validation_error("Tool arguments must be an object")
        if "block" not in arguments:
            raise ErrorHandler.create_validation_error("block is required", field="block")

        document = dict(arguments)
        try:
            NLUIProps.model_validate(document)
        except PydanticValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            error = ErrorHandler.create_validation_error(
                f"Invalid fields: {fields}", field=fields or None
            )
            error.original_error = e
            raise error from e
        return document

    async def execute(self, arguments: Any) -> ToolResult:
        """
        Execute ui-render.

        Args:
            arguments: Tool arguments ({block, showTools?, showDebug?})

        Returns:
            One embedded resource referencing the stored instance, or one
            text content describing the error
        """
        start_time = time.perf_counter()
        self.logger.info(
            "UI render requested",
            argument_keys=sorted(arguments) if isinstance(arguments, Mapping) else None,
        )

        try:
            document = self.validate(arguments)
            instance_id = self.store.put(document)
            url = self.build_instance_url(instance_id)

            result: ToolResult = [
                EmbeddedResource(
                    type="resource",
                    resource=TextResourceContents(
                        uri=url,
                        mimeType="text/html",
                        text="NLUI interactive interface generated from the provided configuration",
                    ),
                )
            ]

            self.logger.info(
                "UI render completed",
                instance_id=instance_id,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            return result

        except Exception as e:
            handled = ErrorHandler.handle(
                e,
                component="ui_render_tool",
                action="render",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            payload = ToolErrorPayload(
                error_type=handled.error_type.value,
                error=handled.user_message(),
                timestamp=datetime.now(timezone.utc),
            )
            return [TextContent(type="text", text=payload.model_dump_json(indent=2))]
