"""
MCP Server Implementation
========================

Model Context Protocol server exposing the ui-render tool and the
init-session prompt. The protocol engine is the mcp SDK low-level Server;
the HTTP layer hosts it statelessly, one run per request.
"""

import json
import logging
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp.server import Server
from mcp.types import GetPromptResult, LoggingLevel, Prompt, TextContent, Tool

from nlui_mcp.config.settings import Settings, get_settings
from nlui_mcp.config.logging import get_logger
from nlui_mcp.core.storage import InstanceStore

from .prompts import InitSessionPrompt
from .tools import ToolResult, UIRenderTool

logger = get_logger(__name__)


class NLUIMCPServer:
    """MCP Server for NLUI rendering."""

    def __init__(self, store: InstanceStore, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self.logger: Any = logger.bind(component="mcp_server")  # structlog.BoundLoggerBase
        self.server = Server(
            self.settings.mcp_server_name, version=self.settings.app_version
        )
        self.ui_render_tool = UIRenderTool(store, self.settings.base_url)
        self.init_session_prompt = InitSessionPrompt()
        self._setup_tools()
        self._setup_prompts()
        self._setup_handlers()
        self.logger.info(
            "NLUI MCP Server created",
            server_name=self.settings.mcp_server_name,
            version=self.settings.app_version,
        )

    def _setup_tools(self) -> None:
        """Setup MCP tools."""

        @self.server.list_tools()
        async def handle_list_tools() -> List[Tool]:
            """List available MCP tools."""
            return await self.get_tools()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> ToolResult:
            """Handle tool execution."""
            return await self.call_tool(name, arguments)

    def _setup_prompts(self) -> None:
        """Setup MCP prompts."""

        @self.server.list_prompts()
        async def handle_list_prompts() -> List[Prompt]:
            """List available prompts."""
            return [self.init_session_prompt.definition()]

        @self.server.get_prompt()
        async def handle_get_prompt(
            name: str, arguments: Optional[Dict[str, str]]
        ) -> GetPromptResult:
            """Render a prompt."""
            return await self.get_prompt(name, arguments)

    def _setup_handlers(self) -> None:
        """Setup additional MCP handlers."""

        @self.server.set_logging_level()
        async def handle_set_logging_level(level: LoggingLevel) -> None:
            """Handle logging level changes."""
            stdlib_level = logging.getLevelName(level.upper())
            if isinstance(stdlib_level, int):
                logging.getLogger("nlui_mcp").setLevel(stdlib_level)
            self.logger.info("Logging level changed", level=level)

    # Public API methods, also used by the protocol handlers
    async def get_tools(self) -> List[Tool]:
        """Get list of available MCP tools."""
        return [self.ui_render_tool.definition()]

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> ToolResult:
        """Call a tool; failures come back as an error text content."""
        self.logger.info("Tool called", tool=name)

        if name == UIRenderTool.name:
            return await self.ui_render_tool.execute(arguments)

        error_msg = f"Unknown tool: {name}"
        self.logger.error("Tool not found", tool=name, error=error_msg)
        return [
            TextContent(
                type="text",
                text=json.dumps(
                    {
                        "success": False,
                        "error_type": "VALIDATION",
                        "error": error_msg,
                        "timestamp": datetime.now(timezone.utc).isoformat(),
                    },
                    indent=2,
                ),
            )
        ]

    async def get_prompt(self, name: str, arguments: Optional[Dict[str, str]] = None) -> GetPromptResult:
        """Render a prompt by name."""
        if name == InitSessionPrompt.name:
            return await self.init_session_prompt.render(arguments)
        raise ValueError(f"Unknown prompt: {name}")

    async def run_stateless(
        self,
        read_stream: MemoryObjectReceiveStream[Any],
        write_stream: MemoryObjectSendStream[Any],
    ) -> None:
        """Serve one stateless exchange over the given transport streams."""
        await self.server.run(
            read_stream,
            write_stream,
            self.server.create_initialization_options(),
            stateless=True,
        )
