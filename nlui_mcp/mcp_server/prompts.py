"""
MCP Server Prompts
==================

Prompt implementations for the MCP server.
"""

from typing import Any, Dict, Optional
import time

from mcp.types import GetPromptResult, Prompt, PromptArgument, PromptMessage, TextContent

from nlui_mcp.config.logging import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = """# NLUI MCP session

You are connected to the NLUI (Natural Language User Interface) MCP server.

## Tools

### ui-render
Generates the URL of an interactive interface from an NLUIProps configuration.
Call it when the answer is best shown as a table, card, form, list or alert.

## Guidelines

- Pick the component kind that fits the requested data.
- Fill components with real, complete data instead of placeholders.
- Answer conceptual questions and small talk with plain text, without calling tools.
"""


class InitSessionPrompt:
    """Prompt introducing the server and its tools to a new session."""

    name = "init-session"

    def __init__(self) -> None:
        self.logger: Any = logger.bind(prompt=self.name)

    def definition(self) -> Prompt:
        """MCP prompt definition."""
        return Prompt(
            name=self.name,
            description="Initialize session system prompt",
            arguments=[
                PromptArgument(
                    name="language",
                    description="Preferred response language",
                    required=False,
                )
            ],
        )

    async def render(self, arguments: Optional[Dict[str, str]] = None) -> GetPromptResult:
        """Build the session prompt."""
        start_time = time.perf_counter()
        language = (arguments or {}).get("language", "en")
        self.logger.info("Session initialization requested", language=language)

        result = GetPromptResult(
            description="NLUI session system prompt",
            messages=[
                PromptMessage(role="user", content=TextContent(type="text", text=SYSTEM_PROMPT))
            ],
        )

        self.logger.info(
            "Session initialization completed",
            language=language,
            prompt_length=len(SYSTEM_PROMPT),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return result
