"""
NLUI MCP Server
===============

A Model Context Protocol (MCP) server that turns natural-language-driven UI
descriptions into interactive pages.

This package provides:
- MCP protocol implementation exposing the ui-render tool
- Adapters hosting the stream-oriented MCP transport behind plain HTTP
- An ephemeral instance store addressed by URL
- FastAPI endpoints for the MCP exchange and instance retrieval
"""

__version__ = "1.0.0"
__author__ = "NLUI MCP Team"
