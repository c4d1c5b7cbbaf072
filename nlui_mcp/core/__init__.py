"""
Core Business Logic
==================

Core modules shared by the MCP server and the HTTP API.

Modules:
- errors: Error taxonomy and error handling helpers
- schema_docs: JSON Schema documentation for tool descriptions
- storage: Ephemeral in-memory instance store
"""
