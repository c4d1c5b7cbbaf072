"""
MCP Server Implementation
========================

Model Context Protocol server for NLUI rendering.

Tools provided:
- ui-render: Store an NLUIProps configuration and return its renderer URL

Prompts provided:
- init-session: Session system prompt introducing the tools
"""
