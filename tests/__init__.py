"""
Test Suite
==========

Test suite matching the nlui_mcp/ package structure.

Test Categories:
- unit: Unit tests for individual components
- integration: HTTP endpoints and MCP protocol round trips
"""
