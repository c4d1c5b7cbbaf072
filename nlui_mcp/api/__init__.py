"""
FastAPI HTTP Layer
==================

HTTP access to the MCP server and to stored UI instances.

Endpoints:
- POST /mcp: Stateless MCP endpoint hosted through the stream adapters
- GET /instances/{instance_id}: Fetch a stored UI description
- GET /health: Health check endpoint
"""
