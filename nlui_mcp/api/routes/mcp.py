"""
MCP Routes
==========

Stateless MCP endpoint. Each POST runs the MCP SDK streamable HTTP transport
against a pseudo request/response pair and answers with the decoded events
as plain JSON.
"""

from typing import Any, Dict, Optional
import json

import anyio
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from mcp.server.streamable_http import StreamableHTTPServerTransport

from nlui_mcp.config.logging import get_logger
from nlui_mcp.config.settings import Settings
from nlui_mcp.core.errors import NLUIError
from nlui_mcp.mcp_server.server import NLUIMCPServer
from nlui_mcp.api.adapters.asgi_bridge import serve_asgi
from nlui_mcp.api.adapters.event_decoder import extract_event_data
from nlui_mcp.api.adapters.http_request import BodyType, create_fake_request
from nlui_mcp.api.adapters.http_response import (
    AbortSignal,
    PseudoResponse,
    create_server_response_adapter,
    read_response_text,
)

logger = get_logger(__name__)

router = APIRouter(tags=["MCP"])

# Interval between client disconnect checks while an exchange runs
DISCONNECT_POLL_SECONDS = 0.1

METHOD_NOT_ALLOWED: Dict[str, Any] = {
    "jsonrpc": "2.0",
    "error": {"code": -32000, "message": "Method not allowed."},
    "id": None,
}

# Replaced by the JSON envelope of the decoded events
ENVELOPE_HEADERS = {"content-type", "content-length", "transfer-encoding"}


def get_mcp_server(request: Request) -> NLUIMCPServer:
    """Dependency to get the application MCP server."""
    return request.app.state.mcp_server


def get_current_settings(request: Request) -> Settings:
    """Dependency to get the application settings."""
    return request.app.state.settings


async def read_request_body(request: Request) -> BodyType:
    """Read a request body, parsing JSON bodies into Python values."""
    raw = await request.body()
    content_type = request.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            return json.loads(raw)
        except ValueError:
            # Let the protocol engine report the parse error
            logger.warning("Invalid JSON body, forwarding as text", body_bytes=len(raw))

    return raw.decode("utf-8", errors="replace")


async def run_mcp_exchange(
    mcp_server: NLUIMCPServer, settings: Settings, request: Request, body: BodyType
) -> JSONResponse:
    """Run one stateless MCP exchange and flatten its reply into JSON."""
    fake_request = create_fake_request(
        method=request.method,
        url=str(request.url),
        headers=dict(request.headers),
        body=body,
    )
    transport = StreamableHTTPServerTransport(
        mcp_session_id=None,
        is_json_response_enabled=settings.mcp_json_response,
    )
    signal = AbortSignal()
    handler_done = anyio.Event()
    watcher = anyio.CancelScope()
    error: Optional[NLUIError] = None

    async def run_server(*, task_status: Any = anyio.TASK_STATUS_IGNORED) -> None:
        async with transport.connect() as (read_stream, write_stream):
            task_status.started()
            try:
                await mcp_server.run_stateless(read_stream, write_stream)
            except Exception as e:
                logger.error("Stateless MCP session crashed", error=str(e), exc_info=True)

    async def watch_disconnect() -> None:
        with watcher:
            while not await request.is_disconnected():
                await anyio.sleep(DISCONNECT_POLL_SECONDS)
            logger.info("Client disconnected, aborting MCP exchange")
            signal.abort()

    async def handle(response: PseudoResponse) -> None:
        try:
            await serve_asgi(transport.handle_request, fake_request, response)
        finally:
            await transport.terminate()
            handler_done.set()

    try:
        async with anyio.create_task_group() as tg:
            await tg.start(run_server)
            tg.start_soon(watch_disconnect)
            try:
                upstream = await create_server_response_adapter(signal, handle)
                response_text = await read_response_text(upstream)
                await handler_done.wait()
                watcher.cancel()
            except NLUIError as e:
                error = e
                tg.cancel_scope.cancel()
    except anyio.get_cancelled_exc_class():
        signal.abort()
        raise

    if error is not None:
        raise error

    event_data = extract_event_data(response_text)
    headers = {
        name: value
        for name, value in upstream.headers.items()
        if name.lower() not in ENVELOPE_HEADERS
    }

    logger.debug(
        "MCP exchange completed",
        status_code=upstream.status_code,
        events=len(event_data.get("events", [])),
    )
    return JSONResponse(content=event_data, status_code=upstream.status_code, headers=headers)


@router.post("")
async def handle_mcp_post(
    request: Request,
    mcp_server: NLUIMCPServer = Depends(get_mcp_server),
    settings: Settings = Depends(get_current_settings),
) -> JSONResponse:
    """
    Handle an MCP JSON-RPC message.

    Returns:
        {"events": [...]} with the status and headers of the MCP reply
    """
    body = await read_request_body(request)
    return await run_mcp_exchange(mcp_server, settings, request, body)


# Server-initiated notifications are not supported in stateless mode
@router.get("")
async def handle_mcp_get() -> JSONResponse:
    """Reject GET on the MCP endpoint."""
    logger.info("Received GET MCP request")
    return JSONResponse(content=METHOD_NOT_ALLOWED, status_code=405)


# No sessions to terminate in stateless mode
@router.delete("")
async def handle_mcp_delete() -> JSONResponse:
    """Reject DELETE on the MCP endpoint."""
    logger.info("Received DELETE MCP request")
    return JSONResponse(content=METHOD_NOT_ALLOWED, status_code=405)
