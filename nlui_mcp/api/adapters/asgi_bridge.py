"""
ASGI Bridge
===========

Exposes a PseudoRequest/PseudoResponse pair as ASGI scope, receive and send,
which is the stream interface the MCP SDK transport is written against.
"""

from typing import Any, Awaitable, Callable, Dict, MutableMapping, Optional, Tuple
from urllib.parse import unquote, urlsplit
import asyncio
import codecs

from nlui_mcp.core.errors import AdapterProtocolError

from .http_request import PseudoRequest
from .http_response import PseudoResponse

Message = MutableMapping[str, Any]
Scope = MutableMapping[str, Any]
ASGIApp = Callable[
    [Scope, Callable[[], Awaitable[Message]], Callable[[Message], Awaitable[None]]],
    Awaitable[None],
]

DEFAULT_PORTS = {"http": 80, "https": 443}


def build_scope(request: PseudoRequest) -> Scope:
    """Build an ASGI HTTP scope for a pseudo request."""
    parts = urlsplit(request.url)
    scheme = parts.scheme or "http"
    path = parts.path or "/"

    server: Optional[Tuple[str, int]] = None
    if parts.hostname:
        server = (parts.hostname, parts.port or DEFAULT_PORTS.get(scheme, 80))

    return {
        "type": "http",
        "asgi": {"version": "3.0", "spec_version": "2.3"},
        "http_version": "1.1",
        "method": request.method,
        "scheme": scheme,
        "path": unquote(path),
        "raw_path": path.encode("utf-8"),
        "query_string": parts.query.encode("latin-1"),
        "root_path": "",
        "headers": [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in request.headers.items()
        ],
        "client": None,
        "server": server,
    }


class ASGIBridge:
    """
    ASGI view of one pseudo exchange.

    receive() yields the whole request body once, then blocks until the
    response emits "close" and reports http.disconnect.
    """

    def __init__(self, request: PseudoRequest, response: PseudoResponse) -> None:
        if not request.ended:
            raise AdapterProtocolError("Request stream must be ended before it is bridged")

        self.request = request
        self.response = response
        self.scope = build_scope(request)
        self._body_delivered = False
        self._disconnected = asyncio.Event()
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        response.on("close", self._disconnected.set)

    async def receive(self) -> Message:
        if not self._body_delivered:
            self._body_delivered = True
            return {"type": "http.request", "body": self.request.read() or b"", "more_body": False}

        await self._disconnected.wait()
        return {"type": "http.disconnect"}

    async def send(self, message: Message) -> None:
        message_type = message["type"]

        if message_type == "http.response.start":
            headers: Dict[str, str] = {}
            for name, value in message.get("headers", []):
                headers[name.decode("latin-1").lower()] = value.decode("latin-1")
            self.response.write_head(message["status"], headers)

        elif message_type == "http.response.body":
            more_body = message.get("more_body", False)
            text = self._decoder.decode(message.get("body", b""), final=not more_body)
            if text:
                self.response.write(text)
            if not more_body:
                self.response.end()

        else:
            raise AdapterProtocolError(f"Unsupported ASGI message type: {message_type}")

    async def run(self, app: ASGIApp) -> None:
        """Run an ASGI application against this exchange."""
        await app(self.scope, self.receive, self.send)


async def serve_asgi(app: ASGIApp, request: PseudoRequest, response: PseudoResponse) -> None:
    """Drive app with request, writing everything it sends into response."""
    await ASGIBridge(request, response).run(app)
