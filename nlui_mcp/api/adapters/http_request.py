"""
Request Stream Adapter
======================

Builds a readable pseudo request out of an HTTP request that has already
been fully received, so a stream-oriented protocol engine can consume it.
"""

from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Mapping, Optional, Union
import json

from nlui_mcp.config.logging import get_logger
from nlui_mcp.core.errors import AdapterProtocolError

from .interfaces import Chunk, Listener, StreamRequest

logger = get_logger(__name__)

BodyType = Union[str, bytes, bytearray, Dict[str, Any], List[Any], None]


class PseudoRequest(StreamRequest):
    """
    In-memory readable request stream.

    Body chunks are queued by push(); push(None) ends the stream. Subscribing
    to "data" switches the stream into flowing mode, delivering queued chunks
    immediately. "end" is emitted once, after the last chunk was consumed.
    """

    def __init__(self, method: str, url: str, headers: Optional[Mapping[str, str]] = None) -> None:
        self.method = method.upper()
        self.url = url
        self.headers: Dict[str, str] = {k.lower(): v for k, v in (headers or {}).items()}
        self.bytes_received = 0
        self._buffer: Deque[bytes] = deque()
        self._ended = False
        self._end_emitted = False
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    @property
    def ended(self) -> bool:
        """True once the end-of-stream marker was pushed."""
        return self._ended

    @property
    def readable_ended(self) -> bool:
        """True once "end" was emitted."""
        return self._end_emitted

    def push(self, chunk: Optional[Chunk]) -> bool:
        """
        Queue body data.

        Args:
            chunk: Bytes or text to append, or None to end the stream

        Returns:
            False once the stream has ended

        Raises:
            AdapterProtocolError: If data is pushed after the end marker
        """
        if self._ended:
            raise AdapterProtocolError("push() after end of stream", context={"url": self.url})

        if chunk is None:
            self._ended = True
        else:
            data = chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)
            if data:
                self._buffer.append(data)
                self.bytes_received += len(data)

        self._flow()
        return not self._ended

    def read(self, size: int = -1) -> Optional[bytes]:
        """
        Read queued body data.

        Args:
            size: Maximum number of bytes, or -1 for everything queued

        Returns:
            Body bytes, or None if nothing is queued
        """
        if not self._buffer:
            self._maybe_emit_end()
            return None

        if size < 0:
            data = b"".join(self._buffer)
            self._buffer.clear()
        else:
            parts: List[bytes] = []
            remaining = size
            while self._buffer and remaining > 0:
                chunk = self._buffer.popleft()
                if len(chunk) > remaining:
                    self._buffer.appendleft(chunk[remaining:])
                    chunk = chunk[:remaining]
                parts.append(chunk)
                remaining -= len(chunk)
            data = b"".join(parts)

        self._maybe_emit_end()
        return data

    def on(self, event: str, listener: Listener) -> "PseudoRequest":
        """
        Subscribe to "data" (called with each chunk) or "end".

        An "end" listener added after the stream already ended is called
        immediately.
        """
        if event == "end" and self._end_emitted:
            listener()
            return self

        self._listeners[event].append(listener)
        if event in ("data", "end"):
            self._flow()
        return self

    def pipe(self, destination: Any) -> Any:
        """
        Forward body data into destination.write(); call destination.end()
        when the stream ends, if the destination has one.
        """
        self.on("data", destination.write)
        end = getattr(destination, "end", None)
        if callable(end):
            self.on("end", end)
        return destination

    def _flow(self) -> None:
        # "end" waits for a consumer, as it would on a paused socket stream
        if not (self._listeners["data"] or self._listeners["end"]):
            return
        if self._listeners["data"]:
            while self._buffer:
                self._emit("data", self._buffer.popleft())
        self._maybe_emit_end()

    def _maybe_emit_end(self) -> None:
        if self._ended and not self._buffer and not self._end_emitted:
            self._end_emitted = True
            self._emit("end")

    def _emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            listener(*args)


def encode_body(body: BodyType) -> Optional[bytes]:
    """Encode a request body; structured values are serialized as JSON text."""
    if body is None:
        return None
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    return json.dumps(body).encode("utf-8")


def create_fake_request(
    method: str = "POST",
    url: str = "/",
    headers: Optional[Mapping[str, str]] = None,
    body: BodyType = None,
) -> PseudoRequest:
    """
    Create a pseudo request stream for a received HTTP request.

    The stream is always ended, so engines waiting for end-of-stream can
    parse the body straight away.

    Args:
        method: HTTP method
        url: Request URL
        headers: Request headers
        body: Text, bytes, a parsed JSON value, or None

    Returns:
        Ended PseudoRequest
    """
    request = PseudoRequest(method, url, headers)
    data = encode_body(body)

    # The body may have been re-serialized, so the original length is stale
    if data is None:
        request.headers.pop("content-length", None)
    else:
        request.headers["content-length"] = str(len(data))
        request.push(data)
    request.push(None)

    logger.debug(
        "Pseudo request created",
        method=request.method,
        url=url,
        body_bytes=request.bytes_received,
    )
    return request
