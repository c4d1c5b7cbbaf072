"""
Response Stream Adapter
=======================

Provides a writable pseudo response to a stream-oriented protocol engine and
turns whatever it writes into a single Starlette StreamingResponse.

Rules:
- The first header-set fixes the status and headers of the HTTP response.
- A write before any header-set implicitly sets headers (200 by default).
- Writes are buffered until the body stream is consumed, then flushed in order.
- end() before consumption closes the body as soon as it is consumed.
- Aborting the signal emits "close" to listeners registered by the engine.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Union, cast
import asyncio
import inspect

from starlette.responses import StreamingResponse

from nlui_mcp.config.logging import get_logger
from nlui_mcp.core.errors import AdapterProtocolError, StreamClosedError

from .interfaces import Listener, StreamResponse

logger = get_logger(__name__)

ResponseHandler = Callable[["PseudoResponse"], Union[Awaitable[None], None]]


class AbortSignal:
    """Cancellation signal fired when the HTTP client goes away."""

    def __init__(self) -> None:
        self._aborted = False
        self._listeners: List[Callable[[], Any]] = []

    @property
    def aborted(self) -> bool:
        return self._aborted

    def add_listener(self, listener: Callable[[], Any]) -> None:
        """Register a listener called once on abort."""
        self._listeners.append(listener)

    def abort(self) -> None:
        """Fire the signal. Later calls do nothing."""
        if self._aborted:
            return
        self._aborted = True
        for listener in list(self._listeners):
            listener()


@dataclass(frozen=True)
class ResponseHead:
    """Status and headers captured by the first header-set."""

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)


class _BodyController:
    """Live side of the response body stream."""

    def __init__(self) -> None:
        self._queue: "asyncio.Queue[Optional[bytes]]" = asyncio.Queue()
        self.closed = False

    def enqueue(self, chunk: bytes) -> None:
        if self.closed:
            raise StreamClosedError("Cannot enqueue into a closed body stream")
        self._queue.put_nowait(chunk)

    def close(self) -> None:
        if self.closed:
            raise StreamClosedError("Body stream is already closed")
        self.closed = True
        self._queue.put_nowait(None)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk


class PseudoResponse(StreamResponse):
    """Buffering response stream fed by a protocol engine."""

    def __init__(self, signal: Optional[AbortSignal] = None) -> None:
        self._status_code = 200
        self._headers: Dict[str, str] = {}
        self._head: Optional[ResponseHead] = None
        self._head_ready = asyncio.Event()
        self.headers_sent = False
        self.closed = False
        self._pending: List[bytes] = []
        self._controller: Optional[_BodyController] = None
        self._should_close = False
        self._close_emitted = False
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self.logger: Any = logger.bind(component="response_adapter")

        if signal is not None:
            signal.add_listener(self._on_abort)

    @property
    def status_code(self) -> int:
        return self._status_code

    @status_code.setter
    def status_code(self, code: int) -> None:
        # The response head is already fixed once headers were sent
        self._status_code = code

    @property
    def head(self) -> Optional[ResponseHead]:
        """Status and headers of the HTTP response, once known."""
        return self._head

    def write_head(
        self, status_code: int, headers: Optional[Dict[str, str]] = None
    ) -> "PseudoResponse":
        """
        Set status code and headers.

        Only the first call determines the HTTP response; later calls update
        the observable status code and headers.

        Raises:
            AdapterProtocolError: If called with a status message string
        """
        if isinstance(headers, str):
            raise AdapterProtocolError("Status message of write_head() is not supported")

        self._status_code = status_code
        self._headers = dict(headers or {})

        if self.headers_sent:
            self.logger.debug(
                "Header-set after headers were sent, response head unchanged",
                status_code=status_code,
                sent_status_code=self._head.status_code if self._head else None,
            )
            return self

        self.headers_sent = True
        self._head = ResponseHead(status_code=status_code, headers=dict(self._headers))
        self._head_ready.set()
        return self

    def write(self, chunk: str, encoding: Optional[str] = None) -> bool:
        """
        Write a text chunk.

        Raises:
            AdapterProtocolError: For binary chunks, explicit encodings, or
                writes after end()
        """
        if encoding is not None:
            raise AdapterProtocolError("Encoding argument of write() is not supported")
        if isinstance(chunk, (bytes, bytearray, memoryview)):
            raise AdapterProtocolError("Binary chunks are not supported, write text instead")
        if not isinstance(chunk, str):
            raise AdapterProtocolError(f"Unsupported chunk type: {type(chunk).__name__}")
        if self.closed:
            raise AdapterProtocolError("write() after end()")

        if not self.headers_sent:
            self.write_head(self._status_code, self._headers)

        data = chunk.encode("utf-8")
        if self._controller is None:
            self._pending.append(data)
        else:
            self._controller.enqueue(data)
        return True

    def end(self, data: Optional[str] = None) -> "PseudoResponse":
        """Finish the response, writing data first if given."""
        if data:
            self.write(data)
        if not self.headers_sent:
            self.write_head(self._status_code, self._headers)

        self.closed = True
        if self._controller is None:
            self._should_close = True
            return self

        try:
            self._controller.close()
        except StreamClosedError:
            # The consumer may have gone away already
            pass
        return self

    def on(self, event: str, listener: Listener) -> "PseudoResponse":
        """Subscribe to "close", emitted when the client disconnects."""
        self._listeners[event].append(listener)
        return self

    async def wait_for_head(self) -> ResponseHead:
        """Wait until the first header-set."""
        await self._head_ready.wait()
        return cast(ResponseHead, self._head)

    async def body_iterator(self) -> AsyncIterator[bytes]:
        """Body stream of the HTTP response; the controller goes live on first iteration."""
        controller = _BodyController()
        self._controller = controller
        for chunk in self._pending:
            controller.enqueue(chunk)
        self._pending.clear()
        if self._should_close:
            controller.close()

        async for chunk in controller:
            yield chunk

    def _on_abort(self) -> None:
        if self._close_emitted:
            return
        self._close_emitted = True
        self.logger.info("Client aborted, notifying close listeners")
        for listener in list(self._listeners["close"]):
            listener()


def _log_handler_failure(task: "asyncio.Future[Any]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "Response handler failed after headers were sent",
            error=str(exc),
            exception_class=exc.__class__.__name__,
        )


async def create_server_response_adapter(
    signal: AbortSignal, handler: ResponseHandler
) -> StreamingResponse:
    """
    Run handler against a PseudoResponse and return the resulting HTTP response.

    The handler may keep writing after it returns. This coroutine returns as
    soon as the first header-set happened; the body streams the rest.

    Args:
        signal: Abort signal of the inbound request
        handler: Callable receiving the pseudo response, sync or async

    Returns:
        StreamingResponse carrying the captured status, headers and body

    Raises:
        AdapterProtocolError: If the handler finished without setting headers
    """
    response = PseudoResponse(signal)
    result = handler(response)
    task: Optional["asyncio.Future[Any]"] = (
        asyncio.ensure_future(result) if inspect.isawaitable(result) else None
    )

    head_waiter = asyncio.ensure_future(response.wait_for_head())
    waiters = {head_waiter} if task is None else {head_waiter, task}
    try:
        await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
    finally:
        if not head_waiter.done():
            head_waiter.cancel()

    head = response.head
    if head is None:
        # Only reachable once the handler task finished
        exc = None if task is None or task.cancelled() else task.exception()
        raise AdapterProtocolError(
            "Response handler finished without setting response headers",
            original_error=exc,
        ) from exc

    if task is not None:
        task.add_done_callback(_log_handler_failure)

    return StreamingResponse(
        response.body_iterator(),
        status_code=head.status_code,
        headers=head.headers,
    )


async def read_response_text(response: StreamingResponse) -> str:
    """Drain a streaming response body into text."""
    chunks: List[bytes] = []
    async for chunk in response.body_iterator:
        chunks.append(chunk if isinstance(chunk, bytes) else chunk.encode(response.charset))
    return b"".join(chunks).decode(response.charset)
