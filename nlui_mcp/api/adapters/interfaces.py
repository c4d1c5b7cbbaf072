"""
Stream Interfaces
=================

The subset of request and response stream operations a protocol engine
needs when it is hosted behind a single HTTP exchange.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Union

Listener = Callable[..., Any]
Chunk = Union[bytes, str]


class StreamRequest(ABC):
    """Readable request stream."""

    method: str
    url: str
    headers: Dict[str, str]

    @abstractmethod
    def push(self, chunk: Optional[Chunk]) -> bool:
        """Append body data; None marks end of stream."""

    @abstractmethod
    def read(self, size: int = -1) -> Optional[bytes]:
        """Read buffered body data."""

    @abstractmethod
    def on(self, event: str, listener: Listener) -> "StreamRequest":
        """Subscribe to "data" or "end"."""

    @abstractmethod
    def pipe(self, destination: Any) -> Any:
        """Forward body data into a writable destination."""


class StreamResponse(ABC):
    """Writable response stream."""

    @property
    @abstractmethod
    def status_code(self) -> int:
        """Current status code."""

    @abstractmethod
    def write_head(
        self, status_code: int, headers: Optional[Dict[str, str]] = None
    ) -> "StreamResponse":
        """Set status code and headers."""

    @abstractmethod
    def write(self, chunk: str, encoding: Optional[str] = None) -> bool:
        """Write a text chunk."""

    @abstractmethod
    def end(self, data: Optional[str] = None) -> "StreamResponse":
        """Finish the response."""

    @abstractmethod
    def on(self, event: str, listener: Listener) -> "StreamResponse":
        """Subscribe to "close"."""
