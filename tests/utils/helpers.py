"""
Test Helpers
============

Helper functions for common testing operations.
"""

import asyncio
import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qs, urlsplit

__all__ = [
    "FakeClock",
    "Collector",
    "MCP_HEADERS",
    "jsonrpc_request",
    "instance_id_from_uri",
    "wait_for_condition",
]

# Headers a streamable HTTP MCP client sends with every POST
MCP_HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class Collector:
    """Writable destination recording piped data."""

    def __init__(self) -> None:
        self.chunks: List[bytes] = []
        self.ended = False

    def write(self, chunk: bytes) -> None:
        self.chunks.append(chunk)

    def end(self) -> None:
        self.ended = True


def jsonrpc_request(
    method: str, params: Optional[Dict[str, Any]] = None, request_id: int = 1
) -> Dict[str, Any]:
    """Build a JSON-RPC 2.0 request."""
    message: Dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


def instance_id_from_uri(uri: Any) -> str:
    """Extract the instanceId query parameter of a ui-render reference."""
    return parse_qs(urlsplit(str(uri)).query)["instanceId"][0]


async def wait_for_condition(
    condition: Callable[[], bool],
    timeout: float = 2.0,
    interval: float = 0.01,
    error_message: str = "Condition not met within timeout",
) -> None:
    """Wait for a condition to become true."""
    start_time = time.monotonic()

    while time.monotonic() - start_time < timeout:
        if condition():
            return
        await asyncio.sleep(interval)

    raise TimeoutError(error_message)
