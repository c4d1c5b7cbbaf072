"""
Event Frame Decoder
===================

Flattens a finished protocol response body, framed either as one JSON
document or as Server-Sent Events, into a list of normalized events.
"""

from typing import Any, Dict, List
import json
import re

from nlui_mcp.config.logging import get_logger
from nlui_mcp.models.schemas import NormalizedEvent

logger = get_logger(__name__)

DEFAULT_EVENT = "message"

_LINE_SPLIT = re.compile(r"\r?\n")


def _parse_data(data: str) -> Any:
    try:
        return json.loads(data)
    except ValueError:
        return data


def _parse_sse(body: str) -> List[NormalizedEvent]:
    events: List[NormalizedEvent] = []
    current_event = DEFAULT_EVENT
    current_data = ""

    for line in _LINE_SPLIT.split(body):
        if not line.strip():
            # Blank line terminates an event
            if current_data:
                events.append(NormalizedEvent(event=current_event, data=_parse_data(current_data)))
                current_event = DEFAULT_EVENT
                current_data = ""
            continue

        if line.startswith("event:"):
            current_event = line[len("event:"):].strip()
        elif line.startswith("data:"):
            current_data += line[len("data:"):].strip()

    if current_data:
        events.append(NormalizedEvent(event=current_event, data=_parse_data(current_data)))

    return events


def extract_event_data(response_body: str) -> Dict[str, Any]:
    """
    Decode a protocol response body.

    Args:
        response_body: Raw response text, plain JSON or SSE framed

    Returns:
        {"events": [{"event": ..., "data": ...}, ...]}, or
        {"error": ..., "rawResponse": response_body} if decoding failed
    """
    try:
        try:
            events = [NormalizedEvent(event=DEFAULT_EVENT, data=json.loads(response_body))]
        except ValueError:
            events = _parse_sse(response_body)

        return {"events": [event.model_dump() for event in events]}

    except Exception as e:
        logger.error("Error extracting event data", error=str(e), exc_info=True)
        return {"error": "Failed to extract event data", "rawResponse": response_body}
