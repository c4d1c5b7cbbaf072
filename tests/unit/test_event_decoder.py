"""
Unit Tests for Event Frame Decoder
==================================

Unit tests for flattening JSON and SSE framed protocol replies.
"""

from nlui_mcp.api.adapters.event_decoder import extract_event_data


class TestJSONBodies:
    """Test plain JSON replies."""

    def test_json_object(self):
        """Test that a JSON document becomes one message event."""
        result = extract_event_data('{"jsonrpc": "2.0", "id": 1, "result": {}}')

        assert result == {
            "events": [{"event": "message", "data": {"jsonrpc": "2.0", "id": 1, "result": {}}}]
        }

    def test_json_scalar(self):
        """Test that any JSON value counts as a document."""
        assert extract_event_data("42") == {"events": [{"event": "message", "data": 42}]}


class TestSSEBodies:
    """Test SSE framed replies."""

    def test_single_event(self):
        """Test one event terminated by a blank line."""
        body = 'event: message\ndata: {"a": 1}\n\n'

        assert extract_event_data(body) == {"events": [{"event": "message", "data": {"a": 1}}]}

    def test_crlf_line_endings(self):
        """Test CRLF framed streams."""
        body = 'event: message\r\ndata: {"id": 1}\r\n\r\nevent: message\r\ndata: {"id": 2}\r\n\r\n'

        result = extract_event_data(body)

        assert [event["data"] for event in result["events"]] == [{"id": 1}, {"id": 2}]

    def test_event_name_resets_after_dispatch(self):
        """Test that the event name falls back to message for the next event."""
        body = "event: progress\ndata: 1\n\ndata: 2\n\n"

        assert extract_event_data(body)["events"] == [
            {"event": "progress", "data": 1},
            {"event": "message", "data": 2},
        ]

    def test_multiline_data_is_concatenated(self):
        """Test that data lines are joined without separator."""
        body = 'data: {"a":\ndata:  1}\n\n'

        assert extract_event_data(body)["events"] == [{"event": "message", "data": {"a": 1}}]

    def test_non_json_data_is_kept_raw(self):
        """Test that unparseable data stays a string."""
        body = "data: hello world\n\n"

        assert extract_event_data(body)["events"] == [{"event": "message", "data": "hello world"}]

    def test_trailing_event_without_blank_line(self):
        """Test that pending data at end of input is flushed."""
        body = "event: message\ndata: [1, 2]"

        assert extract_event_data(body)["events"] == [{"event": "message", "data": [1, 2]}]

    def test_ignores_comments_and_unknown_fields(self):
        """Test that keep-alive comments and id fields are skipped."""
        body = ": ping\nid: 7\nretry: 100\ndata: true\n\n"

        assert extract_event_data(body)["events"] == [{"event": "message", "data": True}]

    def test_blank_lines_without_data(self):
        """Test that empty frames dispatch nothing."""
        assert extract_event_data("event: message\n\n\n") == {"events": []}

    def test_empty_body(self):
        """Test an empty reply."""
        assert extract_event_data("") == {"events": []}


class TestDecoderErrors:
    """Test decoding failures."""

    def test_non_string_body(self):
        """Test that a failure returns the raw response with an error."""
        result = extract_event_data(None)

        assert result["error"] == "Failed to extract event data"
        assert result["rawResponse"] is None
