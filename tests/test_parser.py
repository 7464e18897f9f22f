"""Unit and property-based tests for event-stream line parsing."""
import json

from hypothesis import given
from hypothesis import strategies as st

from talktohand.chat import StreamDelta, parse_line

from .helpers import sse_line


class TestParseLine:
    """Tests for parse_line."""

    @given(st.text(alphabet=st.characters(blacklist_categories=("Cs",))))
    def test_content_fragment_returned_verbatim(self, content: str):
        """Property test: a delta's content comes back unchanged."""
        delta = parse_line(sse_line(content))
        assert delta == StreamDelta(content_fragment=content)

    def test_done_sentinel_is_terminal(self):
        """Test that data: [DONE] ends the stream."""
        delta = parse_line("data: [DONE]")
        assert delta is not None
        assert delta.is_terminal
        assert delta.content_fragment is None

    def test_done_sentinel_is_trimmed(self):
        """Test that whitespace around the sentinel is ignored."""
        assert parse_line("data:   [DONE]  \r").is_terminal

    @given(st.text().filter(lambda s: not s.startswith("data: ")))
    def test_lines_without_prefix_are_skipped(self, line: str):
        """Property test: anything not starting with 'data: ' is skipped."""
        assert parse_line(line) is None

    def test_other_event_fields_are_skipped(self):
        """Test that SSE comments and fields other than data are skipped."""
        assert parse_line("") is None
        assert parse_line(": keep-alive") is None
        assert parse_line("event: message") is None
        assert parse_line("data:[DONE]") is None

    def test_malformed_json_is_skipped(self):
        """Test that an undecodable chunk is skipped, not fatal."""
        assert parse_line('data: {"choices": [') is None
        assert parse_line("data: not json") is None
        assert parse_line("data: 42") is None

    def test_missing_choices_yields_empty_delta(self):
        """Test that a chunk without choices carries no fragment."""
        delta = parse_line('data: {"id": "x", "object": "chat.completion.chunk"}')
        assert delta == StreamDelta()

    def test_empty_choices_yields_empty_delta(self):
        """Test that an empty choices list carries no fragment."""
        assert parse_line('data: {"choices": []}') == StreamDelta()

    def test_role_only_delta_has_no_fragment(self):
        """Test that a delta without content carries no fragment."""
        delta = parse_line(sse_line(role="assistant"))
        assert delta is not None
        assert delta.content_fragment is None
        assert not delta.is_terminal

    def test_null_content_has_no_fragment(self):
        """Test that an explicit null content carries no fragment."""
        assert parse_line('data: {"choices": [{"delta": {"content": null}}]}') == StreamDelta()

    def test_empty_string_content_is_a_fragment(self):
        """Test that empty content is kept as a fragment."""
        assert parse_line(sse_line("")).content_fragment == ""

    def test_only_first_choice_is_used(self):
        """Test that later choices are ignored."""
        line = "data: " + json.dumps({
            "choices": [
                {"delta": {"content": "first"}},
                {"delta": {"content": "second"}},
            ]
        })
        assert parse_line(line).content_fragment == "first"

    def test_full_chunk_shape(self):
        """Test a chunk with every optional field a server may send."""
        line = "data: " + json.dumps({
            "id": "chatcmpl-1",
            "object": "chat.completion.chunk",
            "created": 1720000000,
            "model": "jan-nano",
            "choices": [{
                "index": 0,
                "delta": {"role": "assistant", "content": "Hi"},
                "finish_reason": None,
            }],
        })
        assert parse_line(line) == StreamDelta(content_fragment="Hi")
