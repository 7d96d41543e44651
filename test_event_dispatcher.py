"""
Tests for event dispatch to the output streams.
"""

import io
import json

import pytest

from claude_stream.llm.exceptions import ProtocolError
from claude_stream.llm.streaming.dispatcher import EventDispatcher
from claude_stream.llm.streaming.models import Event, StreamCursor


def completion(text: str, **extra) -> Event:
    return Event("completion", json.dumps({"completion": text, **extra}))


def upstream_error(kind: str, message: str) -> Event:
    return Event("error", json.dumps({"error": {"type": kind, "message": message}}))


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


class TestCompletionEvents:
    """Token rendering."""

    def test_first_token_trimmed_once(self, streams):
        """Only the leading space of the first token is dropped."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        dispatcher.dispatch(completion(" Hello"))
        dispatcher.dispatch(completion(" world"))
        dispatcher.finish()

        assert stdout.getvalue() == "Hello world\n"
        assert stderr.getvalue() == ""

    def test_only_a_single_space_is_trimmed(self, streams):
        """Deliberate indentation past one space survives."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        dispatcher.dispatch(completion("  indented"))
        assert stdout.getvalue() == " indented"

    def test_first_token_without_space_is_unchanged(self, streams):
        """No space to trim means the token is printed as sent."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        dispatcher.dispatch(completion("Hi"))
        dispatcher.dispatch(completion(" there"))
        assert stdout.getvalue() == "Hi there"

    def test_trim_state_lives_on_cursor(self, streams):
        """A cursor that already emitted a token disables trimming."""
        stdout, stderr = streams
        cursor = StreamCursor(first_token_emitted=True)
        dispatcher = EventDispatcher(stdout, stderr, cursor=cursor)

        dispatcher.dispatch(completion(" kept"))
        assert stdout.getvalue() == " kept"

    def test_stats_track_stop_reason_and_model(self, streams):
        """The last stop_reason and model are kept for the summary log."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        dispatcher.dispatch(completion(" a", stop_reason=None, model="claude-2.0"))
        dispatcher.dispatch(
            completion("", stop_reason="stop_sequence", model="claude-2.0")
        )

        stats = dispatcher.get_stats()
        assert stats["tokens"] == 2
        assert stats["stop_reason"] == "stop_sequence"
        assert stats["model"] == "claude-2.0"

    def test_malformed_completion_is_fatal(self, streams):
        """Invalid JSON aborts the stream with the raw data attached."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        with pytest.raises(ProtocolError) as exc_info:
            dispatcher.dispatch(Event("completion", "{not json"))

        assert exc_info.value.raw_data == "{not json"
        assert stdout.getvalue() == ""

    def test_wrong_type_is_fatal(self, streams):
        """A non-string completion is a protocol error."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        with pytest.raises(ProtocolError):
            dispatcher.dispatch(Event("completion", '{"completion": 5}'))

    def test_null_fields_fall_back_to_defaults(self, streams):
        """JSON null in completion or model reads as an empty string."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        dispatcher.dispatch(
            Event(
                "completion",
                '{"completion": " hi", "stop_reason": null, "model": null}',
            )
        )
        dispatcher.dispatch(Event("completion", '{"completion": null}'))
        dispatcher.finish()

        assert stdout.getvalue() == "hi\n"
        assert stderr.getvalue() == ""
        stats = dispatcher.get_stats()
        assert stats["tokens"] == 2
        assert stats["model"] is None


class TestErrorEvents:
    """Upstream-reported errors."""

    def test_error_is_reported_and_stream_continues(self, streams):
        """Upstream errors go to stderr without ending the stream."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        dispatcher.dispatch(upstream_error("overloaded_error", "Overloaded"))
        dispatcher.dispatch(completion(" after"))
        dispatcher.finish()

        assert stderr.getvalue() == 'Error code=overloaded_error: "Overloaded"\n'
        assert stdout.getvalue() == "after\n"
        assert dispatcher.get_stats()["errors"] == 1

    def test_message_is_quoted(self, streams):
        """Quotes in the message are escaped."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        dispatcher.dispatch(upstream_error("invalid_request_error", 'bad "x"'))
        assert stderr.getvalue() == (
            'Error code=invalid_request_error: "bad \\"x\\""\n'
        )

    def test_malformed_error_is_fatal(self, streams):
        """An unparseable error payload is a protocol error."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        with pytest.raises(ProtocolError):
            dispatcher.dispatch(Event("error", "oops"))

    def test_null_error_fields_are_reported(self, streams):
        """Null type or message still produces an error line."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        dispatcher.dispatch(
            Event("error", '{"error": {"type": null, "message": null}}')
        )
        dispatcher.dispatch(Event("error", '{"error": null}'))

        assert stderr.getvalue() == 'Error code=: ""\n' * 2
        assert dispatcher.get_stats()["errors"] == 2


class TestOtherEvents:
    """Forward compatibility."""

    def test_unknown_events_are_ignored(self, streams):
        """Unrecognised event names are counted and skipped."""
        stdout, stderr = streams
        dispatcher = EventDispatcher(stdout, stderr)

        dispatcher.dispatch(Event("ping", "{}"))
        dispatcher.dispatch(Event("message", "not even json"))

        assert stdout.getvalue() == ""
        assert stderr.getvalue() == ""
        assert dispatcher.get_stats()["ignored"] == 2

    def test_finish_without_tokens_writes_newline(self, streams):
        """finish always terminates the output line."""
        stdout, stderr = streams
        EventDispatcher(stdout, stderr).finish()
        assert stdout.getvalue() == "\n"
