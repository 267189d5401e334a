"""Tests for decoding event streams."""
from __future__ import annotations

import io

import pytest

from copilot_extensions.exceptions import StreamParseError
from copilot_extensions.messages import (
    ChatCompletionChunk,
    Confirmation,
    GitHubAgentData,
    Reference,
    StreamError,
)
from copilot_extensions.sse import (
    SSEParser,
    aiter_events,
    iter_events,
    write_confirmation,
    write_delta,
    write_errors,
    write_references,
    write_stop,
)


def test_delta_then_stop_round_trip(sink):
    write_delta(sink, "chatcmpl-1", "Hello")
    write_stop(sink, "chatcmpl-1")

    values = list(iter_events(sink.value))

    assert len(values) == 2
    content, stop = values
    assert isinstance(content, ChatCompletionChunk)
    assert content.id == "chatcmpl-1"
    assert content.choices[0].delta.content == "Hello"
    assert not content.choices[0].is_stop
    assert stop.choices[0].is_stop
    assert stop.choices[0].delta.content == ""


def test_tagged_events(sink):
    write_confirmation(sink, Confirmation(title="Proceed?", message="Sure?", confirmation={"step": 2}))
    write_references(sink, [Reference(type="github.agent", data=GitHubAgentData(login="bot"))])
    write_errors(sink, [StreamError(code="boom", message="it broke")])

    confirmation, references, errors = list(iter_events(sink.value))

    assert isinstance(confirmation, Confirmation)
    assert confirmation.confirmation == {"step": 2}
    assert isinstance(references[0], Reference)
    assert references[0].data.login == "bot"
    assert isinstance(errors[0], StreamError)
    assert errors[0].code == "boom"


def test_reads_text_file_objects():
    stream = io.StringIO('data: {"id":"a","choices":[]}\n\ndata: [DONE]\n\n')

    values = list(iter_events(stream))

    assert [v.id for v in values] == ["a"]


def test_reads_binary_lines():
    lines = [b'data: {"id":"b"}\r\n', b"\r\n"]

    assert list(iter_events(lines))[0].id == "b"


def test_comments_and_empty_data_are_skipped():
    stream = ": keep-alive\n\ndata:\n\ndata: [DONE]\n\n"

    assert list(iter_events(stream)) == []


@pytest.mark.parametrize("event", ["copilot_references", "copilot_errors", "copilot_confirmation"])
def test_empty_and_done_data_are_skipped_for_tagged_events(event):
    stream = f"event: {event}\ndata: \n\nevent: {event}\ndata:\n\nevent: {event}\ndata: [DONE]\n\n"

    assert list(iter_events(stream)) == []


def test_pending_event_at_end_of_stream():
    assert list(iter_events('data: {"id":"tail"}'))[0].id == "tail"


def test_completions_api_chunk():
    stream = (
        'data: {"id":"x","object":"chat.completion.chunk","created":1,"model":"gpt-4o",'
        '"choices":[{"index":0,"delta":{"content":null,"role":"assistant"},"finish_reason":null}]}\n\n'
    )

    (chunk,) = iter_events(stream)

    assert chunk.model == "gpt-4o"
    assert chunk.choices[0].delta.content == ""


@pytest.mark.parametrize(
    "stream, category",
    [
        ("data: {not json\n\n", "data"),
        ("event: copilot_references\ndata: {}\n\n", "references"),
        ('event: copilot_errors\ndata: [{"type":"nope"}]\n\n', "errors"),
        ('event: copilot_confirmation\ndata: {"type":"other"}\n\n', "confirmation"),
    ],
)
def test_decode_failures_name_the_category(stream, category):
    with pytest.raises(StreamParseError) as exc_info:
        list(iter_events(stream))

    assert exc_info.value.category == category
    assert exc_info.value.__cause__ is not None


def test_read_failure():
    def _broken():
        yield 'data: {"id":"a"}\n'
        raise ConnectionResetError("reset by peer")

    with pytest.raises(StreamParseError) as exc_info:
        list(iter_events(_broken()))

    assert exc_info.value.category == "stream"


def test_parser_emits_each_value(sink):
    write_delta(sink, "c", "one")
    write_delta(sink, "c", "two")
    write_stop(sink, "c")
    seen = []

    SSEParser(sink.value, emit=seen.append).parse_and_emit()

    assert [v.choices[0].delta.content for v in seen] == ["one", "two", ""]


@pytest.mark.asyncio
async def test_async_parsing(sink):
    write_delta(sink, "c", "hi")
    write_errors(sink, [StreamError(message="late")])
    write_stop(sink, "c")

    async def _lines():
        for line in sink.value.decode().splitlines():
            yield line

    values = [value async for value in aiter_events(_lines())]

    assert values[0].choices[0].delta.content == "hi"
    assert values[1][0].message == "late"
    assert values[2].choices[0].is_stop
