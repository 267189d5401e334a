"""Parser for Copilot agent event streams.

Turns the frames produced by ``copilot_extensions.sse.writer`` (or by the
Copilot chat completions API) back into payload objects:

    event: copilot_confirmation   -> Confirmation
    event: copilot_references     -> list[Reference]
    event: copilot_errors         -> list[StreamError]
    data: {...}                   -> ChatCompletionChunk

Empty data lines and ``data: [DONE]`` produce nothing, whatever the event.
Reaching the end of the stream is a normal return.
"""
from __future__ import annotations

import logging
from typing import Any, AsyncIterable, Callable, Iterable, Iterator, List, Optional, Tuple, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from copilot_extensions.exceptions import StreamParseError
from copilot_extensions.messages.chat import ChatCompletionChunk
from copilot_extensions.messages.confirmation import Confirmation
from copilot_extensions.messages.errors import StreamError
from copilot_extensions.messages.references import Reference

from .writer import SSE_EVENT_CONFIRMATION, SSE_EVENT_ERRORS, SSE_EVENT_REFERENCES

logger = logging.getLogger(__name__)

SSE_DATA_FIELD = "data"
SSE_EVENT_FIELD = "event"

Line = Union[str, bytes]
Emitter = Callable[[Any], None]

_references_adapter = TypeAdapter(List[Reference])
_errors_adapter = TypeAdapter(List[StreamError])

_READ_ERRORS = (OSError, UnicodeDecodeError, httpx.HTTPError)


class _Event:
    """Fields collected for one event, up to the blank line that ends it."""

    def __init__(self) -> None:
        self.name: Optional[str] = None
        self.data: List[str] = []

    @property
    def empty(self) -> bool:
        return self.name is None and not self.data


def _split_field(line: str) -> Tuple[str, str]:
    name, sep, value = line.partition(":")
    if not sep:
        return name, ""
    if value.startswith(" "):
        value = value[1:]
    return name, value


def _feed(event: _Event, line: Line) -> Optional[_Event]:
    """Add one line to ``event``. Returns the finished event on a blank line."""
    if isinstance(line, (bytes, bytearray)):
        line = line.decode("utf-8")
    line = line.rstrip("\r\n")

    if not line:
        return None if event.empty else event
    if line.startswith(":"):
        return None

    name, value = _split_field(line)
    if name == SSE_EVENT_FIELD:
        event.name = value
    elif name == SSE_DATA_FIELD:
        event.data.append(value)
    return None


def _decode_event(event: _Event) -> List[Any]:
    """Decode the data fields of a finished event into payload objects."""
    if event.name == SSE_EVENT_CONFIRMATION:
        category, decode = "confirmation", Confirmation.model_validate_json
    elif event.name == SSE_EVENT_REFERENCES:
        category, decode = "references", _references_adapter.validate_json
    elif event.name == SSE_EVENT_ERRORS:
        category, decode = "errors", _errors_adapter.validate_json
    else:
        category, decode = "data", ChatCompletionChunk.model_validate_json

    values = []
    for data in event.data:
        if data in ("", "[DONE]"):
            continue
        try:
            values.append(decode(data))
        except (ValidationError, ValueError) as e:
            raise StreamParseError(
                f"failed to process {category}: {e}",
                category=category,
                details={"event": event.name, "data": data},
            ) from e
    return values


def _lines(stream: Union[Iterable[Line], str, bytes]) -> Iterable[Line]:
    if isinstance(stream, (str, bytes, bytearray)):
        return stream.splitlines()
    return stream


def iter_events(stream: Union[Iterable[Line], str, bytes]) -> Iterator[Any]:
    """Yield the payloads of a stream of lines (text or bytes).

    Accepts any iterable of lines, such as a file object opened in either
    mode, ``httpx.Response.iter_lines()`` or a whole document.
    """
    lines = iter(_lines(stream))
    event = _Event()
    while True:
        try:
            line = next(lines)
        except StopIteration:
            break
        except _READ_ERRORS as e:
            raise StreamParseError(f"failed to read from stream: {e}", category="stream") from e

        try:
            done = _feed(event, line)
        except UnicodeDecodeError as e:
            raise StreamParseError(f"failed to read from stream: {e}", category="stream") from e
        if done is not None:
            yield from _decode_event(done)
            event = _Event()

    if not event.empty:
        yield from _decode_event(event)


async def aiter_events(stream: AsyncIterable[Line]):
    """Async form of ``iter_events`` (e.g. over ``httpx.Response.aiter_lines()``)."""
    lines = stream.__aiter__()
    event = _Event()
    while True:
        try:
            line = await lines.__anext__()
        except StopAsyncIteration:
            break
        except _READ_ERRORS as e:
            raise StreamParseError(f"failed to read from stream: {e}", category="stream") from e

        try:
            done = _feed(event, line)
        except UnicodeDecodeError as e:
            raise StreamParseError(f"failed to read from stream: {e}", category="stream") from e
        if done is not None:
            for value in _decode_event(done):
                yield value
            event = _Event()

    if not event.empty:
        for value in _decode_event(event):
            yield value


class SSEParser:
    """Parses a stream and hands each payload to ``emit``.

    Usage::

        parser = SSEParser(response.iter_lines(), emit=handle)
        parser.parse_and_emit()
    """

    def __init__(self, stream: Union[Iterable[Line], str, bytes], emit: Emitter):
        self._stream = stream
        self._emit = emit

    def parse_and_emit(self) -> None:
        for value in iter_events(self._stream):
            self._emit(value)
