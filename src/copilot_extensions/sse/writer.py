"""Server-Sent Events writer for Copilot agent responses.

Frames::

    data: {json}\\n\\n                  data frame
    data: [DONE]\\n\\n                  end of the response
    event: {name}\\n                    names the data frame that follows

Every helper writes one complete frame per ``write`` call and flushes the
sink right after it when the sink has a ``flush`` method; the chat UI
renders partial output as it arrives. Write errors (for example a peer that
went away) propagate to the caller unchanged.

Streaming ids: the id passed to ``write_delta`` must be the same for every
chunk of a response and must be passed to ``write_stop``, otherwise some
clients stop attributing the output to the agent. ``write_stop`` must be
called exactly once, after the last delta.
"""
from __future__ import annotations

import json
import time
from typing import Any, Iterable, MutableMapping, Optional, Protocol, Sequence

from pydantic import BaseModel

from copilot_extensions.messages._types import FINISH_REASON_STOP, ChatRole
from copilot_extensions.messages.chat import ChatChoice, ChatChoiceDelta, ChatCompletionChunk
from copilot_extensions.messages.confirmation import Confirmation
from copilot_extensions.messages.errors import StreamError
from copilot_extensions.messages.references import Reference

SSE_EVENT_CONFIRMATION = "copilot_confirmation"
SSE_EVENT_REFERENCES = "copilot_references"
SSE_EVENT_ERRORS = "copilot_errors"

DONE_FRAME = b"data: [DONE]\n\n"

STREAMING_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Transfer-Encoding": "chunked",
}


class Sink(Protocol):
    """Anything bytes can be written to. ``flush()`` is optional."""

    def write(self, data: bytes) -> Any: ...


def streaming_headers() -> dict:
    """Headers for an event-stream response."""
    return dict(STREAMING_HEADERS)


def write_streaming_headers(headers: MutableMapping[str, str]) -> None:
    """Set the event-stream response headers. Call before the first write."""
    headers.update(STREAMING_HEADERS)


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def encode_json(value: Any) -> str:
    """Compact JSON encoding used for every data frame."""
    return json.dumps(_jsonable(value), separators=(",", ":"), ensure_ascii=False)


def write_bytes(w: Sink, frame: bytes) -> None:
    """Write pre-framed bytes and flush."""
    w.write(frame)
    flush = getattr(w, "flush", None)
    if callable(flush):
        flush()


# ── Primitives ───────────────────────────────────────────────────────────────

def write_data(w: Sink, value: Any) -> None:
    """Write ``value`` as a JSON data frame."""
    write_bytes(w, b"data: " + encode_json(value).encode("utf-8") + b"\n\n")


def write_raw_data(w: Sink, raw: str) -> None:
    """Write an already encoded payload as a data frame."""
    write_bytes(w, f"data: {raw}\n\n".encode("utf-8"))


def write_done(w: Sink) -> None:
    write_bytes(w, DONE_FRAME)


def write_event(w: Sink, name: str) -> None:
    """Write an event line naming the next data frame."""
    write_bytes(w, f"event: {name}\n".encode("utf-8"))


# ── Copilot events ──────────────────────────────────────────────────────────

def write_confirmation(w: Sink, confirmation: Confirmation) -> None:
    """Ask the user to confirm an action before the agent goes on."""
    write_event(w, SSE_EVENT_CONFIRMATION)
    write_data(w, confirmation)


def write_references(w: Sink, references: Sequence[Reference]) -> None:
    """Send references for the UI to display. Nothing is written for an empty list."""
    if not references:
        return
    write_event(w, SSE_EVENT_REFERENCES)
    write_data(w, list(references))


def write_reference(w: Sink, reference: Reference) -> None:
    write_references(w, [reference])


def write_errors(w: Sink, errors: Iterable[StreamError]) -> None:
    """Report errors to the UI. Nothing is written for an empty list."""
    errors = list(errors)
    if not errors:
        return
    write_event(w, SSE_EVENT_ERRORS)
    write_data(w, errors)


def write_error(w: Sink, error: StreamError) -> None:
    write_errors(w, [error])


# ── Chat completion chunks ──────────────────────────────────────────────────

def write_delta(w: Sink, id: str, delta: str) -> None:
    """Stream a piece of assistant text."""
    chunk = ChatCompletionChunk(
        id=id or None,
        created=int(time.time()),
        choices=[
            ChatChoice(
                delta=ChatChoiceDelta(content=delta, role=ChatRole.ASSISTANT.value),
            )
        ],
    )
    write_data(w, chunk)


def write_stop(w: Sink, id: Optional[str] = "") -> None:
    """Close the response: a ``stop`` chunk followed by ``[DONE]``."""
    chunk = ChatCompletionChunk(
        id=id or None,
        choices=[ChatChoice(finish_reason=FINISH_REASON_STOP)],
    )
    write_data(w, chunk)
    write_done(w)
