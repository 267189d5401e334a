from .parser import SSEParser, aiter_events, iter_events
from .writer import (
    SSE_EVENT_CONFIRMATION,
    SSE_EVENT_ERRORS,
    SSE_EVENT_REFERENCES,
    STREAMING_HEADERS,
    encode_json,
    streaming_headers,
    write_confirmation,
    write_bytes,
    write_data,
    write_delta,
    write_done,
    write_error,
    write_errors,
    write_event,
    write_raw_data,
    write_reference,
    write_references,
    write_stop,
    write_streaming_headers,
)

__all__ = [
    "SSEParser",
    "aiter_events",
    "iter_events",
    "SSE_EVENT_CONFIRMATION",
    "SSE_EVENT_ERRORS",
    "SSE_EVENT_REFERENCES",
    "STREAMING_HEADERS",
    "encode_json",
    "streaming_headers",
    "write_confirmation",
    "write_bytes",
    "write_data",
    "write_delta",
    "write_done",
    "write_error",
    "write_errors",
    "write_event",
    "write_raw_data",
    "write_reference",
    "write_references",
    "write_stop",
    "write_streaming_headers",
]
