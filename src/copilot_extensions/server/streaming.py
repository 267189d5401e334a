"""Response sink bridging an agent's writes to a ``StreamingResponse``.

The agent runs in its own task and writes frames into the sink; the route
drains them into the HTTP response. ``_DONE`` marks the end of the agent run.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Dict, Union

_DONE = object()


class ResponseSink:
    """Writable handed to agents. ``headers`` is applied to the response."""

    def __init__(self) -> None:
        self.headers: Dict[str, str] = {}
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self.bytes_written = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: Union[bytes, str]) -> int:
        if self._closed:
            raise BrokenPipeError("client disconnected")
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._queue.put_nowait(bytes(data))
        self.bytes_written += len(data)
        return len(data)

    def finish(self) -> None:
        """Mark the agent run as over. Called once by the route."""
        self._queue.put_nowait(_DONE)

    def close(self) -> None:
        """Reject further writes (the peer went away)."""
        self._closed = True

    async def next_frame(self):
        """The next frame, or ``_DONE``."""
        return await self._queue.get()

    async def frames(self) -> AsyncIterator[bytes]:
        while True:
            frame = await self._queue.get()
            if frame is _DONE:
                break
            yield frame
