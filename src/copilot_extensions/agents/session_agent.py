"""Agent that answers with the session context it was called with.

Useful to check what the platform sends from each client: github.com
includes the current URL (and with it the issue or pull request), editors
include repository references, and so on.
"""
from __future__ import annotations

import logging
from typing import Iterator, List, Tuple
from uuid import uuid4

from copilot_extensions.messages.chat import ChatRequest
from copilot_extensions.session import SessionInfo
from copilot_extensions.sse.writer import Sink, write_delta, write_stop, write_streaming_headers

from .base_agent import BaseAgent

logger = logging.getLogger(__name__)


def _table(title: str, rows: List[Tuple[str, object]]) -> Iterator[str]:
    yield f"#### {title}\n"
    yield "|  |  |\n"
    yield "| --- | --- |\n"
    for key, value in rows:
        yield f"| {key} | {'' if value is None else value} |\n"


def render_session(session: SessionInfo) -> Iterator[str]:
    """Markdown lines describing ``session``, one table per known fact."""
    yield "# Session\n"

    if session.url is not None:
        yield from _table("Current URL", [
            ("URL", session.url.url),
            ("Owner", session.url.owner),
            ("Repo", session.url.repo),
            ("Path", session.url.path),
            ("Hash", session.url.hash),
        ])

    yield from _table("Agent", [
        ("ID", session.agent.id),
        ("Login", session.agent.login),
        ("URL", session.agent.url),
    ])

    if session.repo is not None:
        yield from _table("Repository", [
            ("ID", session.repo.id),
            ("Name", session.repo.name),
            ("OwnerLogin", session.repo.owner_login),
            ("OwnerType", session.repo.owner_type),
            ("Visibility", session.repo.visibility),
        ])

    if session.issue is not None:
        yield from _table("Issue", [
            ("Number", f"[#{session.issue.number}]({session.issue.url})"),
            ("Repo", session.issue.repo),
            ("Owner", session.issue.owner),
        ])

    if session.pull_request is not None:
        yield from _table("Pull Request", [
            ("Number", f"[#{session.pull_request.number}]({session.pull_request.url})"),
            ("Repo", session.pull_request.repo),
            ("Owner", session.pull_request.owner),
            ("Page", session.pull_request.page),
        ])


class SessionInfoAgent(BaseAgent):
    """Streams a markdown summary of the resolved session."""

    def __init__(self, name: str = "session-info"):
        super().__init__(name, description="Reports the resolved chat session context.")

    async def execute(
        self,
        token: str,
        request: ChatRequest,
        session: SessionInfo,
        sink: Sink,
    ) -> None:
        headers = getattr(sink, "headers", None)
        if headers is not None:
            write_streaming_headers(headers)

        stream_id = f"chatcmpl-{uuid4().hex}"
        logger.info("Describing session for thread %s", request.thread_id or "(none)")
        for line in render_session(session):
            write_delta(sink, stream_id, line)
        write_stop(sink, stream_id)
