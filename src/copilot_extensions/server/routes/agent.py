"""Agent endpoint.

POST /agent – verify the signed payload, resolve the session and stream the
agent's response as Server-Sent Events.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response, StreamingResponse
from pydantic import ValidationError

from copilot_extensions.agents.base_agent import BaseAgent
from copilot_extensions.exceptions import PayloadDecodeError, SessionValidationError
from copilot_extensions.messages._types import ChatRole
from copilot_extensions.messages.chat import ChatRequest
from copilot_extensions.observability.telemetry import global_metrics, global_tracer
from copilot_extensions.payload import PayloadVerifier
from copilot_extensions.server.streaming import _DONE, ResponseSink
from copilot_extensions.session import resolve_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["agent"])

KEY_IDENTIFIER_HEADER = "Github-Public-Key-Identifier"
SIGNATURE_HEADER = "Github-Public-Key-Signature"
TOKEN_HEADER = "X-GitHub-Token"


def _reject(status_code: int, reason: str, detail: str) -> HTTPException:
    logger.warning("Rejected agent request (%s): %s", reason, detail)
    global_metrics.increment_counter("agent_requests_rejected", tags={"reason": reason})
    return HTTPException(status_code=status_code, detail=detail)


def _log_agent_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Agent failed", exc_info=(type(exc), exc, exc.__traceback__))


@router.post("/agent")
async def agent_endpoint(request: Request):
    """Stream the configured agent's answer.

    Flow:
      1. Require the signature, key identifier and token headers
      2. Verify the body signature
      3. Parse the chat request and resolve its session
      4. Run the agent in a task and stream whatever it writes
    """
    # 1. Headers
    key_id = request.headers.get(KEY_IDENTIFIER_HEADER)
    signature = request.headers.get(SIGNATURE_HEADER)
    token = request.headers.get(TOKEN_HEADER)
    for name, value in (
        (KEY_IDENTIFIER_HEADER, key_id),
        (SIGNATURE_HEADER, signature),
        (TOKEN_HEADER, token),
    ):
        if not value:
            raise _reject(400, "missing_header", f"missing {name} header")

    body = await request.body()

    # 2. Signature
    verifier: PayloadVerifier = request.app.state.verifier
    with global_tracer.start_span("agent.verify", {"key_identifier": key_id}) as span:
        if verifier.key_identifier and key_id != verifier.key_identifier:
            logger.info("Payload signed with key %s, verifier holds %s", key_id, verifier.key_identifier)
        try:
            valid = verifier.verify(body, signature)
        except PayloadDecodeError as e:
            global_tracer.mark_error(span, e.message)
            raise _reject(400, "bad_signature", e.message)
        if not valid:
            global_tracer.mark_error(span, "invalid payload signature")
            raise _reject(401, "invalid_signature", "invalid payload signature")

    # 3. Request + session
    try:
        chat_request = ChatRequest.model_validate_json(body)
    except ValidationError as e:
        raise _reject(400, "bad_request", f"failed to unmarshal request: {e.error_count()} error(s)")

    carrier_role = ChatRole(request.app.state.settings.SESSION_CARRIER_ROLE)
    with global_tracer.start_span("agent.resolve_session", {"carrier_role": carrier_role.value}) as span:
        try:
            session = resolve_session(chat_request.messages, chat_request.agent, carrier_role=carrier_role)
        except SessionValidationError as e:
            global_tracer.mark_error(span, e.message)
            raise _reject(400, "session_mismatch", e.message)

    # 4. Agent
    agent: BaseAgent = request.app.state.agent
    sink = ResponseSink()

    async def run_agent() -> None:
        with global_tracer.start_span("agent.execute", {"agent": agent.name}):
            try:
                await agent.execute(token, chat_request, session, sink)
            finally:
                sink.finish()

    agent_task = asyncio.create_task(run_agent())
    agent_task.add_done_callback(_log_agent_failure)

    first = await sink.next_frame()
    if first is _DONE:
        await asyncio.wait({agent_task})
        if not agent_task.cancelled() and agent_task.exception() is not None:
            raise HTTPException(status_code=500, detail="agent failed")
        return Response(status_code=200, headers=sink.headers)

    async def sse_generator() -> AsyncIterator[bytes]:
        try:
            yield first
            async for frame in sink.frames():
                yield frame
        finally:
            # stops the agent's writes once the client is gone
            sink.close()

    return StreamingResponse(sse_generator(), headers=sink.headers)
