"""Agent backed by the Copilot chat completions API.

Prepends a system prompt to the conversation and forwards the streamed
completion to the response as is.
"""
from __future__ import annotations

import logging
from typing import Optional

from copilot_extensions.messages._types import ChatRole
from copilot_extensions.messages.chat import ChatMessage, ChatRequest
from copilot_extensions.model_clients.copilot_client import CompletionsRequest, CopilotClient
from copilot_extensions.session import SessionInfo
from copilot_extensions.sse.writer import Sink, write_streaming_headers

from .base_agent import BaseAgent

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. You are here to help the user with their questions.\n"
    "You can be direct and to the point. You must be helpful."
)


class CopilotChatAgent(BaseAgent):
    """Answers by streaming a Copilot chat completion.

    ``model`` overrides the client model for this agent. When unset, the
    client model applies, and the API default when the client has none.
    """

    def __init__(
        self,
        name: str,
        client: Optional[CopilotClient] = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        model: Optional[str] = None,
    ):
        super().__init__(name, description="Forwards the conversation to Copilot chat completions.")
        self._owns_client = client is None
        self.client = client or CopilotClient()
        self.system_prompt = system_prompt
        self.model = model

    def build_request(self, request: ChatRequest, session: SessionInfo) -> CompletionsRequest:
        prompt = self.system_prompt
        if session.repo is not None:
            prompt += f"\nThe user is working in the repository {session.repo.owner_login}/{session.repo.name}."
        messages = [ChatMessage(role=ChatRole.SYSTEM, content=prompt)]
        # session messages carry context, not conversation
        messages.extend(m for m in request.messages if not m.is_session_message)
        if self.model:
            return CompletionsRequest(model=self.model, messages=messages)
        return CompletionsRequest(messages=messages)

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

        completions = self.build_request(request, session)
        logger.info(
            "Forwarding %d messages to Copilot",
            len(completions.messages),
            extra={"model": self.model or self.client.model or completions.model, "thread_id": request.thread_id},
        )
        await self.client.forward_stream(token, completions, sink)

    async def aclose(self) -> None:
        # an injected client belongs to the caller
        if self._owns_client:
            await self.client.aclose()
