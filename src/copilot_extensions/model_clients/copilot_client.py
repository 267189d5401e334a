"""Async client for the Copilot chat completions API.

Agents call it with the user token from the agent request (the
``X-GitHub-Token`` header). A streamed completion is already in the
event-stream format the platform expects, so it can be forwarded to the
agent response as is::

    client = CopilotClient()
    write_streaming_headers(sink.headers)
    await client.forward_stream(token, CompletionsRequest(messages=req.messages), sink)
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from copilot_extensions.exceptions import CopilotAPIError
from copilot_extensions.messages.chat import ChatMessage
from copilot_extensions.sse.writer import Sink, write_bytes

logger = logging.getLogger(__name__)

COPILOT_API_URL = "https://api.githubcopilot.com/chat/completions"

_DEFAULT_TIMEOUT = httpx.Timeout(connect=5.0, read=120.0, write=10.0, pool=5.0)


class CopilotModel(str, Enum):
    GPT35 = "gpt-3.5-turbo"
    GPT4 = "gpt-4"
    GPT4O = "gpt-4o"
    EMBEDDINGS = "text-embedding-ada-002"


class ToolFunctionDefinition(BaseModel):
    name: str
    description: Optional[str] = None
    # JSON schema of the arguments
    parameters: Dict[str, Any] = Field(default_factory=dict)


class CompletionsTool(BaseModel):
    type: str = "function"
    function: ToolFunctionDefinition


class CompletionsRequest(BaseModel):
    model: str = CopilotModel.GPT4O.value
    messages: List[ChatMessage]
    tools: Optional[List[CompletionsTool]] = None
    stream: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CopilotClient:
    """Thin wrapper over ``httpx.AsyncClient``. No retries."""

    def __init__(
        self,
        api_url: str = COPILOT_API_URL,
        model: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url
        self.model = model
        self._client = client or httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT)

    def _payload(self, request: CompletionsRequest, stream: bool) -> Dict[str, Any]:
        payload = request.to_dict()
        if self.model and "model" not in request.model_fields_set:
            payload["model"] = self.model
        payload["stream"] = stream
        return payload

    @staticmethod
    def _headers(token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.status_code != 200:
            logger.error("Copilot API error %s: %s", resp.status_code, resp.text)
            raise CopilotAPIError(
                f"unexpected status code: {resp.status_code}",
                status_code=resp.status_code,
                details={"body": resp.text},
            )

    async def chat_completions(self, token: str, request: CompletionsRequest) -> Dict[str, Any]:
        """Request a complete (non-streamed) completion."""
        resp = await self._client.post(
            self.api_url,
            json=self._payload(request, stream=False),
            headers=self._headers(token),
        )
        self._raise_for_status(resp)
        return resp.json()

    async def chat_completions_stream(
        self,
        token: str,
        request: CompletionsRequest,
    ) -> AsyncIterator[str]:
        """Request a streamed completion and yield its raw event-stream lines."""
        async with self._client.stream(
            "POST",
            self.api_url,
            json=self._payload(request, stream=True),
            headers=self._headers(token),
        ) as resp:
            if resp.status_code != 200:
                await resp.aread()
            self._raise_for_status(resp)
            async for line in resp.aiter_lines():
                yield line

    async def forward_stream(self, token: str, request: CompletionsRequest, sink: Sink) -> None:
        """Copy a streamed completion into ``sink`` frame by frame."""
        async for line in self.chat_completions_stream(token, request):
            write_bytes(sink, f"{line}\n".encode("utf-8"))

    async def aclose(self) -> None:
        await self._client.aclose()
