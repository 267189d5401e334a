"""Tests for the bundled agents."""
from __future__ import annotations

import json

import httpx
import pytest
from conftest import current_url_ref, message, repository_ref, session_message

from copilot_extensions.agents import CopilotChatAgent, SessionInfoAgent
from copilot_extensions.messages import ChatRequest, ChatRole
from copilot_extensions.model_clients import CopilotClient
from copilot_extensions.session import resolve_session
from copilot_extensions.sse import iter_events

STREAM = (
    b'data: {"id":"c1","choices":[{"index":0,"delta":{"content":"Hi there","role":"assistant"}}]}\n\n'
    b'data: {"id":"c1","choices":[{"index":0,"finish_reason":"stop","delta":{"content":null}}]}\n\n'
    b"data: [DONE]\n\n"
)


def _request() -> ChatRequest:
    return ChatRequest(
        agent="myagent",
        messages=[
            message("user", repository_ref("acme", "widgets"), content="what does this repo do?"),
            session_message(current_url_ref("https://github.com/acme/widgets/issues/4")),
        ],
    )


@pytest.mark.asyncio
async def test_session_info_agent_streams_markdown(sink):
    request = _request()
    session = resolve_session(request.messages, request.agent)

    await SessionInfoAgent().execute("t", request, session, sink)

    chunks = list(iter_events(sink.value))
    assert len({c.id for c in chunks}) == 1
    assert chunks[-1].choices[0].is_stop
    text = "".join(c.choices[0].delta.content for c in chunks)
    assert "#### Issue" in text
    assert "| OwnerLogin | acme |" in text
    assert "#### Pull Request" not in text
    assert sink.headers["Content-Type"] == "text/event-stream"


@pytest.mark.asyncio
async def test_copilot_agent_forwards_completion(sink):
    sent = {}

    def handler(request: httpx.Request) -> httpx.Response:
        sent["auth"] = request.headers["Authorization"]
        sent["body"] = json.loads(request.content)
        return httpx.Response(200, content=STREAM)

    client = CopilotClient(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    agent = CopilotChatAgent("myagent", client=client)
    request = _request()
    session = resolve_session(request.messages, request.agent)

    await agent.execute("ghu_token", request, session, sink)

    assert sent["auth"] == "Bearer ghu_token"
    roles = [m["role"] for m in sent["body"]["messages"]]
    assert roles == ["system", "user"]
    assert "acme/widgets" in sent["body"]["messages"][0]["content"]
    assert sent["body"]["stream"] is True
    chunks = list(iter_events(sink.value))
    assert chunks[0].choices[0].delta.content == "Hi there"
    assert chunks[1].choices[0].is_stop


def test_copilot_agent_request_skips_session_messages():
    agent = CopilotChatAgent("myagent", system_prompt="Be brief.")
    request = _request()
    session = resolve_session(request.messages, request.agent)

    completions = agent.build_request(request, session)

    assert completions.messages[0].role is ChatRole.SYSTEM
    assert completions.messages[0].content.startswith("Be brief.")
    assert all(not m.is_session_message for m in completions.messages)
    assert completions.model == "gpt-4o"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "client_model, agent_model, expected",
    [
        ("gpt-4", None, "gpt-4"),
        ("gpt-4", "gpt-3.5-turbo", "gpt-3.5-turbo"),
        (None, None, "gpt-4o"),
    ],
)
async def test_copilot_agent_model_on_the_wire(sink, client_model, agent_model, expected):
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, content=STREAM)

    client = CopilotClient(model=client_model, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    agent = CopilotChatAgent("myagent", client=client, model=agent_model)
    request = _request()

    await agent.execute("t", request, resolve_session(request.messages, request.agent), sink)

    assert bodies[0]["model"] == expected


@pytest.mark.asyncio
async def test_copilot_agent_closes_its_own_client():
    agent = CopilotChatAgent("myagent")

    await agent.aclose()

    assert agent.client._client.is_closed


@pytest.mark.asyncio
async def test_copilot_agent_leaves_injected_client_open():
    client = CopilotClient(client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))))
    agent = CopilotChatAgent("myagent", client=client)

    await agent.aclose()

    assert not client._client.is_closed
    await client.aclose()
