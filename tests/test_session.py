"""Tests for session context resolution."""
from __future__ import annotations

import logging

import pytest
from conftest import agent_ref, current_url_ref, message, ref, repository_ref, session_message

from copilot_extensions.exceptions import SessionValidationError
from copilot_extensions.messages import ChatRequest, ChatRole
from copilot_extensions.session import (
    Issue,
    PullRequest,
    get_current_url_data,
    get_session_message,
    resolve_session,
)


def test_issue_from_current_url():
    messages = [
        message("user", content="hello"),
        session_message(current_url_ref("https://github.com/acme/widgets/issues/42#comment-1")),
        message("user", content="what is this issue about?"),
    ]

    session = resolve_session(messages, "myagent")

    assert isinstance(session.issue, Issue)
    assert (session.issue.owner, session.issue.repo, session.issue.number) == ("acme", "widgets", 42)
    assert session.issue.hash == "comment-1"
    assert session.pull_request is None
    assert session.url.owner == "acme"


def test_pull_request_from_current_url():
    messages = [session_message(current_url_ref("https://github.com/acme/widgets/pull/8/checks"))]

    session = resolve_session(messages, "myagent")

    assert isinstance(session.pull_request, PullRequest)
    assert session.pull_request.page == "checks"
    assert session.issue is None


def test_repository_and_url_must_agree():
    messages = [
        message("user", repository_ref("acme", "widgets")),
        session_message(current_url_ref("https://github.com/ACME/other")),
    ]

    with pytest.raises(SessionValidationError) as exc_info:
        resolve_session(messages, "myagent")

    assert exc_info.value.field == "repo"


def test_owner_comparison_ignores_case():
    messages = [
        message("user", repository_ref("acme", "Widgets")),
        session_message(current_url_ref("https://github.com/ACME/widgets/issues/1")),
    ]

    session = resolve_session(messages, "myagent")

    assert session.repo.name == "Widgets"
    assert session.issue.number == 1


def test_owner_mismatch():
    messages = [
        message("user", repository_ref("globex", "widgets")),
        session_message(current_url_ref("https://github.com/acme/widgets")),
    ]

    with pytest.raises(SessionValidationError) as exc_info:
        resolve_session(messages, "myagent")

    assert exc_info.value.field == "owner"


def test_agent_is_synthesized_when_missing():
    session = resolve_session([message("user", content="hi")], "myagent")

    assert session.agent.login == "myagent"
    assert session.agent.url == "https://github.com/apps/myagent"
    assert session.url is None
    assert session.repo is None
    assert session.issue is None


def test_agent_from_assistant_message():
    messages = [
        message("user", content="hi"),
        message("assistant", agent_ref("MyAgent"), content="hello"),
        message("user", content="again"),
    ]

    session = resolve_session(messages, "myagent")

    assert session.agent.login == "MyAgent"
    assert session.agent.id == 99


def test_agent_mismatch():
    messages = [message("assistant", agent_ref("someone-else"))]

    with pytest.raises(SessionValidationError) as exc_info:
        resolve_session(messages, "myagent")

    assert exc_info.value.field == "agent"


def test_most_recent_session_message_wins():
    messages = [
        session_message(current_url_ref("https://github.com/acme/widgets/issues/1")),
        message("assistant", content="..."),
        session_message(current_url_ref("https://github.com/acme/widgets/pull/2")),
    ]

    session = resolve_session(messages, "myagent")

    assert session.pull_request.number == 2
    assert session.issue is None


def test_most_recent_repository_wins():
    messages = [
        message("user", repository_ref("acme", "old")),
        message("user", repository_ref("acme", "new")),
    ]

    assert resolve_session(messages, "myagent").repo.name == "new"


def test_redacted_url_is_absent(caplog):
    redacted = ref("github.redacted", {"type": "github.current-url"})
    messages = [session_message(redacted)]

    with caplog.at_level(logging.WARNING, logger="copilot_extensions.session"):
        session = resolve_session(messages, "myagent")

    assert session.url is None
    assert "redacted" in caplog.text


def test_redacted_url_falls_back_to_older_session_message():
    messages = [
        session_message(current_url_ref("https://github.com/acme/widgets/issues/5")),
        session_message(ref("github.redacted", {"type": "github.current-url"})),
    ]

    session = resolve_session(messages, "myagent")

    assert session.issue.number == 5


def test_url_only_read_from_session_messages():
    messages = [message("user", current_url_ref("https://github.com/acme/widgets/issues/5"))]

    assert resolve_session(messages, "myagent").url is None


def test_system_messages_ignored_by_default():
    messages = [
        session_message(current_url_ref("https://github.com/acme/widgets"), role="system"),
        message("system", repository_ref("acme", "widgets")),
    ]

    session = resolve_session(messages, "myagent")

    assert session.url is None
    assert session.repo is None


def test_system_carrier_role():
    messages = [
        message("system", repository_ref("acme", "widgets")),
        session_message(current_url_ref("https://github.com/acme/widgets/issues/9"), role="system"),
    ]

    session = resolve_session(messages, "myagent", carrier_role=ChatRole.SYSTEM)

    assert session.issue.number == 9
    assert session.repo.owner_login == "acme"


def test_messages_are_not_modified():
    messages = [
        message("user", repository_ref("acme", "widgets")),
        session_message(current_url_ref("https://github.com/acme/widgets/issues/1")),
    ]
    before = [m.model_dump() for m in messages]

    resolve_session(messages, "myagent")

    assert [m.model_dump() for m in messages] == before


def test_chat_request_session_info():
    request = ChatRequest(
        agent="myagent",
        messages=[session_message(current_url_ref("https://github.com/acme/widgets/issues/3"))],
    )

    assert request.session_info().issue.number == 3


def test_get_session_message_and_url():
    older = session_message(current_url_ref("https://github.com/acme/a"))
    newer = session_message(current_url_ref("https://github.com/acme/b"))
    messages = [older, message("user", content="x"), newer]

    assert get_session_message(messages) is newer
    assert get_session_message(messages, ChatRole.SYSTEM) is None
    assert get_current_url_data(newer).repo == "b"
    assert get_current_url_data(message("user", current_url_ref("https://github.com/acme/a"))) is None
