"""Session context resolution.

Rebuilds "where is the user and who are they talking to" from the references
attached to a chat request's messages: the current github.com URL, the
issue or pull request it points at, the repository in scope and the agent.

Messages are scanned newest first. Each fact is latched by the first message
that supplies it, so the most recent source wins. Facts supplied by
independent sources are then cross-checked; a contradiction fails the whole
resolution instead of returning a partial result.

The role that carries the synthetic ``_session`` message is a single choice
made by the caller (``carrier_role``). Repository references are read from
user messages and from messages of the carrier role.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict

from copilot_extensions.exceptions import SessionValidationError
from copilot_extensions.messages._types import ChatRole, ReferenceType, RepoItemKind
from copilot_extensions.messages.chat import ChatMessage
from copilot_extensions.messages.references import (
    GitHubAgentData,
    GitHubCurrentUrlData,
    GitHubRedactedData,
    GitHubRepositoryData,
)
from copilot_extensions.messages.repo_items import (
    Issue,
    PullRequest,
    RepoItemRef,
    resolve_repo_item_ref,
)

logger = logging.getLogger(__name__)

AGENT_URL_TEMPLATE = "https://github.com/apps/{agent}"

__all__ = [
    "Issue",
    "PullRequest",
    "RepoItemRef",
    "SessionInfo",
    "get_current_url_data",
    "get_session_message",
    "resolve_repo_item_ref",
    "resolve_session",
]


class SessionInfo(BaseModel):
    """Context of a chat session. ``issue`` and ``pull_request`` are exclusive."""

    model_config = ConfigDict(frozen=True)

    url: Optional[GitHubCurrentUrlData] = None
    issue: Optional[Issue] = None
    pull_request: Optional[PullRequest] = None
    repo: Optional[GitHubRepositoryData] = None
    agent: GitHubAgentData

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def get_session_message(
    messages: Sequence[ChatMessage],
    carrier_role: ChatRole = ChatRole.USER,
) -> Optional[ChatMessage]:
    """Return the most recent ``_session`` message sent with ``carrier_role``."""
    for msg in reversed(messages):
        if msg.role == carrier_role and msg.is_session_message:
            return msg
    return None


def get_current_url_data(msg: ChatMessage) -> Optional[GitHubCurrentUrlData]:
    """Return the current-URL reference of a ``_session`` message.

    A redacted current URL is reported as absent.
    """
    if not msg.is_session_message:
        return None

    for ref in msg.references:
        data = ref.data
        if isinstance(data, GitHubCurrentUrlData):
            return data
        if isinstance(data, GitHubRedactedData) and data.type == ReferenceType.GITHUB_CURRENT_URL:
            logger.warning("Current URL reference is redacted")
            return None
    return None


def _first_data(msg: ChatMessage, data_type: type):
    for ref in msg.references:
        if isinstance(ref.data, data_type):
            return ref.data
    return None


def _check_match(field: str, first_label: str, first: str, second_label: str, second: str) -> None:
    if first and second and first.casefold() != second.casefold():
        raise SessionValidationError(
            f"session {first_label} {field} {first} does not match {second_label} {field} {second}",
            field=field,
            details={first_label: first, second_label: second},
        )


def resolve_session(
    messages: Sequence[ChatMessage],
    agent: str,
    *,
    carrier_role: ChatRole = ChatRole.USER,
) -> SessionInfo:
    """Compute the ``SessionInfo`` for a request's messages.

    Args:
        messages: Request messages, oldest first. Not modified.
        agent: The agent login the request was addressed to.
        carrier_role: Role of the synthetic ``_session`` message.

    Raises:
        SessionValidationError: the agent login, current URL, issue/pull
            request and repository reference do not agree.
    """
    carrier_role = ChatRole.parse(carrier_role)
    repo_roles = {ChatRole.USER, carrier_role}

    url: Optional[GitHubCurrentUrlData] = None
    item: Optional[RepoItemRef] = None
    repo: Optional[GitHubRepositoryData] = None
    agent_ref: Optional[GitHubAgentData] = None

    for msg in reversed(messages):
        if msg.role == carrier_role and url is None and msg.is_session_message:
            url = get_current_url_data(msg)
            if url is not None:
                item = url.repo_item or resolve_repo_item_ref(url.url)

        if msg.role in repo_roles:
            if repo is None:
                repo = _first_data(msg, GitHubRepositoryData)

        elif msg.role == ChatRole.ASSISTANT:
            if agent_ref is None:
                agent_ref = _first_data(msg, GitHubAgentData)

    if url is None:
        # not the github.com chat UI, or the current URL was redacted
        logger.debug("No session url context found")
    if item is None:
        logger.debug("No session issue or pull request context found")
    if repo is None:
        logger.debug("No session repo context found")

    if agent_ref is None:
        # no agent reference until the agent has answered once
        agent_ref = GitHubAgentData(
            login=agent,
            url=AGENT_URL_TEMPLATE.format(agent=agent),
        )

    if agent_ref.login.casefold() != (agent or "").casefold():
        raise SessionValidationError(
            f"agent login {agent} does not match session agent login {agent_ref.login}",
            field="agent",
            details={"agent": agent, "session_agent": agent_ref.login},
        )

    if url is not None:
        if item is not None:
            _check_match("owner", "url", url.owner, "item ref", item.owner)
            _check_match("repo", "url", url.repo, "item ref", item.repo)
        if repo is not None:
            _check_match("owner", "url", url.owner, "repo", repo.owner_login)
            _check_match("repo", "url", url.repo, "repo", repo.name)

    issue: Optional[Issue] = None
    pull_request: Optional[PullRequest] = None
    if item is not None:
        fields = item.model_dump()
        if item.kind is RepoItemKind.ISSUE:
            issue = Issue(**fields)
        else:
            pull_request = PullRequest(**fields)

    return SessionInfo(
        url=url,
        issue=issue,
        pull_request=pull_request,
        repo=repo,
        agent=agent_ref,
    )

