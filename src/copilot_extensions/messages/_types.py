"""Closed value sets used by the chat payloads.

Each enum exposes ``parse()`` which is called by the payload models at decode
time. Unlike reference types, unknown values here are rejected.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class _ClosedStrEnum(str, Enum):
    """String enum whose ``parse`` rejects anything outside the set."""

    @classmethod
    def parse(cls, value: Any):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(
                f"invalid {cls._label()}, got {value!r} (expected one of: {allowed})"
            ) from None

    @classmethod
    def _label(cls) -> str:
        return cls.__name__

    def __str__(self) -> str:
        return self.value


class ChatRole(_ClosedStrEnum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"
    TOOL = "tool"

    @classmethod
    def _label(cls) -> str:
        return "chat role"


class ConfirmationType(_ClosedStrEnum):
    """Kind of confirmation an agent asks the user for."""
    ACTION = "action"

    @classmethod
    def _label(cls) -> str:
        return "agent confirmation type"


class ClientConfirmationState(_ClosedStrEnum):
    """Answer the user gave to a confirmation."""
    ACCEPTED = "accepted"
    DISMISSED = "dismissed"

    @classmethod
    def _label(cls) -> str:
        return "client confirmation state"


class ErrorType(_ClosedStrEnum):
    """What an agent error refers to."""
    REFERENCE = "reference"
    FUNCTION = "function"
    AGENT = "agent"

    @classmethod
    def _label(cls) -> str:
        return "agent error type"


class RepoItemKind(_ClosedStrEnum):
    """Issue or pull request, addressed by its singular name."""
    ISSUE = "issue"
    PULL = "pull"

    @property
    def singular(self) -> str:
        return self.value

    @property
    def plural(self) -> str:
        return "issues" if self is RepoItemKind.ISSUE else "pulls"

    @classmethod
    def _label(cls) -> str:
        return "repo item ref type"


class ReferenceType(str, Enum):
    """Known reference discriminators. Open set: see ``decode_reference``."""
    GITHUB_REDACTED = "github.redacted"
    GITHUB_AGENT = "github.agent"
    GITHUB_CURRENT_URL = "github.current-url"
    GITHUB_FILE = "github.file"
    GITHUB_REPOSITORY = "github.repository"
    GITHUB_SNIPPET = "github.snippet"
    CLIENT_FILE = "client.file"
    CLIENT_SELECTION = "client.selection"

    def __str__(self) -> str:
        return self.value


FINISH_REASON_STOP = "stop"
FINISH_REASON_TOOL_CALLS = "tool_calls"
FINISH_REASON_FUNCTION_CALL = "function_call"
