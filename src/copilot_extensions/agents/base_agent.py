"""Base agent contract.

The ``/agent`` route calls ``execute()`` once per verified request. Everything
an agent needs is passed in explicitly:
  - token   → the user's GitHub token (``X-GitHub-Token``), valid briefly,
              with the union of the user's and the app's permissions
  - request → the parsed chat request
  - session → the resolved session context
  - sink    → where the response is streamed; it exposes ``headers`` that
              may be changed until the first write
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from copilot_extensions.messages.chat import ChatRequest
from copilot_extensions.session import SessionInfo
from copilot_extensions.sse.writer import Sink


class BaseAgent(ABC):
    """Abstract base for agent implementations."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description

    @abstractmethod
    async def execute(
        self,
        token: str,
        request: ChatRequest,
        session: SessionInfo,
        sink: Sink,
    ) -> None:
        """Write the response to ``sink``. Must end with ``write_stop``."""
        ...

    async def aclose(self) -> None:
        """Release resources held by the agent. Called on app shutdown."""
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name!r})>"
