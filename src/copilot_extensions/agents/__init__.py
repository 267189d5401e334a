from .base_agent import BaseAgent
from .copilot_agent import CopilotChatAgent
from .session_agent import SessionInfoAgent

__all__ = [
    "BaseAgent",
    "CopilotChatAgent",
    "SessionInfoAgent",
]
