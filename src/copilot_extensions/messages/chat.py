"""Chat request / response payloads exchanged with the Copilot platform."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ._types import FINISH_REASON_STOP, ChatRole
from .confirmation import ClientConfirmation, Confirmation
from .errors import StreamError
from .references import Reference

SESSION_MESSAGE_NAME = "_session"


# ── Request ──────────────────────────────────────────────────────────────────

class ToolFunctionCall(BaseModel):
    name: str = ""
    arguments: str = ""


class ToolCall(BaseModel):
    id: str = ""
    type: str = "function"
    function: Optional[ToolFunctionCall] = None


class ChatMessage(BaseModel):
    """Single message in a chat request."""
    role: ChatRole
    content: str = ""
    name: Optional[str] = None
    references: List[Reference] = Field(default_factory=list, alias="copilot_references")
    confirmations: List[ClientConfirmation] = Field(default_factory=list, alias="copilot_confirmations")
    function_call: Optional[ToolFunctionCall] = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None

    model_config = {"populate_by_name": True}

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, v: Any) -> ChatRole:
        return ChatRole.parse(v)

    @field_validator("content", mode="before")
    @classmethod
    def _null_content(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("references", "confirmations", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def is_session_message(self) -> bool:
        """True for the synthetic message github.com sends to carry the current URL."""
        return self.name == SESSION_MESSAGE_NAME

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChatRequest(BaseModel):
    """Body of the request the platform POSTs to the agent."""
    thread_id: str = Field(default="", alias="copilot_thread_id")
    messages: List[ChatMessage] = Field(default_factory=list)
    stop: Optional[List[str]] = None
    top_p: float = 0.0
    temperature: float = 0.0
    max_tokens: int = 0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    skills: List[str] = Field(default_factory=list, alias="copilot_skills")
    agent: str = ""

    model_config = {"populate_by_name": True}

    @field_validator("messages", "skills", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    def session_info(self, carrier_role: ChatRole = ChatRole.USER):
        """Resolve the session context of this request (see ``resolve_session``)."""
        from copilot_extensions.session import resolve_session

        return resolve_session(self.messages, self.agent, carrier_role=carrier_role)


# ── Response (chat.completion.chunk) ─────────────────────────────────────────

class ChatChoiceDeltaFunctionCall(BaseModel):
    name: str = ""
    arguments: str = ""


class ChatChoiceDelta(BaseModel):
    content: str = ""
    role: Optional[str] = None
    name: Optional[str] = None
    function_call: Optional[ChatChoiceDeltaFunctionCall] = None

    @field_validator("content", mode="before")
    @classmethod
    def _null_content(cls, v: Any) -> Any:
        return "" if v is None else v


class ChatChoice(BaseModel):
    index: int = 0
    finish_reason: Optional[str] = None
    delta: ChatChoiceDelta = Field(default_factory=ChatChoiceDelta)

    @property
    def is_stop(self) -> bool:
        return self.finish_reason == FINISH_REASON_STOP


class ChatCompletionChunk(BaseModel):
    """One streamed response chunk. Unset optional fields are not encoded."""
    id: Optional[str] = None
    created: Optional[int] = None
    object: Optional[str] = None
    model: Optional[str] = None
    system_fingerprint: Optional[str] = None
    choices: List[ChatChoice] = Field(default_factory=list)
    copilot_references: Optional[List[Reference]] = None
    copilot_confirmation: Optional[Confirmation] = None
    copilot_errors: Optional[List[StreamError]] = None

    @field_validator("choices", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
