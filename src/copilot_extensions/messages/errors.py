from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, field_validator

from ._types import ErrorType


class StreamError(BaseModel):
    """An error reported to the chat UI through a ``copilot_errors`` event."""

    # reference, function or agent
    type: ErrorType = ErrorType.AGENT
    # agent-controlled code describing the nature of the error
    code: str = ""
    # message shown to the user
    message: str = ""
    # links the error to a reference or function call
    identifier: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, v: Any) -> ErrorType:
        return ErrorType.parse(v)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
