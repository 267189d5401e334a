from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, field_validator

from ._types import ClientConfirmationState, ConfirmationType


class Confirmation(BaseModel):
    """A request, sent by the agent, for the user to approve an action.

    ``confirmation`` is opaque to the platform and is echoed back on the
    matching ``ClientConfirmation``.
    """
    type: ConfirmationType = ConfirmationType.ACTION
    title: str = ""
    message: str = ""
    confirmation: Any = None

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, v: Any) -> ConfirmationType:
        return ConfirmationType.parse(v)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class ClientConfirmation(BaseModel):
    """The user's answer to a ``Confirmation``."""
    state: ClientConfirmationState
    confirmation: Any = None

    @field_validator("state", mode="before")
    @classmethod
    def _parse_state(cls, v: Any) -> ClientConfirmationState:
        return ClientConfirmationState.parse(v)

    @property
    def accepted(self) -> bool:
        return self.state is ClientConfirmationState.ACCEPTED
