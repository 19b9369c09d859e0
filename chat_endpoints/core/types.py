"""Conversation, model and token payloads shared by all endpoints. All are Pydantic models."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """One conversation turn as the chat application stores it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: Role = Field(alias="from", description="Speaker role")
    content: str = ""


class ModelDescriptor(BaseModel):
    """What an endpoint needs to know about the configured model."""

    model_config = ConfigDict(extra="allow")

    name: str
    id: Optional[str] = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    supports_system_role: Optional[bool] = Field(
        default=None, description="None: decided by the known-model table"
    )

    @classmethod
    def coerce(cls, model: Any) -> "ModelDescriptor":
        """Read a descriptor from a ModelDescriptor, a mapping or any object with the same attributes."""
        if isinstance(model, cls):
            return model
        if isinstance(model, Mapping):
            data = dict(model)
        else:
            data = {
                key: getattr(model, key)
                for key in ("name", "id", "parameters", "supports_system_role")
                if getattr(model, key, None) is not None
            }
        if data.get("parameters") is None:
            data.pop("parameters", None)
        return cls.model_validate(data)


class Token(BaseModel):
    id: int
    text: str = ""
    logprobs: float = 0
    special: bool = False


class TokenEvent(BaseModel):
    """One step of a streamed generation. The last event of a stream has token.special=True."""

    token: Token
    generated_text: Optional[str] = None
    details: Optional[dict[str, Any]] = None

    @property
    def is_terminal(self) -> bool:
        return self.token.special
