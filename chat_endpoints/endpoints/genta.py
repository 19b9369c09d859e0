"""Genta chat-completions endpoint. The response body is a plain text stream, not SSE."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from contextlib import AsyncExitStack
from typing import Any, Literal, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from chat_endpoints.config import get_config
from chat_endpoints.config.loader import GentaSettings
from chat_endpoints.core.errors import UpstreamError
from chat_endpoints.core.types import Message, ModelDescriptor
from chat_endpoints.endpoints.base import TokenStream

logger = logging.getLogger(__name__)

ENDPOINT_TYPE = "genta"

# Models that reject a "system" message. A descriptor's supports_system_role overrides this.
SYSTEM_ROLE_UNSUPPORTED_MODELS = frozenset({"Mistral-7B-Instruct-v0.2"})

# request field -> generation setting
_SETTING_FIELDS = (
    ("temperature", "temperature"),
    ("top_p", "top_p"),
    ("max_tokens", "max_new_tokens"),
)


def _default_api_key() -> str:
    return get_config().genta.api_key


class GentaEndpointParameters(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    weight: int = Field(default=1, gt=0, strict=True)
    model: Any = None
    type: Literal["genta"]
    api_key: str = Field(default_factory=_default_api_key, alias="apiKey", strict=True)

    @field_validator("weight", mode="before")
    @classmethod
    def integral_weight(cls, value: Any) -> Any:
        # JSON numbers: 2.0 is an integer, True and "2" are not numbers
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("weight must be a number")
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


def supports_system_role(model: ModelDescriptor) -> bool:
    if model.supports_system_role is not None:
        return model.supports_system_role
    return model.name not in SYSTEM_ROLE_UNSUPPORTED_MODELS


def format_messages(
    messages: Sequence[Message | Mapping[str, Any]],
    preprompt: Optional[str],
    model: ModelDescriptor,
) -> list[dict[str, str]]:
    """Map conversation to request messages: ensure a leading system turn, then apply model limits."""
    formatted = []
    for message in messages:
        if not isinstance(message, Message):
            message = Message.model_validate(message)
        formatted.append({"role": message.from_, "content": message.content})
    if not formatted or formatted[0]["role"] != "system":
        formatted.insert(0, {"role": "system", "content": preprompt or ""})
    if not supports_system_role(model):
        formatted = [m for m in formatted if m["role"] != "system"]
    return formatted


def build_payload(
    model: ModelDescriptor,
    messages: list[dict[str, str]],
    parameters: Mapping[str, Any],
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": model.id if model.id is not None else model.name,
        "messages": messages,
        "stream": True,
    }
    for field, setting in _SETTING_FIELDS:
        value = parameters.get(setting)
        if value is not None:
            body[field] = value
    return body


class GentaEndpoint:
    """Configured Genta endpoint. Holds no per-call state; every call owns its own stream."""

    def __init__(
        self,
        params: GentaEndpointParameters,
        settings: Optional[GentaSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.params = params
        self._settings = settings or get_config().genta
        self._transport = transport

    @property
    def weight(self) -> int:
        return self.params.weight

    async def __call__(
        self,
        *,
        messages: Sequence[Message | Mapping[str, Any]],
        preprompt: Optional[str] = None,
        generate_settings: Optional[Mapping[str, Any]] = None,
    ) -> TokenStream:
        model = ModelDescriptor.coerce(self.params.model)
        formatted = format_messages(messages, preprompt, model)
        parameters = {**model.parameters, **(generate_settings or {})}

        logger.debug("Messages:")
        for message in formatted:
            logger.debug("%s: %s", message["role"], message["content"])

        body = build_payload(model, formatted, parameters)
        # Upstream expects the raw key, without a "Bearer " prefix
        headers = {
            "Authorization": self.params.api_key,
            "Content-Type": "application/json",
        }
        logger.info("genta request: model=%s messages=%d", body["model"], len(formatted))

        stack = AsyncExitStack()
        try:
            client = await stack.enter_async_context(
                httpx.AsyncClient(
                    timeout=httpx.Timeout(self._settings.timeout),
                    follow_redirects=True,
                    transport=self._transport,
                )
            )
            resp = await stack.enter_async_context(
                client.stream("POST", self._settings.url, json=body, headers=headers)
            )
            if not resp.is_success:
                await resp.aread()
                logger.warning("genta request failed: status=%s", resp.status_code)
                raise UpstreamError(resp.status_code, resp.text)
        except BaseException:
            await stack.aclose()
            raise
        return TokenStream(resp.aiter_text(), stack)


def endpoint_genta(
    params: Mapping[str, Any] | GentaEndpointParameters,
    *,
    settings: Optional[GentaSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> GentaEndpoint:
    """Validate parameters and return the endpoint. Raises pydantic.ValidationError on bad input."""
    if not isinstance(params, GentaEndpointParameters):
        params = GentaEndpointParameters.model_validate(params)
    return GentaEndpoint(params, settings=settings, transport=transport)
