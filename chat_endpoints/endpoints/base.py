"""Streaming contract for chat endpoints.

Every endpoint is an async callable taking the conversation and returning a
TokenStream: an async iterator of TokenEvent that ends with exactly one
terminal event (token.special=True, generated_text=None).

The stream owns the HTTP response it reads from. It is released when the
stream is exhausted (the read after the terminal event), when reading fails
(including cancellation) and when an ``async with`` block around the stream
exits.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import AsyncExitStack
from typing import Any, Optional, Protocol, runtime_checkable

from chat_endpoints.core.types import Message, Token, TokenEvent

logger = logging.getLogger(__name__)


class TokenStream:
    """Turns text chunks into token events. Chunk boundaries are whatever the transport delivers."""

    def __init__(self, chunks: AsyncIterator[str], stack: Optional[AsyncExitStack] = None) -> None:
        self._chunks = chunks
        self._stack = stack or AsyncExitStack()
        self._token_id = 0
        self._generated_text = ""
        self._finished = False
        self._closed = False

    def __aiter__(self) -> "TokenStream":
        return self

    async def __anext__(self) -> TokenEvent:
        if self._finished:
            # the terminal event is already out; release before reporting exhaustion
            await self.aclose()
            raise StopAsyncIteration
        try:
            text = await self._chunks.__anext__()
        except StopAsyncIteration:
            self._finished = True
            return self._event("", special=True, generated_text=None)
        except BaseException:
            self._finished = True
            await self.aclose()
            raise
        self._generated_text += text
        return self._event(text, special=False, generated_text=self._generated_text)

    def _event(self, text: str, *, special: bool, generated_text: Optional[str]) -> TokenEvent:
        token = Token(id=self._token_id, text=text, logprobs=0, special=special)
        self._token_id += 1
        return TokenEvent(token=token, generated_text=generated_text, details=None)

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Release the underlying reader. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._finished = True
        close_chunks = getattr(self._chunks, "aclose", None)
        try:
            if close_chunks is not None:
                await close_chunks()
        finally:
            await self._stack.aclose()
        logger.debug("token stream closed after %d events", self._token_id)

    async def __aenter__(self) -> "TokenStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def collect(self) -> str:
        """Drain the stream and return the generated text."""
        parts: list[str] = []
        async for event in self:
            if not event.token.special:
                parts.append(event.token.text)
        return "".join(parts)


@runtime_checkable
class Endpoint(Protocol):
    """A configured endpoint. weight lets the caller choose between several endpoints."""

    weight: int

    async def __call__(
        self,
        *,
        messages: Sequence[Message | Mapping[str, Any]],
        preprompt: Optional[str] = None,
        generate_settings: Optional[Mapping[str, Any]] = None,
    ) -> TokenStream:
        ...
