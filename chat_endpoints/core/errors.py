"""Endpoint errors. Configuration failures surface as pydantic's ValidationError."""

from __future__ import annotations

from pydantic import ValidationError

__all__ = ["EndpointError", "UpstreamError", "ValidationError"]


class EndpointError(Exception):
    """Base exception for chat endpoints."""


class UpstreamError(EndpointError):
    """Raised when the upstream API answers with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Failed to generate text: {body}")
        self.status_code = status_code
        self.body = body
