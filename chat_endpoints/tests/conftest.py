"""Pytest fixtures and config."""

import json

import httpx
import pytest


@pytest.fixture(autouse=True)
def env_cleanup(monkeypatch):
    """Avoid picking up a real key or upstream from the environment in tests."""
    for name in ("GENTA_API_KEY", "GENTA_URL", "GENTA_TIMEOUT", "GENTA_MODEL", "LOG_LEVEL", "LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("CHAT_ENDPOINTS_ENV_PREFIX", raising=False)
    yield


class ChunkStream(httpx.AsyncByteStream):
    """Response body delivered in fixed chunks; records whether it was closed."""

    def __init__(self, chunks, fail_after=None):
        self.chunks = list(chunks)
        self.fail_after = fail_after
        self.closed = False

    async def __aiter__(self):
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise httpx.ReadError("connection dropped")
            yield chunk

    async def aclose(self):
        self.closed = True


class FakeUpstream:
    """MockTransport handler that records requests and replies with a chunked body."""

    def __init__(self, chunks=(), status_code=200, body=None, fail_after=None):
        self.requests = []
        self.status_code = status_code
        self.body = body
        self.stream = ChunkStream(chunks, fail_after=fail_after)

    def __call__(self, request):
        self.requests.append(request)
        if self.body is not None:
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, stream=self.stream)

    @property
    def payload(self):
        return json.loads(self.requests[-1].content)

    @property
    def transport(self):
        return httpx.MockTransport(self)


@pytest.fixture
def upstream_factory():
    return FakeUpstream
