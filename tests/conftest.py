"""Pytest fixtures for respmatch tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from typing import Any

import httpx
import pytest

from respmatch.config import MatchSettings
from respmatch.response import ResponseSnapshot


class FailingStream(httpx.SyncByteStream):
    """Byte stream whose first read fails like a dropped connection."""

    def __iter__(self) -> Iterator[bytes]:
        raise httpx.ReadError("connection reset by peer")


class AsyncChunkStream(httpx.AsyncByteStream):
    """Async-only byte stream; httpx refuses to read it synchronously."""

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield b"chunk"


class MockHTTPResponse:
    """Duck-typed HTTP response for testing."""

    def __init__(
        self,
        status_code: int = 200,
        content: bytes | str = b"",
        headers: dict[str, Any] | None = None,
        trailers: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.trailers = trailers or {}


def failing_reader() -> bytes:
    raise OSError("stream closed")


def unreadable_snapshot(status_code: int = 200, headers: dict[str, Any] | None = None) -> ResponseSnapshot:
    """Snapshot whose body cannot be read."""
    snapshot = ResponseSnapshot.from_content(status_code, headers=headers)
    snapshot.reader = failing_reader
    return snapshot


@pytest.fixture
def settings() -> MatchSettings:
    """Default settings, isolated from the environment."""
    return MatchSettings(_env_file=None)


@pytest.fixture
def failing_response() -> httpx.Response:
    """httpx response whose body stream raises on read."""
    return httpx.Response(200, stream=FailingStream())
