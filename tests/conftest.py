"""Shared test fixtures for aoc.

Provides a controllable clock, a cache store rooted in ``tmp_path``, a
counting mock origin built on :class:`httpx.MockTransport`, and helpers
for back-dating cache files. These fixtures are automatically discovered
by pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator

import httpx
import pytest

from aoc.cache import CacheStore
from aoc.output import OutputManager, reset_output, set_output


SESSION = "0123456789abcdef" * 8
"""A well-formed (fake) session cookie."""

NOW = datetime(2023, 12, 5, 12, 0, tzinfo=timezone.utc)
"""Default instant for tests: noon UTC, seven hours after that day's release."""


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> Iterator[None]:
    """Install a quiet, colourless OutputManager and reset it afterwards.

    Typer's CliRunner swaps sys.stdout/sys.stderr during a test; the
    manager caches them, so it must not outlive the test.
    """
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Clock and store
# ---------------------------------------------------------------------------


class FakeClock:
    """A :data:`~aoc.cache.clock.Clock` whose time is set by the test."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path: Path) -> CacheStore:
    return CacheStore(tmp_path / "cache")


def set_mtime(path: Path, when: datetime) -> None:
    """Back-date (or forward-date) *path* to *when*."""
    ts = when.timestamp()
    os.utime(path, (ts, ts))


def write_entry(store: CacheStore, key: str, body: bytes, modified: datetime) -> Path:
    """Create a published cache entry with a chosen modification time."""
    store.root.mkdir(parents=True, exist_ok=True)
    path = store.path_for(key)
    path.write_bytes(body)
    set_mtime(path, modified)
    return path


# ---------------------------------------------------------------------------
# Mock origin
# ---------------------------------------------------------------------------


class Origin:
    """A fake site that records every request it receives.

    Args:
        pages: Map of URL path to body. Unknown paths answer 404.
    """

    def __init__(self, pages: dict[str, bytes] | None = None) -> None:
        self.pages: dict[str, bytes] = dict(pages or {})
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = self._default_handler

    @property
    def calls(self) -> int:
        return len(self.requests)

    def transport(self) -> httpx.MockTransport:
        def _handle(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.handler(request)

        return httpx.MockTransport(_handle)

    def _default_handler(self, request: httpx.Request) -> httpx.Response:
        body = self.pages.get(request.url.path)
        if body is None:
            return httpx.Response(404, content=b"404 Not Found")
        return httpx.Response(200, content=body)


@pytest.fixture
def origin() -> Origin:
    return Origin(
        {
            "/": b"<html>index</html>",
            "/2023/day/5": b"<html>day 5</html>",
            "/2023/day/5/input": b"seeds: 79 14 55 13\n",
        }
    )


class FailingStream(httpx.SyncByteStream):
    """Yields *chunks*, then fails the way a dropped connection does."""

    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = chunks
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        yield from self._chunks
        raise httpx.ReadError("connection reset")

    def close(self) -> None:
        self.closed = True


class ChunkedStream(httpx.SyncByteStream):
    """Yields *chunks* one at a time without pre-loading them."""

    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = chunks
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        yield from self._chunks

    def close(self) -> None:
        self.closed = True
