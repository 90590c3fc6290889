"""Tests for AocClient against a mock origin."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import httpx
import pytest

from aoc.client import AocClient, day_path
from aoc.exceptions import (
    AuthError,
    NetworkError,
    NotFoundError,
    UnexpectedStatusError,
)
from aoc.models import DEFAULT_USER_AGENT, ClientConfig

from conftest import SESSION, FakeClock, Origin


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / ".aoc" / "cache"


@pytest.fixture
def client(cache_dir: Path, origin: Origin, clock: FakeClock) -> Iterator[AocClient]:
    with AocClient(
        SESSION,
        cache_dir,
        config=ClientConfig(spinner=False),
        transport=origin.transport(),
        clock=clock,
    ) as c:
        yield c


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_rejects_malformed_session(self, cache_dir: Path) -> None:
        with pytest.raises(AuthError):
            AocClient("not-a-cookie", cache_dir)

    def test_accepts_prefixed_session(self, cache_dir: Path, origin: Origin) -> None:
        with AocClient(f"session={SESSION}", cache_dir, transport=origin.transport()) as c:
            c.get_index()
        assert origin.requests[0].headers["Cookie"] == f"session={SESSION}"

    def test_creates_cache_dir(self, cache_dir: Path) -> None:
        AocClient(SESSION, cache_dir)
        assert cache_dir.is_dir()

    def test_day_path(self) -> None:
        assert day_path(2023, 5) == "/2023/day/5"


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


class TestFetch:
    def test_get_input(self, client: AocClient, origin: Origin) -> None:
        assert client.get_input(2023, 5) == "seeds: 79 14 55 13\n"
        assert origin.requests[0].url.path == "/2023/day/5/input"

    def test_get_puzzle_page(self, client: AocClient) -> None:
        assert client.get_puzzle_page(2023, 5) == "<html>day 5</html>"

    def test_get_index(self, client: AocClient) -> None:
        assert client.get_index() == "<html>index</html>"

    def test_session_and_user_agent_sent(self, client: AocClient, origin: Origin) -> None:
        client.get_index()
        sent = origin.requests[0]
        assert sent.headers["Cookie"] == f"session={SESSION}"
        assert sent.headers["User-Agent"] == DEFAULT_USER_AGENT

    def test_second_read_is_cached(self, client: AocClient, origin: Origin) -> None:
        client.get_input(2023, 5)
        client.get_input(2023, 5)
        assert origin.calls == 1

    def test_cache_file_named_after_host_and_path(
        self, client: AocClient, cache_dir: Path
    ) -> None:
        client.get_input(2023, 5)
        assert (cache_dir / "adventofcode.com_2023_day_5_input").is_file()

    def test_stream_yields_body(self, client: AocClient, origin: Origin) -> None:
        with client.stream("/2023/day/5") as response:
            body = b"".join(response.iter_bytes())
        assert body == b"<html>day 5</html>"
        client.fetch("/2023/day/5")
        assert origin.calls == 1

    def test_custom_user_agent(self, cache_dir: Path, origin: Origin) -> None:
        config = ClientConfig(user_agent="me@example.com", spinner=False)
        with AocClient(SESSION, cache_dir, config=config, transport=origin.transport()) as c:
            c.get_index()
        assert origin.requests[0].headers["User-Agent"] == "me@example.com"


# ---------------------------------------------------------------------------
# Invalidation and submission
# ---------------------------------------------------------------------------


class TestInvalidate:
    def test_invalidate_index(self, client: AocClient, origin: Origin) -> None:
        client.get_index()
        assert client.invalidate_index() is True
        client.get_index()
        assert origin.calls == 2

    def test_invalidate_uncached(self, client: AocClient) -> None:
        assert client.invalidate("/2023/day/5") is False

    def test_invalidate_day(self, client: AocClient, origin: Origin) -> None:
        client.get_puzzle_page(2023, 5)
        client.get_input(2023, 5)
        assert client.invalidate_day(2023, 5) is True
        client.get_puzzle_page(2023, 5)
        client.get_input(2023, 5)
        assert origin.calls == 3


class TestSubmit:
    def test_submit_posts_form_and_invalidates_day(
        self, client: AocClient, origin: Origin
    ) -> None:
        client.get_puzzle_page(2023, 5)

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(200, content=b"<article>That's the right answer!</article>")
            return httpx.Response(200, content=b"<html>day 5, part two</html>")

        origin.handler = handler
        reply = client.submit_answer(2023, 5, 1, "35")
        assert "right answer" in reply

        post = origin.requests[1]
        assert post.method == "POST"
        assert post.url.path == "/2023/day/5/answer"
        assert post.content == b"level=1&answer=35"
        assert post.headers["Cookie"] == f"session={SESSION}"

        assert client.get_puzzle_page(2023, 5) == "<html>day 5, part two</html>"
        assert origin.calls == 3

    def test_submit_rejected_session(self, client: AocClient, origin: Origin) -> None:
        origin.handler = lambda request: httpx.Response(400)
        with pytest.raises(UnexpectedStatusError):
            client.submit_answer(2023, 5, 1, "35")

    def test_submit_timeout_still_invalidates_day(
        self, client: AocClient, origin: Origin
    ) -> None:
        client.get_puzzle_page(2023, 5)

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, content=b"<html>day 5, part two</html>")

        origin.handler = handler
        with pytest.raises(NetworkError, match="timed out"):
            client.submit_answer(2023, 5, 1, "35")

        assert client.get_puzzle_page(2023, 5) == "<html>day 5, part two</html>"
        assert origin.calls == 3


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrors:
    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_statuses(self, client: AocClient, origin: Origin, status: int) -> None:
        origin.handler = lambda request: httpx.Response(status)
        with pytest.raises(AuthError):
            client.get_input(2023, 5)

    def test_not_found(self, client: AocClient) -> None:
        with pytest.raises(NotFoundError):
            client.get_input(2023, 26)

    def test_server_error(self, client: AocClient, origin: Origin) -> None:
        origin.handler = lambda request: httpx.Response(500)
        with pytest.raises(UnexpectedStatusError) as exc_info:
            client.get_input(2023, 5)
        assert exc_info.value.status_code == 500
        assert exc_info.value.exit_code == 5

    def test_connect_error(self, client: AocClient, origin: Origin) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        origin.handler = refuse
        with pytest.raises(NetworkError, match="connection refused"):
            client.get_input(2023, 5)

    def test_timeout(self, client: AocClient, origin: Origin) -> None:
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        origin.handler = slow
        with pytest.raises(NetworkError, match="timed out"):
            client.get_input(2023, 5)

    def test_failed_fetch_keeps_nothing(
        self, client: AocClient, origin: Origin, cache_dir: Path
    ) -> None:
        origin.handler = lambda request: httpx.Response(500)
        with pytest.raises(UnexpectedStatusError):
            client.get_input(2023, 5)
        assert list(cache_dir.iterdir()) == []
