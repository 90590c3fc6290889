"""Synchronous client for the puzzle site.

This module provides :class:`AocClient`, the blocking client used by the
aoc CLI commands. It wraps :class:`httpx.Client` and layers on:

- **Session injection** -- the session cookie and a fixed ``User-Agent``
  are sent with every request, cached or not.
- **Release-aware caching** -- ``GET`` bodies go through
  :class:`~aoc.cache.transport.CachingTransport`, so a page is fetched at
  most once per daily release.
- **Error mapping** -- transport failures become
  :class:`~aoc.exceptions.NetworkError`; non-200 answers become
  :class:`~aoc.exceptions.AuthError`,
  :class:`~aoc.exceptions.NotFoundError` or
  :class:`~aoc.exceptions.UnexpectedStatusError`.

The client never retries. Every failure is returned to the caller, and a
failed fetch leaves any earlier cached copy in place.
"""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Iterator, Optional

import httpx

from aoc.cache import CacheStore, CachingTransport
from aoc.cache.clock import Clock, utc_now
from aoc.cache.transport import FROM_CACHE_EXTENSION, Progress
from aoc.config import validate_session
from aoc.exceptions import (
    AuthError,
    NetworkError,
    NotFoundError,
    StoreIOError,
    UnexpectedStatusError,
)
from aoc.models import ClientConfig
from aoc.output import get_output


class AocClient:
    """Synchronous HTTP client for the puzzle site.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        session_cookie: Value of the site's ``session`` cookie, with or
            without a ``session=`` prefix.
        cache_dir: Directory for cached page bodies.
        config: Base URL, timeout, user agent, and spinner settings.
        transport: Network transport handed to the caching layer.
            Defaults to :class:`httpx.HTTPTransport`.
        clock: Source of "now" for cache freshness.
        progress: Progress indicator factory. Defaults to a Rich spinner
            when ``config.spinner`` is set.

    Raises:
        AuthError: If *session_cookie* is malformed.
        StoreIOError: If *cache_dir* cannot be created.

    Example::

        with AocClient(session, ".aoc/cache") as client:
            puzzle_input = client.get_input(2023, 1)
    """

    def __init__(
        self,
        session_cookie: str,
        cache_dir: str | Path,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Clock = utc_now,
        progress: Optional[Progress] = None,
    ) -> None:
        self._session = validate_session(session_cookie)
        self._config = config or ClientConfig()
        cache_dir = Path(cache_dir)
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreIOError(f"creating cache directory {cache_dir}: {exc}") from exc

        if progress is None and self._config.spinner:
            progress = _spinner
        self._transport = CachingTransport(
            CacheStore(cache_dir),
            transport=transport,
            clock=clock,
            progress=progress,
        )
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> AocClient:
        self._client = httpx.Client(
            base_url=self._config.base_url,
            transport=self._transport,
            timeout=self._config.timeout,
            headers={
                "User-Agent": self._config.user_agent,
                "Cookie": f"session={self._session}",
            },
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    @property
    def transport(self) -> CachingTransport:
        """The caching transport (exposes the store and ``invalidate``)."""
        return self._transport

    # ------------------------------------------------------------------ #
    # Fetching
    # ------------------------------------------------------------------ #

    @contextlib.contextmanager
    def stream(self, path: str) -> Iterator[httpx.Response]:
        """Open *path* for streaming.

        The body is cached only once it has been read to the end and the
        ``with`` block exits normally.

        Raises:
            NetworkError: On connection or timeout failures.
            AuthError: If the site rejects the session (401/403).
            NotFoundError: On 404.
            UnexpectedStatusError: On any other non-200 status.
        """
        client = self._require_client()
        with self._map_errors(path):
            with client.stream("GET", path) as response:
                if response.extensions.get(FROM_CACHE_EXTENSION):
                    get_output().debug(f"Cache hit: {path}")
                yield response

    def fetch(self, path: str) -> bytes:
        """Return the body of *path*, from cache when fresh."""
        client = self._require_client()
        with self._map_errors(path):
            response = client.get(path)
        if response.extensions.get(FROM_CACHE_EXTENSION):
            get_output().debug(f"Cache hit: {path}")
        return response.content

    def get_text(self, path: str) -> str:
        """Return the body of *path* decoded as UTF-8."""
        return self.fetch(path).decode("utf-8")

    def get_index(self) -> str:
        """Return the raw HTML of the site's front page."""
        return self.get_text("/")

    def get_puzzle_page(self, year: int, day: int) -> str:
        """Return the raw HTML of a day's puzzle description."""
        return self.get_text(day_path(year, day))

    def get_input(self, year: int, day: int) -> str:
        """Return the user's puzzle input for a day."""
        return self.get_text(f"{day_path(year, day)}/input")

    # ------------------------------------------------------------------ #
    # Invalidation
    # ------------------------------------------------------------------ #

    def invalidate(self, path: str) -> bool:
        """Drop the cached copy of *path*.

        Returns:
            ``True`` if a cached copy existed.
        """
        url = self._require_client().build_request("GET", path).url
        removed = self._transport.invalidate(url)
        get_output().debug(f"Invalidated {path} ({'removed' if removed else 'not cached'})")
        return removed

    def invalidate_index(self) -> bool:
        """Drop the cached front page (which shows the logged-in user)."""
        return self.invalidate("/")

    def invalidate_day(self, year: int, day: int) -> bool:
        """Drop the cached puzzle page of a day."""
        return self.invalidate(day_path(year, day))

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    def submit_answer(self, year: int, day: int, part: int, answer: str) -> str:
        """Submit *answer* for one part of a day's puzzle.

        The form post bypasses the cache. Afterwards the day's puzzle page
        is invalidated, since a correct answer unlocks new content there.

        Returns:
            The raw HTML of the site's reply.
        """
        client = self._require_client()
        path = f"{day_path(year, day)}/answer"
        try:
            with self._map_errors(path):
                response = client.post(path, data={"level": str(part), "answer": answer})
        finally:
            # A post that timed out may still have been accepted.
            self.invalidate_day(year, day)
        self._map_response_error(response, path)
        return response.text

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _require_client(self) -> httpx.Client:
        assert self._client is not None, "Client not initialised -- use as context manager"
        return self._client

    @contextlib.contextmanager
    def _map_errors(self, path: str) -> Iterator[None]:
        """Translate httpx and status failures into aoc exceptions."""
        try:
            yield
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request for {path} timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Request for {path} failed: {exc}") from exc
        except UnexpectedStatusError as exc:
            if exc.response is not None:
                self._map_response_error(exc.response, path)
            raise

    def _map_response_error(self, response: httpx.Response, path: str) -> None:
        """Raise a typed exception for a non-200 response."""
        status = response.status_code
        if status == httpx.codes.OK:
            return
        msg = f"HTTP {status} for {path}"
        if status in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
            raise AuthError(f"{msg}: session cookie rejected")
        if status == httpx.codes.NOT_FOUND:
            raise NotFoundError(msg)
        raise UnexpectedStatusError(msg, response=response)


def day_path(year: int, day: int) -> str:
    """URL path of a day's puzzle page."""
    return f"/{year}/day/{day}"


def _spinner(request: httpx.Request) -> contextlib.AbstractContextManager[object]:
    return get_output().status(f"Requesting {request.url}")
