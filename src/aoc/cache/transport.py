"""httpx transport that serves ``GET`` bodies from the release-aware cache.

:class:`CachingTransport` sits between :class:`httpx.Client` and the real
network transport. For each ``GET`` it captures "now" once from the
injected clock and asks the :class:`~aoc.cache.store.CacheStore` whether
the entry is fresh:

- **Fresh** -- the cached file is returned as a ``200`` body. No network.
- **Absent / stale** -- the request goes to the delegate transport. A
  ``200`` body is wrapped in a :class:`~aoc.cache.tee.TeeingStream` so the
  cache is filled while the caller reads. Any other status raises
  :class:`~aoc.exceptions.UnexpectedStatusError` and nothing is cached.

Every other method bypasses the cache in both directions. Transport
errors from the delegate (including timeouts) propagate unchanged and
leave the cache as it was.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Callable, ContextManager, Optional

import httpx

from aoc.cache.clock import Clock, utc_now
from aoc.cache.keys import key_for
from aoc.cache.store import CacheStore
from aoc.cache.tee import FileByteStream, TeeingStream
from aoc.exceptions import CacheMissError, UnexpectedStatusError
from aoc.models import Freshness

logger = logging.getLogger(__name__)

CACHEABLE_METHOD = "GET"

FROM_CACHE_EXTENSION = "from_cache"
"""Key in :attr:`httpx.Response.extensions`; ``True`` when the body came from disk."""

Progress = Callable[[httpx.Request], ContextManager[object]]
"""Factory for a context manager that is active while the delegate call runs."""


def _no_progress(request: httpx.Request) -> ContextManager[object]:
    return contextlib.nullcontext()


class CachingTransport(httpx.BaseTransport):
    """Release-aware caching wrapper around another httpx transport.

    Args:
        store: Where bodies are cached.
        transport: The network transport. Defaults to
            :class:`httpx.HTTPTransport`.
        clock: Source of "now" for freshness decisions.
        progress: Optional factory for a cosmetic progress indicator shown
            while a network fetch is outstanding.

    Example::

        transport = CachingTransport(CacheStore(".aoc/cache"))
        with httpx.Client(transport=transport, base_url="https://adventofcode.com") as client:
            body = client.get("/2023/day/1/input").content
    """

    def __init__(
        self,
        store: CacheStore,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Clock = utc_now,
        progress: Optional[Progress] = None,
    ) -> None:
        self._store = store
        self._transport = transport or httpx.HTTPTransport()
        self._clock = clock
        self._progress = progress or _no_progress

    @property
    def store(self) -> CacheStore:
        """The underlying cache store."""
        return self._store

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        if request.method.upper() != CACHEABLE_METHOD:
            return self._transport.handle_request(request)

        key = key_for(request.url)
        now = self._clock()
        freshness = self._store.freshness(key, now)

        if freshness is Freshness.FRESH:
            try:
                file = self._store.open(key)
            except CacheMissError:
                # Removed between the freshness check and the open.
                logger.debug("Cache entry %s vanished, fetching", key)
            else:
                logger.debug("Cache hit: %s", key)
                return httpx.Response(
                    200,
                    stream=FileByteStream(file),
                    request=request,
                    extensions={FROM_CACHE_EXTENSION: True},
                )

        logger.debug("Cache %s: %s", freshness.value, key)
        # Bytes on the wire must equal the body that is replayed later.
        request.headers["Accept-Encoding"] = "identity"
        with self._progress(request):
            response = self._transport.handle_request(request)

        if response.status_code != httpx.codes.OK:
            response.request = request
            try:
                response.read()
            finally:
                response.close()
            raise UnexpectedStatusError(
                f"unexpected status code: {response.status_code}", response=response
            )

        encoding = response.headers.get("Content-Encoding", "identity").lower()
        if encoding != "identity":
            logger.debug("Not caching %s: body is %s-encoded", key, encoding)
            return response

        assert isinstance(response.stream, httpx.SyncByteStream)
        try:
            pending = self._store.begin_write(key)
        except BaseException:
            response.close()
            raise
        return httpx.Response(
            response.status_code,
            headers=response.headers,
            stream=TeeingStream(response.stream, pending),
            request=request,
            extensions={**response.extensions, FROM_CACHE_EXTENSION: False},
        )

    def invalidate(self, url: httpx.URL | str) -> bool:
        """Drop the cache entry for *url* so the next ``GET`` hits the network.

        Returns:
            ``True`` if an entry was removed.
        """
        return self._store.remove(key_for(url))

    def close(self) -> None:
        self._transport.close()
