"""Release-aware on-disk caching for aoc.

The site changes its pages at most once a day, at a fixed release instant,
so a cached body is reused until the next release and refetched after it.
No response headers are consulted.

Public pieces:

- :func:`key_for` -- flat cache filename for a URL.
- :func:`boundary_as_of` -- most recent release instant.
- :class:`CacheStore` -- freshness checks and atomic publish on disk.
- :class:`TeeingStream` -- copies a body into the cache while it is read.
- :class:`CachingTransport` -- the :class:`httpx.BaseTransport` tying
  them together; used by :class:`~aoc.client.AocClient`.
"""

from aoc.cache.clock import boundary_as_of, utc_now
from aoc.cache.keys import key_for
from aoc.cache.store import CacheStore, PendingWrite
from aoc.cache.tee import FileByteStream, TeeingStream
from aoc.cache.transport import FROM_CACHE_EXTENSION, CachingTransport

__all__ = [
    "CacheStore",
    "CachingTransport",
    "FROM_CACHE_EXTENSION",
    "FileByteStream",
    "PendingWrite",
    "TeeingStream",
    "boundary_as_of",
    "key_for",
    "utc_now",
]
