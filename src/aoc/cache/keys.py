"""Cache key derivation.

A key is the request's host and path flattened into a single filename, so
the cache directory never needs subdirectories::

    https://adventofcode.com/2023/day/1/input  ->  adventofcode.com_2023_day_1_input
"""

from __future__ import annotations

from urllib.parse import unquote, urlsplit

import httpx

INDEX_KEY = "index.html"
"""Key used when host and path are both empty."""

_SEPARATOR = "/"
_FILLER = "_"


def key_for(url: httpx.URL | str) -> str:
    """Return the cache key for *url*.

    Query strings and fragments are ignored; the origin addresses every
    cacheable page by path alone.

    Args:
        url: The request target.

    Returns:
        A flat filename. A decoded NUL byte is kept; the store rejects
        such keys with StoreIOError.
    """
    url = httpx.URL(url)
    # httpx reports an empty path as "/", so read the path as written.
    path = unquote(urlsplit(str(url)).path)
    name = (url.host + path).replace(_SEPARATOR, _FILLER)
    return name or INDEX_KEY
