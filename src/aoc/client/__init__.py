"""HTTP client module for aoc.

:class:`AocClient` wraps :class:`httpx.Client` over the caching transport
from :mod:`aoc.cache`, injects the session cookie, and maps failures to
the exceptions in :mod:`aoc.exceptions`.

Example::

    from aoc.client import AocClient

    with AocClient(session, cache_dir) as client:
        text = client.get_input(2023, 1)
"""

from aoc.client.sync_client import AocClient, day_path

__all__ = ["AocClient", "day_path"]
