"""aoc -- a command-line client for Advent of Code with a release-aware page cache.

Pages and puzzle inputs only change once a day, at the puzzle release
instant, so aoc keeps every body it downloads in ``.aoc/cache/`` and serves
it from disk until the next release. Downloads are streamed to the caller
and to the cache at the same time, and a cache file only appears once the
whole body has arrived.

Typical workflow::

    aoc login                     # store the session cookie
    aoc input -y 2023 -d 1 | ./solve
    aoc submit -y 2023 -d 1 -p 1 42

Modules:
    app: Typer application and CLI entry point.
    cache: Release-aware caching transport for httpx.
    client: :class:`~aoc.client.AocClient`, the site client.
    config: ``.aoc`` directory discovery and session handling.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr output system with Rich support.
"""

__version__ = "0.1.0"
