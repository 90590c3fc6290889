"""Process exit codes.

Every :class:`~aoc.exceptions.AocError` subclass carries one of these, so
a script wrapping ``aoc`` can tell a rejected session from a dead network
without reading stderr::

    $ aoc input -y 2023 -d 1
    $ echo $?
    3
"""

EXIT_SUCCESS = 0

EXIT_GENERIC_FAILURE = 1
"""Unclassified failure, including an unreadable ``.aoc/config.json``."""

EXIT_INVALID_USAGE = 2
"""Bad command-line arguments."""

EXIT_AUTH_FAILURE = 3
"""No session cookie, a malformed one, or one the site rejected (401/403)."""

EXIT_NOT_FOUND = 4
"""The site answered 404."""

EXIT_SERVER_ERROR = 5
"""The site answered with some other status than 200."""

EXIT_CONNECTION_ERROR = 6
"""Connection refused, DNS failure, or timeout."""

EXIT_CACHE_ERROR = 8
"""The cache directory could not be read or written."""

EXIT_STREAM_ERROR = 9
"""A download broke off while it was being copied into the cache."""
