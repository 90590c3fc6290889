"""Exception hierarchy for aoc.

All exceptions inherit from :class:`AocError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`aoc.exit_codes`.
The top-level error handler in :func:`aoc.app.main` catches ``AocError``
and exits with the appropriate code, while unexpected exceptions produce a
crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    AocError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- AuthError              (exit 3)
    +-- NotFoundError          (exit 4)
    |   +-- CacheMissError     (exit 4)
    +-- UnexpectedStatusError  (exit 5)
    +-- NetworkError           (exit 6)
    +-- StoreIOError           (exit 8)
    +-- StreamError            (exit 9)
    +-- ConfigError            (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from aoc.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CACHE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
    EXIT_STREAM_ERROR,
)

if TYPE_CHECKING:
    import httpx


class AocError(Exception):
    """Base exception for all aoc errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`aoc.exit_codes`. The entry point catches this
    exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(AocError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(AocError):
    """Raised when the session cookie is malformed or rejected by the site."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(AocError):
    """Raised when the site returns HTTP 404 for a page."""

    exit_code = EXIT_NOT_FOUND


class CacheMissError(NotFoundError):
    """Raised when a cache file is absent at its canonical path.

    The caching transport treats this as a cue to go to the network; it
    only escapes to callers that use :class:`~aoc.cache.store.CacheStore`
    directly.
    """


class UnexpectedStatusError(AocError):
    """Raised when the origin answers a cacheable request with a non-200 status.

    The response (with its body already read) is attached so callers can
    inspect it. Nothing is written to the cache.

    Args:
        message: Human-readable error description.
        response: The uncached :class:`httpx.Response`.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, message: str, response: Optional[httpx.Response] = None):
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> Optional[int]:
        """The HTTP status of the attached response, if any."""
        return self.response.status_code if self.response is not None else None


class NetworkError(AocError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class StoreIOError(AocError):
    """Raised for cache filesystem failures other than a missing file."""

    exit_code = EXIT_CACHE_ERROR


class StreamError(AocError):
    """Raised when copying a response body into the cache fails part-way.

    Seen by the caller as a read (or close) error on the response body. The
    temporary download file is always abandoned when this is raised.
    """

    exit_code = EXIT_STREAM_ERROR


class ConfigError(AocError):
    """Raised for configuration problems (unreadable session file, invalid config JSON)."""

    exit_code = EXIT_GENERIC_FAILURE
