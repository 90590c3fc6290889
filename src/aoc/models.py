"""Pydantic models and enums shared across aoc modules.

**Configuration models** -- serialised as JSON in the project's ``.aoc``
directory: :class:`ClientConfig`.

**Cache vocabulary** -- :class:`Freshness` (the answer of
:meth:`~aoc.cache.store.CacheStore.freshness`) and :class:`TeeState` (the
lifecycle of a download being copied into the cache).
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://adventofcode.com"
DEFAULT_USER_AGENT = "github.com/tombl/aoc"


class ClientConfig(BaseModel):
    """HTTP client settings, loaded from ``.aoc/config.json`` when present.

    Example::

        ClientConfig(timeout=20, spinner=False)
    """

    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Origin that pages are fetched from"
    )
    timeout: float = Field(default=10.0, description="Request timeout in seconds")
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Fixed client identifier sent with every request",
    )
    spinner: bool = Field(
        default=True, description="Show a spinner while a download is outstanding"
    )


class Freshness(str, enum.Enum):
    """State of a cache entry relative to the latest release instant."""

    ABSENT = "absent"
    STALE = "stale"
    FRESH = "fresh"


class TeeState(str, enum.Enum):
    """Lifecycle of a body being streamed to the caller and the cache.

    ``DOWNLOADING`` moves to exactly one of the terminal states when the
    body is closed.
    """

    DOWNLOADING = "downloading"
    PUBLISHED = "published"
    ABANDONED = "abandoned"
