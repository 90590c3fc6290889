"""Release schedule of the origin.

Puzzles unlock once a day at midnight in UTC-5, a fixed offset with no
daylight-saving shift. :func:`boundary_as_of` returns the most recent
unlock instant, which is the oldest modification time a cache file may
have and still be considered current.

Wall-clock time enters the cache only through a :data:`Clock` callable so
that tests can pin "now" to any instant.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

RELEASE_UTC_OFFSET = timedelta(hours=-5)
"""UTC offset of the zone whose midnight is the daily release instant."""

_DAY = timedelta(hours=24)

Clock = Callable[[], datetime]
"""A zero-argument callable returning the current instant."""


def utc_now() -> datetime:
    """Default :data:`Clock`: the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def boundary_as_of(now: datetime) -> datetime:
    """Return the latest release instant at or before *now*.

    Naive datetimes are taken to be UTC.

    Example::

        >>> boundary_as_of(datetime(2023, 12, 1, 4, 59, tzinfo=timezone.utc))
        datetime.datetime(2023, 11, 30, 5, 0, tzinfo=datetime.timezone.utc)
        >>> boundary_as_of(datetime(2023, 12, 1, 5, 0, tzinfo=timezone.utc))
        datetime.datetime(2023, 12, 1, 5, 0, tzinfo=datetime.timezone.utc)
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)

    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    # Midnight at UTC-5 is 05:00 UTC.
    candidate = day_start - RELEASE_UTC_OFFSET
    if now < candidate:
        candidate -= _DAY
    return candidate
