"""Response streams that read from, or write through to, the cache.

:class:`TeeingStream` hands each upstream chunk to the caller after
copying it into a :class:`~aoc.cache.store.PendingWrite`. The copy becomes
a cache entry only when the caller has read the body to the end and both
the upstream stream and the temp file closed cleanly::

    DOWNLOADING --close(), drained, no errors--> PUBLISHED
    DOWNLOADING --anything else------------------> ABANDONED

:class:`FileByteStream` serves a published entry back as a response body.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Iterator

import httpx

from aoc.cache.store import PendingWrite
from aoc.exceptions import StoreIOError, StreamError
from aoc.models import TeeState

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class TeeingStream(httpx.SyncByteStream):
    """Stream an upstream body to the caller and into a temp cache file.

    Args:
        upstream: The body returned by the network transport.
        pending: Temp file that receives a copy of every chunk.
    """

    def __init__(self, upstream: httpx.SyncByteStream, pending: PendingWrite) -> None:
        self._upstream = upstream
        self._pending = pending
        self._state = TeeState.DOWNLOADING
        self._drained = False
        self._failed = False

    @property
    def state(self) -> TeeState:
        """Current lifecycle state."""
        return self._state

    def __iter__(self) -> Iterator[bytes]:
        try:
            for chunk in self._upstream:
                try:
                    self._pending.write(chunk)
                except StoreIOError as exc:
                    raise StreamError(f"caching response body: {exc}") from exc
                yield chunk
        except BaseException:
            # Covers upstream errors, write errors and a caller that
            # stopped reading early (GeneratorExit).
            self._failed = True
            raise
        self._drained = True

    def close(self) -> None:
        """Close both sides, then publish or abandon the temp file.

        Raises:
            StreamError: If closing the upstream body, closing the temp
                file or removing it failed. The temp file has been abandoned.
        """
        if self._state is not TeeState.DOWNLOADING:
            return

        errors: list[Exception] = []
        try:
            self._upstream.close()
        except Exception as exc:
            errors.append(exc)
        try:
            self._pending.close()
        except Exception as exc:
            errors.append(exc)

        if errors or self._failed or not self._drained:
            self._state = TeeState.ABANDONED
            try:
                self._pending.abandon()
            except StoreIOError as exc:
                errors.append(exc)
            logger.debug(
                "Download of %s abandoned (drained=%s, failed=%s)",
                self._pending.key, self._drained, self._failed,
            )
            if errors:
                message = "; ".join(str(exc) for exc in errors)
                raise StreamError(f"closing response body: {message}") from errors[0]
            return

        try:
            self._pending.publish()
        except StoreIOError:
            self._state = TeeState.ABANDONED
            raise
        self._state = TeeState.PUBLISHED


class FileByteStream(httpx.SyncByteStream):
    """Serve an open cache file as a response body."""

    def __init__(self, file: BinaryIO, chunk_size: int = CHUNK_SIZE) -> None:
        self._file = file
        self._chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        while True:
            try:
                chunk = self._file.read(self._chunk_size)
            except OSError as exc:
                raise StreamError(f"reading cache file: {exc}") from exc
            if not chunk:
                break
            yield chunk

    def close(self) -> None:
        self._file.close()
