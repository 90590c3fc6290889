"""Flat-file storage for cached response bodies.

One file per key lives directly under the cache root. Each download is
written to a temp file of its own, ``<key>.<random>.dl``, and moved over
the canonical file with a single :func:`os.replace`. A reader of the
canonical path sees the previous complete body or the new complete body,
never a partial one.

The store takes no locks. Each download gets its own uniquely named temp
file, so two downloads of the same key never share bytes; the last
:meth:`PendingWrite.publish` wins.
"""

from __future__ import annotations

import glob
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO

from aoc.cache.clock import boundary_as_of
from aoc.exceptions import CacheMissError, StoreIOError
from aoc.models import Freshness

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".dl"
"""Suffix of in-progress downloads. Never served, never checked for freshness."""


class PendingWrite:
    """A temporary cache file that is either published or abandoned.

    Created by :meth:`CacheStore.begin_write`. Bytes go to the temp path
    through :meth:`write`; :meth:`publish` renames the file over the
    canonical path and :meth:`abandon` deletes it. Once either has run,
    further calls to both are no-ops.
    """

    def __init__(self, key: str, path: Path, temp_path: Path, file: BinaryIO) -> None:
        self.key = key
        self.path = path
        self.temp_path = temp_path
        self._file = file
        self._finished = False

    @property
    def finished(self) -> bool:
        """Whether :meth:`publish` or :meth:`abandon` has completed."""
        return self._finished

    def write(self, data: bytes) -> None:
        """Append *data* to the temp file.

        Raises:
            StoreIOError: If the write fails.
        """
        try:
            self._file.write(data)
        except (OSError, ValueError) as exc:
            raise StoreIOError(f"writing cache file {self.temp_path}: {exc}") from exc

    def close(self) -> None:
        """Flush, fsync and close the temp file. Safe to call repeatedly.

        Raises:
            StoreIOError: If the data cannot be made durable.
        """
        if self._file.closed:
            return
        try:
            try:
                self._file.flush()
                os.fsync(self._file.fileno())
            finally:
                self._file.close()
        except OSError as exc:
            raise StoreIOError(f"closing cache file {self.temp_path}: {exc}") from exc

    def publish(self) -> None:
        """Close the temp file and atomically move it to the canonical path.

        On failure the temp file is abandoned and the previous canonical
        file, if any, is left untouched.

        Raises:
            StoreIOError: If closing or renaming fails.
        """
        if self._finished:
            return
        try:
            self.close()
            os.replace(self.temp_path, self.path)
        except StoreIOError:
            self.abandon()
            raise
        except OSError as exc:
            self.abandon()
            raise StoreIOError(f"renaming cache file {self.temp_path}: {exc}") from exc
        self._finished = True
        logger.debug("Published cache entry %s", self.key)

    def abandon(self) -> None:
        """Close and delete the temp file without publishing it.

        Raises:
            StoreIOError: If the temp file cannot be removed.
        """
        if self._finished:
            return
        self._finished = True
        if not self._file.closed:
            try:
                self._file.close()
            except OSError as exc:
                logger.debug("Ignoring close error on abandoned %s: %s", self.temp_path, exc)
        try:
            self.temp_path.unlink(missing_ok=True)
        except OSError as exc:
            raise StoreIOError(f"removing cache file {self.temp_path}: {exc}") from exc
        logger.debug("Abandoned download of %s", self.key)


class CacheStore:
    """File operations for the cache directory.

    Args:
        root: Directory holding one file per cache key. Created on the
            first write if missing.

    Example::

        store = CacheStore(".aoc/cache")
        if store.freshness(key, utc_now()) is Freshness.FRESH:
            with store.open(key) as f:
                body = f.read()
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        """The cache directory."""
        return self._root

    def path_for(self, key: str) -> Path:
        """Canonical path of *key*."""
        return self._root / key

    def downloads(self, key: str) -> list[Path]:
        """Temp files of downloads of *key* that are in progress or were left behind."""
        if not self._root.is_dir():
            return []
        return sorted(self._root.glob(f"{glob.escape(key)}.*{TEMP_SUFFIX}"))

    def freshness(self, key: str, now: datetime) -> Freshness:
        """Classify the entry for *key* against the release boundary at *now*.

        Returns:
            :attr:`Freshness.ABSENT` if there is no canonical file,
            :attr:`Freshness.FRESH` if it was modified at or after
            :func:`~aoc.cache.clock.boundary_as_of` *now*, otherwise
            :attr:`Freshness.STALE`.

        Raises:
            StoreIOError: If the file exists but cannot be inspected.
        """
        try:
            stat = self.path_for(key).stat()
        except FileNotFoundError:
            return Freshness.ABSENT
        except (OSError, ValueError) as exc:
            raise StoreIOError(f"checking cache file {self.path_for(key)}: {exc}") from exc

        modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        if modified >= boundary_as_of(now):
            return Freshness.FRESH
        return Freshness.STALE

    def open(self, key: str) -> BinaryIO:
        """Open the canonical file for *key* for binary reading.

        Raises:
            CacheMissError: If the file does not exist.
            StoreIOError: For any other filesystem failure.
        """
        path = self.path_for(key)
        try:
            return open(path, "rb")
        except FileNotFoundError as exc:
            raise CacheMissError(f"No cache file for {key}") from exc
        except (OSError, ValueError) as exc:
            raise StoreIOError(f"opening cache file {path}: {exc}") from exc

    def begin_write(self, key: str) -> PendingWrite:
        """Create a new temp file ``<key>.<random>.dl`` for a download of *key*.

        Every call gets a file of its own; concurrent downloads of one key
        do not interfere.

        Raises:
            StoreIOError: If the directory or file cannot be created.
        """
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                dir=self._root, prefix=f"{key}.", suffix=TEMP_SUFFIX
            )
        except (OSError, ValueError) as exc:
            raise StoreIOError(f"creating cache file for {key!r}: {exc}") from exc
        return PendingWrite(key, self.path_for(key), Path(temp_name), os.fdopen(fd, "wb"))

    def remove(self, key: str) -> bool:
        """Delete the canonical file for *key*.

        Returns:
            ``True`` if a file was removed, ``False`` if there was none.

        Raises:
            StoreIOError: If the file exists but cannot be removed.
        """
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as exc:
            raise StoreIOError(f"removing cache file {path}: {exc}") from exc
        logger.debug("Removed cache entry %s", key)
        return True

    def clear(self) -> int:
        """Delete every entry and leftover download in the cache directory.

        Returns:
            The number of published entries removed.
        """
        if not self._root.is_dir():
            return 0
        removed = 0
        try:
            for path in self._root.iterdir():
                if not path.is_file():
                    continue
                path.unlink()
                if not path.name.endswith(TEMP_SUFFIX):
                    removed += 1
        except OSError as exc:
            raise StoreIOError(f"clearing cache directory {self._root}: {exc}") from exc
        return removed

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``directory`` (str path), ``entries`` (number of
            published files) and ``size`` (their total size in bytes).
        """
        entries = 0
        size = 0
        if self._root.is_dir():
            for path in self._root.iterdir():
                if path.is_file() and not path.name.endswith(TEMP_SUFFIX):
                    entries += 1
                    size += path.stat().st_size
        return {"directory": str(self._root), "entries": entries, "size": size}
