"""Project directory discovery, session handling, and atomic writes.

aoc keeps its state in a ``.aoc`` directory next to the user's solutions,
found by walking up from the working directory the way ``git`` finds
``.git``:

* ``.aoc/session`` -- the site's session cookie (mode ``0600``).
* ``.aoc/config.json`` -- optional :class:`~aoc.models.ClientConfig`.
* ``.aoc/cache/`` -- cached page bodies, see :mod:`aoc.cache`.

A ``.gitignore`` containing ``*`` is written into a freshly created
``.aoc`` so the cookie and the personal puzzle inputs are never committed.

Session precedence (high to low): ``--session`` flag, ``AOC_SESSION``
environment variable, ``.aoc/session`` file.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import contextlib
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from aoc.exceptions import AuthError, ConfigError
from aoc.models import ClientConfig

AOC_DIRNAME = ".aoc"
SESSION_FILENAME = "session"
CONFIG_FILENAME = "config.json"
CACHE_DIRNAME = "cache"
SESSION_ENV_VAR = "AOC_SESSION"

SESSION_COOKIE_RE = re.compile(r"^(session=)?[0-9a-f]{128}$")

_GITIGNORE = """\
# This folder contains your session cookie,
# as well as your own non-redistributable puzzle inputs.
*
"""


# --- Directory discovery ---


def find_up(start: Path, name: str) -> Optional[Path]:
    """Return the first ``<dir>/<name>`` that exists, from *start* upward.

    Args:
        start: Directory to begin the search in.
        name: Entry to look for in each directory.

    Returns:
        The path of the entry, or ``None`` if no ancestor contains it.
    """
    path = start.resolve()
    while True:
        candidate = path / name
        if candidate.exists():
            return candidate
        if path.parent == path:
            return None
        path = path.parent


def ensure_aoc_dir(cwd: Optional[Path] = None) -> Path:
    """Return the project's ``.aoc`` directory, creating it in *cwd* if absent.

    Args:
        cwd: Where to start searching. Defaults to the working directory.

    Raises:
        ConfigError: If the directory cannot be created.
    """
    cwd = cwd or Path.cwd()
    found = find_up(cwd, AOC_DIRNAME)
    if found is not None:
        return found

    path = cwd / AOC_DIRNAME
    try:
        path.mkdir(parents=True, exist_ok=True)
        _atomic_write(path / ".gitignore", _GITIGNORE)
    except OSError as exc:
        raise ConfigError(f"Cannot create {path}: {exc}") from exc
    return path


def get_cache_dir(aoc_dir: Path) -> Path:
    """Return the cache directory inside *aoc_dir*, creating it if necessary."""
    path = aoc_dir / CACHE_DIRNAME
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"creating cache directory {path}: {exc}") from exc
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Replace *path* with *data* in one rename.

    The temp file lives next to *path* so :func:`os.replace` stays on one
    filesystem. It is removed again if anything fails before the rename.
    *mode* is applied before any data is written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            if mode is not None:
                os.fchmod(f.fileno(), mode)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


# --- Session cookie ---


def validate_session(value: str) -> str:
    """Check *value* looks like a session cookie and strip any ``session=`` prefix.

    Raises:
        AuthError: If the value is not 128 lowercase hex digits.
    """
    value = value.strip()
    if not SESSION_COOKIE_RE.match(value):
        raise AuthError("invalid session cookie")
    return value.removeprefix("session=")


def load_session(aoc_dir: Path) -> Optional[str]:
    """Read the stored session cookie, or ``None`` if none was saved.

    Raises:
        ConfigError: If the file exists but cannot be read.
    """
    path = aoc_dir / SESSION_FILENAME
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8").strip("\n ")
    except OSError as exc:
        raise ConfigError(f"Cannot read session file {path}: {exc}") from exc


def save_session(aoc_dir: Path, session: str) -> None:
    """Persist *session* to ``.aoc/session`` with owner-only permissions."""
    _atomic_write(aoc_dir / SESSION_FILENAME, session, mode=0o600)


def resolve_session(aoc_dir: Path, cli_session: Optional[str] = None) -> Optional[str]:
    """Resolve the session cookie through the precedence chain.

    Precedence (high to low):
        1. ``--session`` CLI flag
        2. ``AOC_SESSION`` environment variable
        3. ``.aoc/session`` file

    Returns:
        The raw session value, or ``None`` if no source provides one.
    """
    if cli_session:
        return cli_session
    env_session = os.environ.get(SESSION_ENV_VAR)
    if env_session:
        return env_session
    return load_session(aoc_dir)


# --- Client config ---


def load_client_config(aoc_dir: Path) -> ClientConfig:
    """Load ``.aoc/config.json``.

    Returns:
        The deserialised :class:`~aoc.models.ClientConfig`, or defaults if
        the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = aoc_dir / CONFIG_FILENAME
    if not path.is_file():
        return ClientConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ClientConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_client_config(aoc_dir: Path, config: ClientConfig) -> None:
    """Persist *config* atomically to ``.aoc/config.json``."""
    data = config.model_dump(mode="json")
    _atomic_write(aoc_dir / CONFIG_FILENAME, json.dumps(data, indent=2) + "\n")
