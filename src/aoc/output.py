"""Terminal output for aoc.

Two channels, never mixed:

* **stdout** carries page bodies and puzzle inputs, byte for byte, so that
  ``aoc input | ./solve`` sees exactly what the site sent. Tables from
  ``aoc cache stats`` also go here.
* **stderr** carries everything else: the download spinner, progress
  notes, warnings and errors.

Colour is switched off by ``--no-color``, a set ``NO_COLOR`` variable, or
``TERM=dumb`` (see https://no-color.org).

:class:`OutputManager` owns the Rich consoles and the quiet/verbose
switches. :func:`~aoc.app.main_callback` builds one per invocation and
installs it with :func:`set_output`; library code reaches it through
:func:`get_output` or the module-level shortcuts (:func:`info`,
:func:`debug`, ...).
"""

from __future__ import annotations

import contextlib
import os
import sys
from typing import ContextManager, Optional

from rich.console import Console
from rich.table import Table


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        no_color: Print plain text with no Rich markup.
        quiet: Hide ``info`` and ``success`` messages and the spinner.
        verbose: Show ``debug`` messages.
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._plain = no_color or _color_disabled_by_env()
        self._quiet = quiet
        self._verbose = verbose
        self._stdout = Console(file=sys.stdout, no_color=self._plain)
        self._stderr = Console(file=sys.stderr, no_color=self._plain, stderr=True)

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write *text* to stdout, ending it with a newline."""
        out = sys.stdout
        out.write(text if text.endswith("\n") else text + "\n")
        out.flush()

    def write_bytes(self, data: bytes) -> None:
        """Write a body chunk to stdout without decoding it."""
        buffer = getattr(sys.stdout, "buffer", None)
        if buffer is None:
            # Text-only stream (some embedders); best effort.
            sys.stdout.write(data.decode("utf-8", errors="replace"))
            sys.stdout.flush()
            return
        buffer.write(data)
        buffer.flush()

    def print_table(self, headers: list[str], rows: list[list[str]]) -> None:
        """Render a table, or tab-separated lines when piped or colourless."""
        if self._plain or not _stdout_is_tty():
            for line in (headers, *rows):
                self.print_data("\t".join(line))
            return
        table = Table(show_header=True, header_style="bold cyan")
        for name in headers:
            table.add_column(name)
        for line in rows:
            table.add_row(*line)
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def _emit(self, message: str, markup: str, prefix: str = "") -> None:
        if self._plain:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)

    def info(self, message: str) -> None:
        if self._quiet:
            return
        self._emit(message, message)

    def success(self, message: str) -> None:
        if self._quiet:
            return
        self._emit(message, f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Always shown, even with ``--quiet``."""
        self._emit(message, f"[yellow]Warning:[/yellow] {message}", prefix="Warning: ")

    def error(self, message: str) -> None:
        """Always shown, even with ``--quiet``."""
        self._emit(message, f"[bold red]Error:[/bold red] {message}", prefix="Error: ")

    def debug(self, message: str) -> None:
        """Shown only with ``--verbose``."""
        if not self._verbose:
            return
        self._emit(message, f"[dim][debug] {message}[/dim]", prefix="[debug] ")

    def status(self, message: str) -> ContextManager[object]:
        """Return a spinner shown on stderr for the duration of a ``with`` block.

        Falls back to a no-op context when quiet, colourless, or when
        stderr is not a terminal.
        """
        if self._quiet or self._plain or not self._stderr.is_terminal:
            return contextlib.nullcontext()
        return self._stderr.status(message, spinner="dots")


def _stdout_is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _color_disabled_by_env() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb`` turn colour off."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager. Tests call this between cases."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def write_bytes(data: bytes) -> None:
    get_output().write_bytes(data)


def print_table(headers: list[str], rows: list[list[str]]) -> None:
    get_output().print_table(headers, rows)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)


def status(message: str) -> ContextManager[object]:
    return get_output().status(message)
