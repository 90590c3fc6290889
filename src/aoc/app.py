"""Command-line entry point.

Builds the ``aoc`` Typer application out of the commands in
:mod:`aoc.commands` and provides :func:`main`, the console script named in
``pyproject.toml``.

Errors derived from :class:`~aoc.exceptions.AocError` become a one-line
message on stderr and the error's exit code. Anything else is a bug: the
traceback is saved under ``.aoc/logs`` and the user is pointed at it.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from types import FrameType
from typing import Optional

import typer

from aoc import __version__
from aoc.commands.cache import cache_app
from aoc.commands.login import login_command
from aoc.commands.pages import (
    get_command,
    input_command,
    invalidate_command,
    submit_command,
)
from aoc.exceptions import AocError
from aoc.exit_codes import EXIT_GENERIC_FAILURE
from aoc.output import OutputManager, error, set_output

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="aoc",
    help="Read Advent of Code puzzles and inputs, cached until the next release.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("get")(get_command)
app.command("input")(input_command)
app.command("invalidate")(invalidate_command)
app.command("submit")(submit_command)
app.command("login")(login_command)
app.add_typer(cache_app, name="cache", help="Page cache management.")


def _print_version(value: bool) -> None:
    if not value:
        return
    typer.echo(f"aoc {__version__}")
    raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show the version and exit.",
    ),
    session: Optional[str] = typer.Option(
        None, "--session", help="Session cookie (overrides AOC_SESSION and .aoc/session)."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Plain, uncoloured output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only print page bodies, warnings and errors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log cache decisions and requests to stderr."
    ),
) -> None:
    """Set up output and shared options for the sub-command.

    ``ctx.obj`` receives ``session``. Keys an embedding program put there
    beforehand (``cwd``, ``transport``) are left alone.
    """
    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="[%(name)s] %(message)s")

    obj = ctx.ensure_object(dict)
    obj["session"] = session


def _exit_on_interrupt(signum: int, frame: Optional[FrameType]) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _save_traceback() -> Path:
    """Write the current exception's traceback to ``.aoc/logs`` and return the file."""
    from aoc.config import AOC_DIRNAME, find_up

    cwd = Path.cwd()
    logs = (find_up(cwd, AOC_DIRNAME) or cwd / AOC_DIRNAME) / "logs"
    logs.mkdir(parents=True, exist_ok=True)
    path = logs / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    path.write_text(traceback.format_exc(), encoding="utf-8")
    return path


def main() -> None:
    """Run the CLI and turn failures into exit codes.

    Raises:
        SystemExit: Always.
    """
    signal.signal(signal.SIGINT, _exit_on_interrupt)
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except AocError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_save_traceback()}")
        sys.exit(EXIT_GENERIC_FAILURE)
