"""Page commands -- fetch, invalidate, and submit.

Implements the top-level ``aoc get``, ``aoc input``, ``aoc invalidate``
and ``aoc submit`` commands. Bodies are written to stdout unchanged so
they can be piped into a solution; everything else goes to stderr.

Typical workflow::

    aoc input -y 2023 -d 1 | python day1.py
    aoc submit -y 2023 -d 1 -p 1 54159
"""

from __future__ import annotations

import contextlib
from datetime import datetime
from typing import Iterator

import typer

from aoc.client import AocClient, day_path
from aoc.config import (
    ensure_aoc_dir,
    get_cache_dir,
    load_client_config,
    resolve_session,
)
from aoc.exceptions import AocError, AuthError, InvalidUsageError
from aoc.output import error, info, print_data, success, write_bytes


def client_from_context(ctx: typer.Context) -> AocClient:
    """Build an :class:`~aoc.client.AocClient` from the project directory and CLI flags.

    ``ctx.obj`` may carry ``session`` (the ``--session`` flag), ``cwd``
    (search start for ``.aoc``) and ``transport`` (network transport
    override).

    Raises:
        AuthError: If no session cookie is configured.
    """
    obj = ctx.obj or {}
    aoc_dir = ensure_aoc_dir(obj.get("cwd"))
    session = resolve_session(aoc_dir, obj.get("session"))
    if session is None:
        raise AuthError("No session cookie configured. Run 'aoc login' first.")
    return AocClient(
        session,
        get_cache_dir(aoc_dir),
        config=load_client_config(aoc_dir),
        transport=obj.get("transport"),
    )


@contextlib.contextmanager
def reporting_errors() -> Iterator[None]:
    """Print :class:`~aoc.exceptions.AocError` to stderr and exit with its code."""
    try:
        yield
    except AocError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _today() -> datetime:
    return datetime.now()


def _page_path(path: str) -> str:
    if not path.startswith("/"):
        raise InvalidUsageError(f"Page path must start with '/', got {path!r}")
    return path


def get_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="Page path, e.g. '/2023/day/1'."),
) -> None:
    """Print the body of a page, from cache when it is still current.

    The body is streamed to stdout and into the cache at the same time.

    Example::

        aoc get /2023/day/1 > day1.html
    """
    with reporting_errors():
        path = _page_path(path)
        with client_from_context(ctx) as client:
            with client.stream(path) as response:
                for chunk in response.iter_bytes():
                    write_bytes(chunk)


def input_command(
    ctx: typer.Context,
    year: int = typer.Option(_today().year, "--year", "-y", help="Puzzle year."),
    day: int = typer.Option(_today().day, "--day", "-d", help="Puzzle day."),
) -> None:
    """Print your puzzle input for a day.

    Example::

        aoc input -y 2023 -d 1 | ./solve
    """
    with reporting_errors():
        with client_from_context(ctx) as client:
            with client.stream(f"{day_path(year, day)}/input") as response:
                for chunk in response.iter_bytes():
                    write_bytes(chunk)


def invalidate_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="Page path whose cached copy should be dropped."),
) -> None:
    """Drop the cached copy of a page so the next read hits the network.

    Example::

        aoc invalidate /2023/day/1
    """
    with reporting_errors():
        path = _page_path(path)
        with client_from_context(ctx) as client:
            if client.invalidate(path):
                success(f"Invalidated {path}")
            else:
                info(f"{path} was not cached")


def submit_command(
    ctx: typer.Context,
    answer: str = typer.Argument(help="The answer to submit."),
    year: int = typer.Option(_today().year, "--year", "-y", help="Puzzle year."),
    day: int = typer.Option(_today().day, "--day", "-d", help="Puzzle day."),
    part: int = typer.Option(1, "--part", "-p", min=1, max=2, help="Puzzle part."),
    yes: bool = typer.Option(False, "--yes", help="Submit without confirmation."),
) -> None:
    """Submit an answer and print the site's reply.

    The submission is never cached, and the day's puzzle page is dropped
    from the cache afterwards because a correct answer changes it.

    Example::

        aoc submit -y 2023 -d 1 -p 2 54159
    """
    answer = answer.strip()
    if not yes and not typer.confirm(f"Submit answer {answer!r}?"):
        raise typer.Exit(code=1)

    with reporting_errors():
        with client_from_context(ctx) as client:
            reply = client.submit_answer(year, day, part, answer)
    print_data(reply)
