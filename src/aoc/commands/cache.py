"""Cache commands -- inspect and clear the page cache.

Provides the ``aoc cache`` sub-command group. Everything in the cache can
be deleted at any time; pages are simply downloaded again.
"""

from __future__ import annotations

import typer

from aoc.cache import CacheStore
from aoc.commands.pages import reporting_errors
from aoc.config import ensure_aoc_dir, get_cache_dir
from aoc.output import info, print_data, print_table, success


cache_app = typer.Typer(no_args_is_help=True)


def _store(ctx: typer.Context) -> CacheStore:
    obj = ctx.obj or {}
    return CacheStore(get_cache_dir(ensure_aoc_dir(obj.get("cwd"))))


@cache_app.command("path")
def cache_path(ctx: typer.Context) -> None:
    """Print the cache directory."""
    with reporting_errors():
        print_data(str(_store(ctx).root))


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show the number and total size of cached pages."""
    with reporting_errors():
        stats = _store(ctx).stats()
    print_table(
        ["directory", "entries", "size"],
        [[stats["directory"], str(stats["entries"]), str(stats["size"])]],
    )


@cache_app.command("clear")
def cache_clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", help="Skip confirmation."),
) -> None:
    """Delete every cached page."""
    if not yes and not typer.confirm("Delete all cached pages?"):
        info("Aborted.")
        raise typer.Exit(code=1)
    with reporting_errors():
        removed = _store(ctx).clear()
    success(f"Removed {removed} cached page(s)")
