"""Login command -- store and verify the session cookie.

The site has no API tokens; the browser's ``session`` cookie is the
credential. ``aoc login`` prompts for it (hidden input), checks its shape,
drops the cached front page, fetches it again to make sure the site
accepts the cookie, and only then writes ``.aoc/session``.
"""

from __future__ import annotations

from typing import Optional

import typer

from aoc.client import AocClient
from aoc.commands.pages import reporting_errors
from aoc.config import (
    ensure_aoc_dir,
    get_cache_dir,
    load_client_config,
    save_session,
    validate_session,
)
from aoc.output import success


def login_command(
    ctx: typer.Context,
    session: Optional[str] = typer.Option(
        None, "--cookie", help="Session cookie (prompted for when omitted)."
    ),
) -> None:
    """Save your adventofcode.com session cookie.

    Example::

        aoc login
    """
    obj = ctx.obj or {}
    if session is None:
        session = typer.prompt(
            "Enter your session cookie for adventofcode.com", hide_input=True
        )

    with reporting_errors():
        session = validate_session(session)
        aoc_dir = ensure_aoc_dir(obj.get("cwd"))
        with AocClient(
            session,
            get_cache_dir(aoc_dir),
            config=load_client_config(aoc_dir),
            transport=obj.get("transport"),
        ) as client:
            # The front page shows who is logged in; never trust a cached copy here.
            client.invalidate_index()
            client.get_index()
        save_session(aoc_dir, session)

    success(f"Session saved to {aoc_dir}")
