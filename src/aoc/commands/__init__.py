"""Built-in CLI sub-commands for aoc.

* :mod:`~aoc.commands.pages` -- ``get``, ``input``, ``invalidate`` and
  ``submit``, the commands that talk to the site.
* :mod:`~aoc.commands.login` -- store and verify the session cookie.
* :mod:`~aoc.commands.cache` -- inspect and clear the page cache.

Single commands are plain callbacks registered on the root app; the
``cache`` group is a :class:`typer.Typer` sub-application.
"""
