"""Built-in CLI sub-commands for tokenli.

* :mod:`~tokenli.commands.token` -- request an access token.
* :mod:`~tokenli.commands.profile` -- add, list, show and remove profiles.

``profile`` is a :class:`typer.Typer` sub-application; ``token`` is a plain
callback registered directly on the root app. Both read the global flags
from the :class:`CliState` that :func:`tokenli.app.main_callback` stores in
``ctx.obj``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class CliState:
    """Global flag values shared with sub-commands."""

    profile: Optional[str] = None
    dry_run: bool = False
