"""The ``tokenli`` command line.

Commands:

``tokenli token``
    Fetch an access token (:mod:`tokenli.commands.token`).
``tokenli profile add|list|show|remove``
    Manage saved client configurations (:mod:`tokenli.commands.profile`).

Global flags are parsed once by :func:`main_callback`, which installs the
:class:`~tokenli.output.OutputManager`, sets the library log level, and
hands a :class:`CliState` to the sub-commands through ``ctx.obj``.

:func:`main` is the console-script entry point. A
:class:`~tokenli.exceptions.TokenliError` that escapes a command becomes
its exit code.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from tokenli import __version__
from tokenli.commands import CliState
from tokenli.commands.profile import profile_app
from tokenli.commands.token import token_command
from tokenli.exceptions import TokenliError
from tokenli.exit_codes import EXIT_GENERIC_FAILURE
from tokenli.output import OutputFormat, OutputManager, error, set_output

app = typer.Typer(
    name="tokenli",
    help="Fetch OAuth2 client-credentials access tokens.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
app.command("token")(token_command)
app.add_typer(profile_app, name="profile", help="Manage saved token client profiles.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"tokenli {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route ``tokenli.*`` log records to stderr through Rich when verbose."""
    logger = logging.getLogger("tokenli")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if verbose and not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Print the version."
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Saved profile to use (default: $TOKENLI_PROFILE)."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print results as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Never use colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print results, warnings and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log request building, redirects and responses."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the token request instead of sending it."
    ),
) -> None:
    """Fetch OAuth2 client-credentials access tokens."""
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)
    ctx.obj = CliState(profile=profile, dry_run=dry_run)


def main() -> None:
    """Console-script entry point."""
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except TokenliError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
