"""Profile commands -- manage stored token client configurations.

Provides the ``tokenli profile`` sub-command group. A profile records
where the token endpoint lives and *where* the client credentials come
from (``env:``, ``file:``, ``prompt``, ``literal:``); the secrets
themselves are resolved only when a token is requested.

Typical workflow::

    tokenli profile add billing --token-host https://auth.example.com \\
        --client-id-source env:BILLING_ID --client-secret-source env:BILLING_SECRET
    tokenli profile list
    tokenli token --profile billing
"""

from __future__ import annotations

from typing import Optional

import typer

from tokenli.exit_codes import EXIT_INVALID_USAGE
from tokenli.models import (
    DEFAULT_TOKEN_PATH,
    AuthorizationMethod,
    BodyFormat,
    ClientOptions,
    Endpoint,
    Profile,
)
from tokenli.output import error, get_output, info, success, suggest, warning


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("add")
def profile_add(
    name: str = typer.Argument(help="Profile name."),
    token_host: str = typer.Option(..., "--token-host", help="Authorization server base URL."),
    client_id_source: str = typer.Option(
        ..., "--client-id-source", help="Client id source: env:VAR, file:/path, prompt, literal:value."
    ),
    client_secret_source: str = typer.Option(
        ..., "--client-secret-source", help="Client secret source: env:VAR, file:/path, prompt."
    ),
    token_path: str = typer.Option(
        DEFAULT_TOKEN_PATH, "--token-path", help="Token endpoint path."
    ),
    scope: Optional[list[str]] = typer.Option(
        None, "--scope", "-s", help="Default scope (repeatable)."
    ),
    auth_method: AuthorizationMethod = typer.Option(
        AuthorizationMethod.HEADER, "--auth-method", help="Send credentials in the 'header' or the 'body'."
    ),
    body_format: BodyFormat = typer.Option(
        BodyFormat.FORM, "--body-format", help="Request body encoding: 'form' or 'json'."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing profile."),
) -> None:
    """Create or replace a profile.

    Example::

        tokenli profile add billing --token-host https://auth.example.com \\
            --client-id-source env:BILLING_ID --client-secret-source file:~/.billing
    """
    from tokenli.config import profile_exists, save_profile
    from tokenli.exceptions import ConfigurationError

    try:
        exists = profile_exists(name)
    except ConfigurationError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    if exists and not force:
        error(f"Profile '{name}' already exists.")
        suggest(f"Overwrite it: tokenli profile add {name} --force ...")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    try:
        Endpoint(token_host=token_host, token_path=token_path)
    except ValueError as exc:
        error(f"Invalid endpoint: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    profile = Profile(
        name=name,
        token_host=token_host,
        token_path=token_path,
        client_id_source=client_id_source,
        client_secret_source=client_secret_source,
        scopes=list(scope or []),
        options=ClientOptions(authorization_method=auth_method, body_format=body_format),
    )
    if client_secret_source.startswith("literal:"):
        warning(f"Profile '{name}' stores the client secret in plain text.")
        suggest("Use env:VAR, file:/path or prompt for --client-secret-source instead.")
    save_profile(profile)
    success(f'Profile "{name}" saved.')
    suggest(f"Fetch a token: tokenli token --profile {name}")


@profile_app.command("list")
def profile_list() -> None:
    """List configured profiles."""
    from tokenli.config import list_profiles, load_profile
    from tokenli.exceptions import ConfigurationError

    names = list_profiles()
    if not names:
        info("No profiles configured.")
        suggest("Create one: tokenli profile add <name> --token-host <url> ...")
        return

    rows: list[list[str]] = []
    for name in names:
        try:
            profile = load_profile(name)
        except ConfigurationError:
            rows.append([name, "error", "-", "-"])
            continue
        endpoint = Endpoint.model_construct(
            token_host=profile.token_host, token_path=profile.token_path
        ).url
        rows.append(
            [
                name,
                endpoint,
                profile.options.authorization_method.value,
                " ".join(profile.scopes) or "-",
            ]
        )
    get_output().print_table(
        ["Profile", "Token URL", "Auth Method", "Scopes"], rows, title="Configured Profiles"
    )


@profile_app.command("show")
def profile_show(name: str = typer.Argument(help="Profile name.")) -> None:
    """Print a profile's stored configuration."""
    from tokenli.config import load_profile
    from tokenli.exceptions import ConfigurationError

    try:
        profile = load_profile(name)
    except ConfigurationError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    get_output().format_response(profile.model_dump(mode="json"))


@profile_app.command("remove")
def profile_remove(name: str = typer.Argument(help="Profile name.")) -> None:
    """Delete a profile."""
    from tokenli.config import delete_profile
    from tokenli.exceptions import ConfigurationError

    try:
        delete_profile(name)
    except ConfigurationError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f'Profile "{name}" removed.')
