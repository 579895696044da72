"""The ``tokenli token`` command -- fetch an access token.

The client configuration comes from the active profile (see
:func:`~tokenli.config.resolve_profile`) or, when ``--token-host`` is
given, entirely from flags. Flags always override profile values.

Typical use::

    tokenli token --profile billing --scope invoices:read --scope invoices:write
    export TOKEN=$(tokenli --plain token --raw)
    tokenli --dry-run token --token-host https://auth.example.com \\
        --client-id-source env:CLIENT_ID --client-secret-source env:CLIENT_SECRET
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from tokenli.commands import CliState
from tokenli.exceptions import ConfigurationError, TokenliError
from tokenli.models import AuthorizationMethod, BodyFormat, Profile
from tokenli.output import debug, error, get_output


def parse_pairs(values: list[str], separator: str, what: str) -> dict[str, str]:
    """Split ``key<separator>value`` flag values into a dict; later keys win.

    Raises:
        ConfigurationError: If a value has no separator or an empty key.
    """
    pairs: dict[str, str] = {}
    for raw in values:
        key, sep, value = raw.partition(separator)
        if not sep or not key.strip():
            raise ConfigurationError(f"Invalid {what} {raw!r}: expected KEY{separator}VALUE")
        pairs[key.strip()] = value.strip() if separator == ":" else value
    return pairs


def _adhoc_profile(
    token_host: str,
    client_id_source: Optional[str],
    client_secret_source: Optional[str],
) -> Profile:
    if not client_id_source or not client_secret_source:
        raise ConfigurationError(
            "--token-host requires --client-id-source and --client-secret-source"
        )
    return Profile(
        name="adhoc",
        token_host=token_host,
        client_id_source=client_id_source,
        client_secret_source=client_secret_source,
    )


def token_command(
    ctx: typer.Context,
    token_host: Optional[str] = typer.Option(
        None, "--token-host", help="Authorization server base URL (skips profile lookup)."
    ),
    token_path: Optional[str] = typer.Option(
        None, "--token-path", help="Token endpoint path relative to the host."
    ),
    client_id_source: Optional[str] = typer.Option(
        None, "--client-id-source", help="Client id source: env:VAR, file:/path, prompt, literal:value."
    ),
    client_secret_source: Optional[str] = typer.Option(
        None, "--client-secret-source", help="Client secret source: env:VAR, file:/path, prompt."
    ),
    scope: Optional[list[str]] = typer.Option(
        None, "--scope", "-s", help="Scope to request (repeatable)."
    ),
    param: Optional[list[str]] = typer.Option(
        None, "--param", help="Extra token parameter KEY=VALUE (repeatable)."
    ),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Extra request header 'Name: value' (repeatable)."
    ),
    grant_type: Optional[str] = typer.Option(
        None, "--grant-type", help="Grant type (default: client_credentials)."
    ),
    auth_method: Optional[AuthorizationMethod] = typer.Option(
        None, "--auth-method", help="Send credentials in the 'header' or the 'body'."
    ),
    body_format: Optional[BodyFormat] = typer.Option(
        None, "--body-format", help="Request body encoding: 'form' or 'json'."
    ),
    raw: bool = typer.Option(
        False, "--raw", help="Print only the access token string."
    ),
) -> None:
    """Request an access token with the client-credentials grant."""
    from tokenli.client import create_client
    from tokenli.config import profile_client_args, resolve_profile
    from tokenli.request import describe_request

    state = ctx.obj if isinstance(ctx.obj, CliState) else CliState()
    output = get_output()

    try:
        if token_host:
            profile = _adhoc_profile(token_host, client_id_source, client_secret_source)
        else:
            profile = resolve_profile(state.profile)
            if client_id_source:
                profile.client_id_source = client_id_source
            if client_secret_source:
                profile.client_secret_source = client_secret_source
        if token_path:
            profile.token_path = token_path

        option_overrides: dict[str, Any] = {}
        if auth_method is not None:
            option_overrides["authorization_method"] = auth_method
        if body_format is not None:
            option_overrides["body_format"] = body_format
        profile.options = profile.options.model_copy(update=option_overrides)

        params: dict[str, Any] = dict(profile.params)
        params.update(parse_pairs(param or [], "=", "parameter"))
        scopes = scope or profile.scopes
        if scopes:
            params["scope"] = list(scopes)

        debug(f"Using profile: {profile.name}")
        credentials, endpoint, options = profile_client_args(profile)

        with create_client(credentials, endpoint, options) as client:
            call_headers = parse_pairs(header or [], ":", "header")
            effective_grant = grant_type or profile.grant_type
            if state.dry_run:
                request = client.build_request(
                    params, grant_type=effective_grant, headers=call_headers
                )
                output.format_response(describe_request(request))
                return
            token = client.get_token(params, grant_type=effective_grant, headers=call_headers)
    except TokenliError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if raw:
        output.print_data(token.access_token)
    else:
        output.format_response(token.to_dict())
