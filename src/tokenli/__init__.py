"""tokenli -- OAuth2 client-credentials token acquisition.

Given a client id and secret and the location of an authorization server's
token endpoint, tokenli builds the token request, sends it, and returns a
normalized :class:`~tokenli.token.AccessToken`, or raises exactly one
classified error.

Typical use::

    from tokenli import create_client

    client = create_client(
        {"client_id": "billing-worker", "client_secret": "s3cr3t"},
        {"token_host": "https://auth.example.com", "token_path": "/oauth/token"},
    )
    token = client.get_token({"scope": ["invoices:read"]})

Modules:
    client: Blocking and async clients, ``create_client``.
    models: Pydantic configuration and request models.
    request: Token request construction (pure data).
    transport: HTTP exchange with redirect following.
    response: Response classification and parsing.
    token: The ``AccessToken`` model.
    exceptions: Error hierarchy with exit-code mapping.
    config: Profile files and credential sources for the CLI.
    app: The ``tokenli`` command line.
"""

from tokenli.client import (
    AsyncClientCredentials,
    ClientCredentials,
    create_async_client,
    create_client,
)
from tokenli.exceptions import (
    ConfigurationError,
    ResponseError,
    ResponseErrorKind,
    TokenliError,
    TransportError,
)
from tokenli.models import (
    AuthorizationMethod,
    BodyFormat,
    ClientOptions,
    Credentials,
    Endpoint,
    GrantRequest,
)
from tokenli.token import AccessToken

__version__ = "0.1.0"

__all__ = [
    "AccessToken",
    "AsyncClientCredentials",
    "AuthorizationMethod",
    "BodyFormat",
    "ClientCredentials",
    "ClientOptions",
    "ConfigurationError",
    "Credentials",
    "Endpoint",
    "GrantRequest",
    "ResponseError",
    "ResponseErrorKind",
    "TokenliError",
    "TransportError",
    "create_async_client",
    "create_client",
]
