"""Client-credentials token clients.

:class:`ClientCredentials` (blocking) and :class:`AsyncClientCredentials`
(non-blocking) tie the pieces together for one configured client::

    GrantRequest -> build_token_request -> Transport.send -> parse_token_response

A client holds only frozen configuration (credentials, endpoint, options)
plus its transport, so one instance can serve concurrent calls: each call
builds its own request and owns its own response.

Example::

    from tokenli import create_client

    with create_client(
        {"client_id": "billing-worker", "client_secret": "s3cr3t"},
        {"token_host": "https://auth.example.com"},
        {"authorization_method": "body", "body_format": "json"},
    ) as client:
        token = client.get_token({"scope": ["invoices:read", "invoices:write"]})
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from tokenli.exceptions import ConfigurationError
from tokenli.models import ClientOptions, Credentials, Endpoint, GrantRequest
from tokenli.request import build_token_request
from tokenli.response import parse_token_response
from tokenli.token import AccessToken
from tokenli.transport import AsyncTransport, Transport

_M = TypeVar("_M", bound=BaseModel)

CredentialsLike = Union[Credentials, Mapping[str, Any]]
EndpointLike = Union[Endpoint, Mapping[str, Any]]
OptionsLike = Union[ClientOptions, Mapping[str, Any], None]


def _coerce(model: type[_M], value: Any, what: str) -> _M:
    """Accept a model instance or validate a plain mapping into one."""
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid {what}: {exc}") from exc


class _BaseClient:
    """Configuration and request building shared by both clients."""

    def __init__(
        self,
        credentials: CredentialsLike,
        endpoint: EndpointLike,
        options: OptionsLike = None,
    ) -> None:
        self._credentials = _coerce(Credentials, credentials, "credentials")
        self._endpoint = _coerce(Endpoint, endpoint, "endpoint")
        self._options = _coerce(ClientOptions, options or {}, "client options")

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def options(self) -> ClientOptions:
        return self._options

    def build_request(
        self,
        params: Optional[Mapping[str, Any]] = None,
        *,
        grant_type: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Request:
        """Build, without sending, the request :meth:`get_token` would send.

        Args:
            params: Extra token parameters such as ``scope``. A
                ``grant_type`` key selects the grant type.
            grant_type: Grant type override; wins over a ``grant_type`` key.
            headers: Per-call headers, overriding every other header.

        Raises:
            ConfigurationError: If a parameter value has an unsupported type.
        """
        grant = GrantRequest.from_params(params, grant_type)
        return build_token_request(
            self._endpoint, self._credentials, grant, self._options, headers
        )


class ClientCredentials(_BaseClient):
    """Blocking client-credentials client.

    Args:
        credentials: Client id and secret, as a model or a mapping.
        endpoint: Token host and path, as a model or a mapping.
        options: Request options, as a model or a mapping.
        http_client: Optional :class:`httpx.Client` to send through; the
            caller keeps ownership of it.

    Raises:
        ConfigurationError: If any configuration value is invalid.
    """

    def __init__(
        self,
        credentials: CredentialsLike,
        endpoint: EndpointLike,
        options: OptionsLike = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        super().__init__(credentials, endpoint, options)
        self._transport = Transport(self._options, client=http_client)

    def __enter__(self) -> ClientCredentials:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self._transport.close()

    def get_token(
        self,
        params: Optional[Mapping[str, Any]] = None,
        *,
        grant_type: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> AccessToken:
        """Request an access token.

        Takes the same arguments as :meth:`build_request`.

        Raises:
            ConfigurationError: Before any I/O, for invalid parameters.
            TransportError: If the token endpoint cannot be reached.
            ResponseError: If the endpoint's answer is not a usable token.
        """
        request = self.build_request(params, grant_type=grant_type, headers=headers)
        response = self._transport.send(request)
        return parse_token_response(response, self._options.response_format)


class AsyncClientCredentials(_BaseClient):
    """Non-blocking client-credentials client over :class:`httpx.AsyncClient`.

    Mirrors :class:`ClientCredentials`; :meth:`get_token` must be awaited.
    """

    def __init__(
        self,
        credentials: CredentialsLike,
        endpoint: EndpointLike,
        options: OptionsLike = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(credentials, endpoint, options)
        self._transport = AsyncTransport(self._options, client=http_client)

    async def __aenter__(self) -> AsyncClientCredentials:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def get_token(
        self,
        params: Optional[Mapping[str, Any]] = None,
        *,
        grant_type: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> AccessToken:
        """Request an access token. See :meth:`ClientCredentials.get_token`."""
        request = self.build_request(params, grant_type=grant_type, headers=headers)
        response = await self._transport.send(request)
        return parse_token_response(response, self._options.response_format)


def create_client(
    credentials: CredentialsLike,
    endpoint: EndpointLike,
    options: OptionsLike = None,
    http_client: Optional[httpx.Client] = None,
) -> ClientCredentials:
    """Create a blocking :class:`ClientCredentials` client."""
    return ClientCredentials(credentials, endpoint, options, http_client=http_client)


def create_async_client(
    credentials: CredentialsLike,
    endpoint: EndpointLike,
    options: OptionsLike = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> AsyncClientCredentials:
    """Create a non-blocking :class:`AsyncClientCredentials` client."""
    return AsyncClientCredentials(credentials, endpoint, options, http_client=http_client)
