"""Canonical Pydantic models shared across all tokenli modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Client configuration** -- configured once per client and shared across
calls: :class:`Credentials`, :class:`Endpoint`, :class:`ClientOptions`, and
the closed variants :class:`AuthorizationMethod` and :class:`BodyFormat`.

**Per-call input** -- created fresh for every token request:
:class:`GrantRequest`.

:class:`Profile` is the on-disk form of a client configuration, loaded and
saved by :mod:`tokenli.config`.

Configuration models are frozen so a client can be shared between threads
or tasks without locking. Constructing a model directly with invalid input
raises :class:`pydantic.ValidationError`; the public entry points in
:mod:`tokenli.client` and :mod:`tokenli.config` convert that into
:class:`~tokenli.exceptions.ConfigurationError`.
"""

from __future__ import annotations

import enum
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from tokenli.exceptions import ConfigurationError

DEFAULT_GRANT_TYPE = "client_credentials"
DEFAULT_TOKEN_PATH = "/oauth/token"

ParamValue = Union[str, int, float, bool, list[str]]
"""A token request parameter: a scalar, or a list of strings joined by spaces on the wire."""


# --- Closed variants ---


class AuthorizationMethod(str, enum.Enum):
    """Where the client credentials travel in the token request."""

    HEADER = "header"
    BODY = "body"


class BodyFormat(str, enum.Enum):
    """Wire encoding of a token request (or accepted token response) payload."""

    FORM = "form"
    JSON = "json"

    @property
    def content_type(self) -> str:
        """The MIME type announced for a payload in this format."""
        if self is BodyFormat.JSON:
            return "application/json"
        return "application/x-www-form-urlencoded"


# --- Client configuration ---


class Credentials(BaseModel):
    """OAuth2 client identifier and secret.

    The secret is held as a :class:`~pydantic.SecretStr` so it is masked in
    ``repr`` and log output. Values are sent exactly as supplied; the
    authorization server is the judge of their validity.

    Example::

        Credentials(client_id="billing-worker", client_secret="s3cr3t")
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: SecretStr


class Endpoint(BaseModel):
    """Authorization server location: a base host plus a token path.

    The host may carry a path prefix (``https://idp.example.com/tenant/``)
    which is kept when the token path is appended. A ``token_path`` that is
    itself an absolute URL replaces the host entirely.
    """

    model_config = ConfigDict(frozen=True)

    token_host: str = Field(description="Base URL of the authorization server")
    token_path: str = Field(
        default=DEFAULT_TOKEN_PATH, description="Token endpoint path relative to token_host"
    )

    @field_validator("token_host")
    @classmethod
    def _check_host(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"token_host must be an absolute http(s) URL, got {value!r}")
        return value

    @property
    def url(self) -> str:
        """Absolute token endpoint URL."""
        if urlsplit(self.token_path).scheme in ("http", "https"):
            return self.token_path
        return f"{self.token_host.rstrip('/')}/{self.token_path.lstrip('/')}"


class ClientOptions(BaseModel):
    """Per-client defaults for how token requests are built and sent.

    ``headers`` are merged over the generated ``Accept``/``Content-Type``/
    ``Authorization`` headers, and per-call headers are merged over these
    (header names compare case-insensitively).
    """

    model_config = ConfigDict(frozen=True)

    authorization_method: AuthorizationMethod = Field(
        default=AuthorizationMethod.HEADER,
        description="Send credentials in a Basic Authorization header or in the body",
    )
    body_format: BodyFormat = Field(
        default=BodyFormat.FORM, description="Request body encoding: form or json"
    )
    response_format: BodyFormat = Field(
        default=BodyFormat.JSON,
        description="Accepted success response encoding; form also accepts urlencoded bodies",
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Extra HTTP headers sent with every token request"
    )
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    max_redirects: int = Field(default=20, ge=0, description="Redirect hops to follow")


# --- Per-call input ---


class GrantRequest(BaseModel):
    """Grant type plus the extra parameters of one token request."""

    model_config = ConfigDict(frozen=True)

    grant_type: str = Field(default=DEFAULT_GRANT_TYPE, min_length=1)
    params: dict[str, ParamValue] = Field(default_factory=dict)

    @classmethod
    def from_params(
        cls,
        params: Optional[Mapping[str, Any]] = None,
        grant_type: Optional[str] = None,
    ) -> GrantRequest:
        """Build a grant request from a caller-supplied parameter mapping.

        A ``grant_type`` key in *params* selects the grant type; an explicit
        *grant_type* argument takes precedence over it.

        Raises:
            ConfigurationError: If a value is not a string, number, boolean,
                or list of strings.
        """
        data = dict(params or {})
        param_grant = data.pop("grant_type", None)
        try:
            return cls(
                grant_type=grant_type or param_grant or DEFAULT_GRANT_TYPE,
                params=data,
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid token request parameters: {exc}") from exc


# --- On-disk configuration ---


class Profile(BaseModel):
    """A named token client configuration stored as JSON under ``profiles/``.

    Credentials are never stored directly: ``client_id_source`` and
    ``client_secret_source`` are credential source descriptors resolved at
    call time by :func:`~tokenli.config.resolve_credential`.

    Extra fields are preserved and accessible via ``model_extra``.

    Example::

        Profile(
            name="billing",
            token_host="https://auth.example.com",
            client_id_source="env:BILLING_CLIENT_ID",
            client_secret_source="file:~/.secrets/billing",
            scopes=["invoices:read"],
        )
    """

    model_config = ConfigDict(extra="allow")

    name: str
    token_host: str = Field(description="Base URL of the authorization server")
    token_path: str = Field(default=DEFAULT_TOKEN_PATH)
    client_id_source: str = Field(
        description="Credential source for the client id: env:VAR, file:/path, prompt, literal:value"
    )
    client_secret_source: str = Field(
        description="Credential source for the client secret: env:VAR, file:/path, prompt, literal:value"
    )
    grant_type: str = Field(default=DEFAULT_GRANT_TYPE)
    scopes: list[str] = Field(default_factory=list)
    params: dict[str, ParamValue] = Field(default_factory=dict)
    options: ClientOptions = Field(default_factory=ClientOptions)
