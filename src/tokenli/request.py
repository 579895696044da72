"""Token request construction.

:func:`build_token_request` turns a client configuration and one
:class:`~tokenli.models.GrantRequest` into an :class:`httpx.Request`. The
result is plain data (method, URL, headers, body); nothing is sent here, so
a request can be inspected, logged (via :func:`describe_request`) or
printed in dry-run mode before the transport ever sees it.

Parameter rules:

- ``grant_type`` is always present and always comes from the grant request.
- Every caller parameter is sent. List values are joined with a single
  space in their original order (``["a", "b"]`` -> ``"a b"``).
- ``grant_type``, ``client_id`` and ``client_secret`` are reserved: a
  caller parameter with one of those names is discarded with a warning and
  the configured value (or, for the header method, nothing) is used.

Header precedence, lowest to highest: generated ``Accept``,
``Content-Type`` and ``Authorization``; :attr:`ClientOptions.headers
<tokenli.models.ClientOptions.headers>`; per-call headers.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional
from urllib.parse import parse_qsl

import httpx

from tokenli.auth.credentials import decode_basic_authorization, encode_credentials
from tokenli.exceptions import ConfigurationError
from tokenli.models import BodyFormat, ClientOptions, Credentials, Endpoint, GrantRequest, ParamValue

logger = logging.getLogger(__name__)

RESERVED_PARAMS = frozenset({"grant_type", "client_id", "client_secret"})
"""Parameter names whose values are owned by the client, never by the caller."""

_REDACTED = "***"


def _wire_value(value: ParamValue) -> Any:
    """Join list values; leave scalars as supplied."""
    if isinstance(value, list):
        return " ".join(value)
    return value


def token_params(grant: GrantRequest) -> dict[str, Any]:
    """Return the request parameters for *grant*, before credentials are added."""
    params: dict[str, Any] = {"grant_type": grant.grant_type}
    for key, value in grant.params.items():
        if key in RESERVED_PARAMS:
            logger.warning(
                "Ignoring caller-supplied %r token parameter; the client's own value is used", key
            )
            continue
        params[key] = _wire_value(value)
    return params


def build_token_request(
    endpoint: Endpoint,
    credentials: Credentials,
    grant: GrantRequest,
    options: Optional[ClientOptions] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> httpx.Request:
    """Assemble the POST request for one token exchange.

    Args:
        endpoint: Where the token endpoint lives.
        credentials: The client's id and secret.
        grant: Grant type and extra parameters for this call.
        options: Authorization method, body format and default headers.
            Defaults to :class:`~tokenli.models.ClientOptions` defaults.
        headers: Per-call headers; they override every other header.

    Returns:
        An unsent :class:`httpx.Request`.
    """
    options = options or ClientOptions()
    encoded = encode_credentials(credentials, options.authorization_method)

    params = token_params(grant)
    params.update(encoded.body)

    merged = httpx.Headers(
        {
            "Accept": "application/json",
            "Content-Type": options.body_format.content_type,
        }
    )
    merged.update(encoded.headers)
    merged.update(options.headers)
    merged.update(dict(headers or {}))

    logger.debug(
        "Built token request: POST %s grant_type=%s authorization_method=%s body_format=%s",
        endpoint.url,
        grant.grant_type,
        options.authorization_method.value,
        options.body_format.value,
    )

    if options.body_format is BodyFormat.JSON:
        return httpx.Request("POST", endpoint.url, headers=merged, json=params)
    return httpx.Request("POST", endpoint.url, headers=merged, data=params)


def describe_request(request: httpx.Request) -> dict[str, Any]:
    """Render *request* as a dict safe to print or log.

    The client secret is masked wherever it appears: in a Basic
    ``Authorization`` header (the client id stays visible) and in a
    ``client_secret`` body parameter.
    """
    headers = dict(request.headers)
    for name in list(headers):
        if name.lower() != "authorization":
            continue
        try:
            client_id, _ = decode_basic_authorization(headers[name])
            headers[name] = f"Basic {client_id}:{_REDACTED}"
        except ConfigurationError:
            headers[name] = _REDACTED

    body: Any
    content = request.read()
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = json.loads(content or b"{}")
        except json.JSONDecodeError:
            body = content.decode("utf-8", errors="replace")
    else:
        body = dict(parse_qsl(content.decode("utf-8"), keep_blank_values=True))
    if isinstance(body, dict) and "client_secret" in body:
        body["client_secret"] = _REDACTED

    return {
        "method": request.method,
        "url": str(request.url),
        "headers": headers,
        "body": body,
    }
