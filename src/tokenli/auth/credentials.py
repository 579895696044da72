"""Credential encoding for token requests.

A client authenticates to the token endpoint in one of two ways, selected by
:class:`~tokenli.models.AuthorizationMethod`:

- ``body`` -- ``client_id`` and ``client_secret`` are sent as two request
  parameters (:func:`body_credentials`).
- ``header`` -- an HTTP Basic ``Authorization`` header is sent instead
  (:func:`basic_authorization`).

Values are used exactly as supplied: nothing is escaped or validated here.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field

from tokenli.exceptions import ConfigurationError
from tokenli.models import AuthorizationMethod, Credentials


@dataclass(frozen=True)
class EncodedCredentials:
    """Credential material to merge into one outgoing token request."""

    body: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


def body_credentials(credentials: Credentials) -> dict[str, str]:
    """Return the ``client_id``/``client_secret`` request parameters."""
    return {
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret.get_secret_value(),
    }


def basic_authorization(credentials: Credentials) -> str:
    """Return ``"Basic " + base64(client_id:client_secret)`` over UTF-8 bytes."""
    pair = f"{credentials.client_id}:{credentials.client_secret.get_secret_value()}"
    return "Basic " + base64.b64encode(pair.encode("utf-8")).decode("ascii")


def decode_basic_authorization(value: str) -> tuple[str, str]:
    """Split a Basic ``Authorization`` header value back into id and secret.

    The id ends at the first colon, so secrets may contain colons.

    Raises:
        ConfigurationError: If *value* is not a well-formed Basic credential.
    """
    scheme, _, encoded = value.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        raise ConfigurationError("Authorization value is not a Basic credential")
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Malformed Basic credential: {exc}") from exc
    client_id, sep, client_secret = decoded.partition(":")
    if not sep:
        raise ConfigurationError("Malformed Basic credential: missing ':' separator")
    return client_id, client_secret


def encode_credentials(
    credentials: Credentials, method: AuthorizationMethod
) -> EncodedCredentials:
    """Encode *credentials* for the given authorization method."""
    if method is AuthorizationMethod.BODY:
        return EncodedCredentials(body=body_credentials(credentials))
    return EncodedCredentials(headers={"Authorization": basic_authorization(credentials)})
