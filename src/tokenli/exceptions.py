"""Exception hierarchy for tokenli.

All exceptions inherit from :class:`TokenliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`tokenli.exit_codes`.
Library callers catch the specific subclasses; the CLI entry point in
:func:`tokenli.app.main` catches ``TokenliError`` and exits with the
appropriate code.

Subclass hierarchy::

    TokenliError (exit 1)
    +-- ConfigurationError  (exit 2)
    +-- TransportError      (exit 6)
    +-- ResponseError       (exit 3 for 400/401/403, exit 5 otherwise)

A token call always ends in either an
:class:`~tokenli.token.AccessToken` or exactly one of these errors.
"""

from __future__ import annotations

import enum
from typing import Optional

from tokenli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SERVER_ERROR,
)


class TokenliError(Exception):
    """Base exception for all tokenli errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(TokenliError):
    """Raised for an invalid combination of options, before any request is sent."""

    exit_code = EXIT_INVALID_USAGE


class TransportError(TokenliError):
    """Raised on network-level failures (timeout, DNS, TLS, connection refused, redirect loops)."""

    exit_code = EXIT_CONNECTION_ERROR


class ResponseErrorKind(str, enum.Enum):
    """Classification of a :class:`ResponseError`."""

    HTTP_STATUS = "http_status"
    """The server answered with a status outside the 2xx range."""

    NON_JSON_CONTENT = "non_json_content"
    """A success status whose body is not JSON (wrong content type or undecodable)."""

    MALFORMED_TOKEN = "malformed_token"
    """A decodable body that does not describe an access token."""


class ResponseError(TokenliError):
    """Raised when the token endpoint's response cannot be turned into a token.

    The original HTTP status code and raw body are always preserved so
    callers can inspect what the server actually sent. A non-JSON body on a
    406 stays a 406; the status is never replaced by a parsing error code.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status code of the final response.
        body: The raw response body bytes.
        kind: Which rule the response failed.
        error: The OAuth2 ``error`` code, when the server sent one.
        error_description: The OAuth2 ``error_description``, when present.
        error_uri: The OAuth2 ``error_uri``, when present.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: bytes = b"",
        kind: ResponseErrorKind = ResponseErrorKind.HTTP_STATUS,
        error: Optional[str] = None,
        error_description: Optional[str] = None,
        error_uri: Optional[str] = None,
    ):
        exit_code = EXIT_AUTH_FAILURE if status_code in (400, 401, 403) else EXIT_SERVER_ERROR
        super().__init__(message, exit_code=exit_code)
        self.status_code = status_code
        self.body = body
        self.kind = kind
        self.error = error
        self.error_description = error_description
        self.error_uri = error_uri

    @property
    def text(self) -> str:
        """The response body decoded as UTF-8, with undecodable bytes replaced."""
        return self.body.decode("utf-8", errors="replace")
