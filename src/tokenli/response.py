"""Token response classification.

:func:`parse_token_response` turns the final :class:`httpx.Response` of a
token exchange into an :class:`~tokenli.token.AccessToken`, or raises one
:class:`~tokenli.exceptions.ResponseError` whose ``kind`` says which rule
failed:

``HTTP_STATUS``
    The status is outside 2xx. The status and raw body are kept; if the
    body is an OAuth2 error object (RFC 6749 section 5.2) its ``error``,
    ``error_description`` and ``error_uri`` are copied onto the exception.
``NON_JSON_CONTENT``
    A 2xx response whose ``Content-Type`` is not JSON, or whose body does
    not decode as JSON. The original status is kept.
``MALFORMED_TOKEN``
    The body decodes but is not a JSON object, has no ``access_token``, or
    has an ``expires_in`` that is not a number of seconds.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.parse import parse_qsl

import httpx
from pydantic import ValidationError

from tokenli.exceptions import ResponseError, ResponseErrorKind
from tokenli.models import BodyFormat
from tokenli.token import AccessToken

logger = logging.getLogger(__name__)

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _media_type(response: httpx.Response) -> str:
    return response.headers.get("content-type", "").split(";", 1)[0].strip().lower()


def is_json_media_type(media_type: str) -> bool:
    """Whether *media_type* is ``application/json`` or a ``+json`` structured suffix."""
    return media_type == "application/json" or (
        media_type.startswith("application/") and media_type.endswith("+json")
    )


def _error_fields(response: httpx.Response) -> dict[str, Optional[str]]:
    """Pull RFC 6749 error fields out of an error response, when it has them."""
    if not is_json_media_type(_media_type(response)):
        return {}
    try:
        payload = json.loads(response.content)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    if not isinstance(payload, dict):
        return {}
    return {
        name: str(payload[name])
        for name in ("error", "error_description", "error_uri")
        if payload.get(name) is not None
    }


def _decode_body(response: httpx.Response, expected_format: BodyFormat) -> Any:
    media_type = _media_type(response)
    status = response.status_code

    if expected_format is BodyFormat.FORM and media_type == _FORM_CONTENT_TYPE:
        text = response.content.decode("utf-8", errors="replace")
        return dict(parse_qsl(text, keep_blank_values=True))

    if not is_json_media_type(media_type):
        raise ResponseError(
            f"Token endpoint returned non-JSON content ({media_type or 'no content type'}) "
            f"with status {status}",
            status_code=status,
            body=response.content,
            kind=ResponseErrorKind.NON_JSON_CONTENT,
        )
    try:
        return json.loads(response.content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ResponseError(
            f"Token endpoint returned an invalid JSON body with status {status}: {exc}",
            status_code=status,
            body=response.content,
            kind=ResponseErrorKind.NON_JSON_CONTENT,
        ) from exc


def parse_token_response(
    response: httpx.Response,
    expected_format: BodyFormat = BodyFormat.JSON,
) -> AccessToken:
    """Classify *response* and build the access token it carries.

    Args:
        response: The final (post-redirect) token endpoint response. Its
            body must already be read.
        expected_format: Accepted success encoding. ``JSON`` requires a JSON
            body; ``FORM`` additionally accepts a urlencoded body.

    Raises:
        ResponseError: If the response does not carry a usable token.
    """
    status = response.status_code
    logger.debug("Token endpoint answered %d (%s)", status, _media_type(response) or "-")

    if not response.is_success:
        fields = _error_fields(response)
        detail = fields.get("error_description") or fields.get("error")
        message = f"Token request failed with status {status}"
        if detail:
            message = f"{message}: {detail}"
        raise ResponseError(
            message,
            status_code=status,
            body=response.content,
            kind=ResponseErrorKind.HTTP_STATUS,
            **fields,
        )

    data = _decode_body(response, expected_format)
    if not isinstance(data, dict):
        raise ResponseError(
            f"Malformed token response: expected a JSON object, got {type(data).__name__}",
            status_code=status,
            body=response.content,
            kind=ResponseErrorKind.MALFORMED_TOKEN,
        )
    if not data.get("access_token"):
        raise ResponseError(
            "Malformed token response: missing 'access_token'",
            status_code=status,
            body=response.content,
            kind=ResponseErrorKind.MALFORMED_TOKEN,
        )

    try:
        return AccessToken.from_response(data)
    except ValidationError as exc:
        raise ResponseError(
            f"Malformed token response: {exc}",
            status_code=status,
            body=response.content,
            kind=ResponseErrorKind.MALFORMED_TOKEN,
        ) from exc
