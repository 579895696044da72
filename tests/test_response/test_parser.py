"""Tests for token response classification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from mock_server import token_payload
from tokenli.exceptions import ResponseError, ResponseErrorKind
from tokenli.exit_codes import EXIT_AUTH_FAILURE, EXIT_SERVER_ERROR
from tokenli.models import BodyFormat
from tokenli.response import is_json_media_type, parse_token_response


def _response(
    status_code: int = 200,
    content: bytes | str = b"",
    content_type: str | None = "application/json",
) -> httpx.Response:
    headers = {"content-type": content_type} if content_type else {}
    if isinstance(content, str):
        content = content.encode("utf-8")
    return httpx.Response(status_code, headers=headers, content=content)


class TestSuccess:
    def test_standard_token(self) -> None:
        before = datetime.now(timezone.utc)
        token = parse_token_response(
            httpx.Response(200, json={"access_token": "abc", "token_type": "bearer", "expires_in": 3600})
        )
        assert token.access_token == "abc"
        assert token.token_type == "bearer"
        assert token.expires_at is not None
        delta = token.expires_at - before
        assert timedelta(seconds=3599) <= delta <= timedelta(seconds=3601)

    def test_extras_preserved(self) -> None:
        token = parse_token_response(
            httpx.Response(200, json=token_payload(id_token="jwt", nested={"a": [1, 2]}))
        )
        assert token.extras == {"id_token": "jwt", "nested": {"a": [1, 2]}}

    def test_refresh_token_and_scope(self) -> None:
        token = parse_token_response(
            httpx.Response(200, json=token_payload(refresh_token="r", scope="a b"))
        )
        assert token.refresh_token == "r"
        assert token.scope == "a b"
        assert token.extras == {"scope": "a b"}

    def test_array_scope_kept_verbatim(self) -> None:
        token = parse_token_response(httpx.Response(200, json=token_payload(scope=["a", "b"])))
        assert token.extras == {"scope": ["a", "b"]}
        assert token.scope is None
        assert token.to_dict()["scope"] == ["a", "b"]

    def test_fractional_expires_in(self) -> None:
        before = datetime.now(timezone.utc)
        token = parse_token_response(httpx.Response(200, json=token_payload(expires_in=3599.5)))
        assert token.expires_in == 3599.5
        assert token.expires_at is not None
        delta = token.expires_at - before
        assert timedelta(seconds=3599) <= delta <= timedelta(seconds=3601)

    def test_json_with_charset(self) -> None:
        token = parse_token_response(
            _response(content='{"access_token": "abc"}', content_type="application/json; charset=utf-8")
        )
        assert token.access_token == "abc"
        assert token.expires_at is None

    def test_structured_json_suffix(self) -> None:
        token = parse_token_response(
            _response(content='{"access_token": "abc"}', content_type="application/token+json")
        )
        assert token.access_token == "abc"

    def test_string_expires_in(self) -> None:
        token = parse_token_response(httpx.Response(200, json=token_payload(expires_in="120")))
        assert token.expires_in == 120

    def test_non_200_success_status(self) -> None:
        token = parse_token_response(httpx.Response(201, json=token_payload()))
        assert token.access_token == "abc"


class TestHttpStatus:
    @pytest.mark.parametrize("status", [400, 401, 403, 404, 406, 500, 503])
    def test_status_preserved(self, status: int) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(_response(status, b"<html>nope</html>", "text/html"))
        err = exc_info.value
        assert err.status_code == status
        assert err.kind is ResponseErrorKind.HTTP_STATUS
        assert err.body == b"<html>nope</html>"
        assert err.text == "<html>nope</html>"

    def test_406_non_json_keeps_status(self) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(_response(406, b"Not Acceptable", "text/plain"))
        assert exc_info.value.status_code == 406

    def test_oauth_error_fields(self) -> None:
        response = httpx.Response(
            401,
            json={
                "error": "invalid_client",
                "error_description": "Client authentication failed",
                "error_uri": "https://docs.example.com/errors#invalid_client",
            },
        )
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(response)
        err = exc_info.value
        assert err.error == "invalid_client"
        assert err.error_description == "Client authentication failed"
        assert err.error_uri == "https://docs.example.com/errors#invalid_client"
        assert "Client authentication failed" in str(err)
        assert err.exit_code == EXIT_AUTH_FAILURE

    def test_server_error_exit_code(self) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(_response(502, b"", None))
        assert exc_info.value.exit_code == EXIT_SERVER_ERROR
        assert exc_info.value.error is None

    def test_redirect_status_is_not_success(self) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(_response(302, b"", None))
        assert exc_info.value.status_code == 302


class TestNonJsonContent:
    def test_html_on_success(self) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(_response(200, b"<html></html>", "text/html"))
        err = exc_info.value
        assert err.kind is ResponseErrorKind.NON_JSON_CONTENT
        assert err.status_code == 200
        assert err.body == b"<html></html>"

    def test_missing_content_type(self) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(_response(200, b'{"access_token": "abc"}', None))
        assert exc_info.value.kind is ResponseErrorKind.NON_JSON_CONTENT

    def test_invalid_json(self) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(_response(200, b"{not json"))
        assert exc_info.value.kind is ResponseErrorKind.NON_JSON_CONTENT
        assert exc_info.value.status_code == 200

    def test_form_rejected_when_json_expected(self) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(
                _response(200, b"access_token=abc", "application/x-www-form-urlencoded")
            )
        assert exc_info.value.kind is ResponseErrorKind.NON_JSON_CONTENT

    def test_form_accepted_when_form_expected(self) -> None:
        token = parse_token_response(
            _response(
                200,
                b"access_token=abc&token_type=bearer&expires_in=60&scope=repo+user",
                "application/x-www-form-urlencoded",
            ),
            BodyFormat.FORM,
        )
        assert token.access_token == "abc"
        assert token.expires_in == 60
        assert token.scope == "repo user"

    def test_form_expected_still_accepts_json(self) -> None:
        token = parse_token_response(httpx.Response(200, json=token_payload()), BodyFormat.FORM)
        assert token.access_token == "abc"


class TestMalformedToken:
    @pytest.mark.parametrize(
        "payload",
        [b'["access_token"]', b'"abc"', b"null", b"{}", b'{"access_token": ""}'],
    )
    def test_not_a_token(self, payload: bytes) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(_response(200, payload))
        assert exc_info.value.kind is ResponseErrorKind.MALFORMED_TOKEN
        assert exc_info.value.status_code == 200

    def test_non_numeric_expires_in(self) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(httpx.Response(200, json=token_payload(expires_in="soon")))
        assert exc_info.value.kind is ResponseErrorKind.MALFORMED_TOKEN

    def test_non_string_access_token(self) -> None:
        with pytest.raises(ResponseError) as exc_info:
            parse_token_response(httpx.Response(200, json={"access_token": 42}))
        assert exc_info.value.kind is ResponseErrorKind.MALFORMED_TOKEN


@pytest.mark.parametrize(
    "media_type,expected",
    [
        ("application/json", True),
        ("application/problem+json", True),
        ("text/json", False),
        ("text/html", False),
        ("", False),
    ],
)
def test_is_json_media_type(media_type: str, expected: bool) -> None:
    assert is_json_media_type(media_type) is expected
