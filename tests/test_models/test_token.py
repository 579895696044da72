"""Tests for the AccessToken model and configuration models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from tokenli.exceptions import ConfigurationError
from tokenli.models import (
    AuthorizationMethod,
    BodyFormat,
    ClientOptions,
    Credentials,
    Endpoint,
    GrantRequest,
    Profile,
)
from tokenli.token import AccessToken

ISSUED = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestAccessToken:
    def test_expiry_computed_from_issue_time(self) -> None:
        token = AccessToken.from_response({"access_token": "abc", "expires_in": 3600}, now=ISSUED)
        assert token.expires_at == ISSUED + timedelta(hours=1)

    def test_no_expires_in_never_expires(self) -> None:
        token = AccessToken.from_response({"access_token": "abc"})
        assert token.expires_at is None
        assert token.expired() is False
        assert token.expired(window_seconds=10**9) is False

    def test_expired(self) -> None:
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = AccessToken.from_response({"access_token": "abc", "expires_in": 3600}, now=past)
        assert token.expired() is True

    def test_expiration_window(self) -> None:
        token = AccessToken.from_response({"access_token": "abc", "expires_in": 60})
        assert token.expired() is False
        assert token.expired(window_seconds=120) is True

    def test_null_fields_ignored(self) -> None:
        token = AccessToken.from_response(
            {"access_token": "abc", "refresh_token": None, "expires_in": None}
        )
        assert token.refresh_token is None
        assert token.expires_at is None
        assert token.extras == {}

    def test_immutable(self) -> None:
        token = AccessToken.from_response({"access_token": "abc"})
        with pytest.raises(ValidationError):
            token.access_token = "other"  # type: ignore[misc]

    def test_missing_access_token(self) -> None:
        with pytest.raises(ValidationError):
            AccessToken.from_response({"token_type": "bearer"})

    @pytest.mark.parametrize(
        "token_type,expected",
        [(None, "Bearer abc"), ("bearer", "Bearer abc"), ("Bearer", "Bearer abc"), ("MAC", "MAC abc")],
    )
    def test_authorization_header(self, token_type: str | None, expected: str) -> None:
        token = AccessToken(access_token="abc", token_type=token_type)
        assert token.authorization_header() == expected

    def test_to_dict(self) -> None:
        token = AccessToken.from_response(
            {"access_token": "abc", "token_type": "bearer", "expires_in": 60, "id_token": "jwt"},
            now=ISSUED,
        )
        assert token.to_dict() == {
            "access_token": "abc",
            "token_type": "bearer",
            "expires_in": 60,
            "expires_at": "2026-01-01T12:01:00Z",
            "id_token": "jwt",
        }


class TestConfigurationModels:
    def test_credentials_frozen(self) -> None:
        creds = Credentials(client_id="id", client_secret="secret")
        with pytest.raises(ValidationError):
            creds.client_id = "other"  # type: ignore[misc]
        assert creds.client_secret.get_secret_value() == "secret"

    def test_endpoint_default_path(self) -> None:
        assert Endpoint(token_host="https://h").token_path == "/oauth/token"

    def test_client_options_defaults(self) -> None:
        options = ClientOptions()
        assert options.authorization_method is AuthorizationMethod.HEADER
        assert options.body_format is BodyFormat.FORM
        assert options.response_format is BodyFormat.JSON
        assert options.headers == {}
        assert options.max_redirects == 20

    def test_client_options_from_strings(self) -> None:
        options = ClientOptions(authorization_method="body", body_format="json")
        assert options.authorization_method is AuthorizationMethod.BODY
        assert options.body_format is BodyFormat.JSON

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"authorization_method": "query"},
            {"body_format": "xml"},
            {"timeout": 0},
            {"max_redirects": -1},
        ],
    )
    def test_client_options_invalid(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            ClientOptions(**kwargs)  # type: ignore[arg-type]

    def test_grant_request_rejects_empty_grant_type(self) -> None:
        with pytest.raises(ValidationError):
            GrantRequest(grant_type="")

    def test_grant_request_from_params_wraps_errors(self) -> None:
        with pytest.raises(ConfigurationError):
            GrantRequest.from_params({"scope": {"not": "allowed"}})

    def test_grant_request_from_params_does_not_mutate_input(self) -> None:
        params = {"grant_type": "my_grant", "scope": ["a"]}
        GrantRequest.from_params(params)
        assert params == {"grant_type": "my_grant", "scope": ["a"]}

    def test_profile_extra_fields_preserved(self) -> None:
        profile = Profile(
            name="p",
            token_host="https://h",
            client_id_source="env:ID",
            client_secret_source="env:SECRET",
            team="billing",
        )
        assert profile.model_extra == {"team": "billing"}
