"""Shared test fixtures for tokenli.

Provides client configuration fixtures, a recording mock authorization
server (see :mod:`mock_server`), and config-directory isolation.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from mock_server import TOKEN_HOST, AuthorizationServer
from tokenli.models import Credentials, Endpoint
from tokenli.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Client configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(client_id="the client id", client_secret="the client secret")


@pytest.fixture
def endpoint() -> Endpoint:
    return Endpoint(token_host=TOKEN_HOST)


# ---------------------------------------------------------------------------
# Mock authorization server
# ---------------------------------------------------------------------------


@pytest.fixture
def server() -> AuthorizationServer:
    """A fresh recording authorization server answering with a standard token."""
    return AuthorizationServer()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME into tmp_path, forces the XDG code path, and
    clears TOKENLI_* environment variables.
    """
    monkeypatch.setattr("tokenli.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in ["TOKENLI_PROFILE", "TOKENLI_TOKEN_HOST"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path

