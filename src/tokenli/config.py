"""Profiles and credential sources for the ``tokenli`` command line.

The library (:mod:`tokenli.client`) never touches files or the
environment; it is handed finished models. This module is what turns a
saved profile into those models for the CLI.

Layout on disk::

    <config dir>/
        profiles/
            billing.json      # one Profile per file

The config dir follows the XDG Base Directory layout on Linux and the BSDs
(``$XDG_CONFIG_HOME/tokenli``, falling back to ``~/.config/tokenli``) and is
``~/.tokenli`` elsewhere.

A profile never stores a secret. It stores a *credential source*, resolved
by :func:`resolve_credential` each time a token is requested:

``env:NAME``
    The value of environment variable ``NAME``.
``file:PATH``
    The contents of ``PATH`` with surrounding whitespace removed.
``prompt``
    Typed at the terminal without echo.
``literal:VALUE``
    ``VALUE`` itself (handy for a public client id).
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import re
import sys
import tempfile
from pathlib import Path
from typing import Callable, Optional

from tokenli.exceptions import ConfigurationError
from tokenli.models import ClientOptions, Credentials, Endpoint, Profile

ENV_PROFILE = "TOKENLI_PROFILE"
ENV_TOKEN_HOST = "TOKENLI_TOKEN_HOST"

_PROFILE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


# --- Directories ---


def _is_xdg_platform() -> bool:
    """Whether the XDG layout applies (Linux and the BSDs)."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def get_config_dir() -> Path:
    """Return the tokenli config directory, creating it on first use."""
    if _is_xdg_platform():
        xdg_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        path = Path(xdg_home) / "tokenli"
    else:
        path = Path.home() / ".tokenli"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _atomic_write(path: Path, text: str) -> None:
    """Replace *path* with *text* so readers never see a half-written file."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# --- Profiles ---


def _profile_path(name: str) -> Path:
    if not _PROFILE_NAME.match(name):
        raise ConfigurationError(
            f"Invalid profile name {name!r}: use letters, digits, '.', '_' or '-'"
        )
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Names of all saved profiles, sorted."""
    return sorted(path.stem for path in get_profiles_dir().glob("*.json") if path.is_file())


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


def load_profile(name: str) -> Profile:
    """Read and validate the profile called *name*.

    Raises:
        ConfigurationError: If it is missing, not JSON, or not a valid profile.
    """
    path = _profile_path(name)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigurationError(f"Profile '{name}' not found at {path}") from None
    try:
        return Profile.model_validate_json(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> Path:
    """Write *profile* to ``profiles/<name>.json`` and return the path."""
    path = _profile_path(profile.name)
    _atomic_write(path, profile.model_dump_json(indent=2) + "\n")
    return path


def delete_profile(name: str) -> None:
    """Remove a saved profile.

    Raises:
        ConfigurationError: If no such profile exists.
    """
    path = _profile_path(name)
    try:
        path.unlink()
    except FileNotFoundError:
        raise ConfigurationError(f"Profile '{name}' not found at {path}") from None


def resolve_profile(cli_profile: Optional[str] = None) -> Profile:
    """Load the profile a command should use.

    The name comes from, in order: *cli_profile* (``--profile``), the
    ``TOKENLI_PROFILE`` variable, or the single saved profile when there is
    exactly one. ``TOKENLI_TOKEN_HOST`` then replaces the loaded
    ``token_host``, which points a profile at another environment without
    editing it.

    Raises:
        ConfigurationError: If no profile can be chosen or loaded.
    """
    name = cli_profile or os.environ.get(ENV_PROFILE)
    if not name:
        saved = list_profiles()
        if len(saved) != 1:
            raise ConfigurationError(
                f"No profile selected: pass --profile or set {ENV_PROFILE} "
                f"({len(saved)} profiles configured)"
            )
        name = saved[0]

    profile = load_profile(name)
    host_override = os.environ.get(ENV_TOKEN_HOST)
    if host_override:
        profile.token_host = host_override
    return profile


def profile_client_args(profile: Profile) -> tuple[Credentials, Endpoint, ClientOptions]:
    """Resolve *profile* into the arguments of :func:`~tokenli.client.create_client`.

    Raises:
        ConfigurationError: If a credential source fails or the endpoint is invalid.
    """
    client_id = resolve_credential(profile.client_id_source, label="client id")
    client_secret = resolve_credential(profile.client_secret_source, label="client secret")
    try:
        credentials = Credentials(client_id=client_id, client_secret=client_secret)
        endpoint = Endpoint(token_host=profile.token_host, token_path=profile.token_path)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid profile '{profile.name}': {exc}") from exc
    return credentials, endpoint, profile.options


# --- Credential sources ---


def _from_env(name: str, label: str) -> str:
    value = os.environ.get(name)
    if value is None:
        raise ConfigurationError(f"Environment variable '{name}' for the {label} is not set")
    return value


def _from_file(location: str, label: str) -> str:
    path = Path(location).expanduser()
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        raise ConfigurationError(f"Credential file for the {label} not found: {path}") from None
    except OSError as exc:
        raise ConfigurationError(f"Cannot read credential file {path}: {exc}") from exc


def _from_literal(value: str, label: str) -> str:
    return value


_SOURCES: dict[str, Callable[[str, str], str]] = {
    "env": _from_env,
    "file": _from_file,
    "literal": _from_literal,
}


def resolve_credential(source: str, label: str = "credential") -> str:
    """Return the value a credential source descriptor points at.

    *label* names the credential in prompts and error messages.

    Raises:
        ConfigurationError: For an unknown or unresolvable source.
    """
    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigurationError(f"Cannot prompt for the {label}: stdin is not a TTY")
        return getpass.getpass(f"Enter {label}: ")

    kind, sep, rest = source.partition(":")
    reader = _SOURCES.get(kind) if sep else None
    if reader is None:
        raise ConfigurationError(
            f"Unknown credential source format: {source} "
            "(expected env:NAME, file:PATH, literal:VALUE or prompt)"
        )
    return reader(rest, label)
