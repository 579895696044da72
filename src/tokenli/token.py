"""Normalized access token returned by a successful token request.

:class:`AccessToken` wraps the standard fields of an RFC 6749 section 5.1
token response and keeps every provider-specific field verbatim in
:attr:`~AccessToken.extras`. The relative ``expires_in`` lifetime is
converted to an absolute UTC instant once, when the token is built, so the
token can be checked for expiry later without knowing when it was issued.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

_STANDARD_FIELDS = frozenset({"access_token", "token_type", "refresh_token", "expires_in"})


class AccessToken(BaseModel):
    """An OAuth2 access token.

    Tokens without ``expires_in`` never expire from the client's point of
    view: :attr:`expires_at` is ``None`` and :meth:`expired` is always
    ``False``.

    Example::

        token = AccessToken.from_response({"access_token": "abc", "expires_in": 3600})
        headers = {"Authorization": token.authorization_header()}
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(min_length=1)
    token_type: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[Union[int, float]] = None
    expires_at: Optional[datetime] = None
    extras: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(
        cls, data: Mapping[str, Any], now: Optional[datetime] = None
    ) -> AccessToken:
        """Build a token from a decoded token response.

        Args:
            data: The decoded response object.
            now: Issue instant used to compute :attr:`expires_at`. Defaults
                to the current UTC time.

        Raises:
            pydantic.ValidationError: If ``access_token`` is missing or
                empty, or ``expires_in`` is not a number of seconds.
        """
        fields = {key: data[key] for key in _STANDARD_FIELDS if data.get(key) is not None}
        extras = {key: value for key, value in data.items() if key not in _STANDARD_FIELDS}
        token = cls(**fields, extras=extras)
        if token.expires_in is None:
            return token
        issued = now or datetime.now(timezone.utc)
        return token.model_copy(
            update={"expires_at": issued + timedelta(seconds=token.expires_in)}
        )

    @property
    def scope(self) -> Optional[str]:
        """The granted scope, when the server sent it as a space-separated string."""
        scope = self.extras.get("scope")
        return scope if isinstance(scope, str) else None

    def expired(self, window_seconds: float = 0) -> bool:
        """Whether the token has expired, or will within *window_seconds*."""
        if self.expires_at is None:
            return False
        cutoff = datetime.now(timezone.utc) + timedelta(seconds=window_seconds)
        return self.expires_at <= cutoff

    def authorization_header(self) -> str:
        """Value for an ``Authorization`` header carrying this token."""
        token_type = (self.token_type or "bearer").lower()
        if token_type == "bearer":
            return f"Bearer {self.access_token}"
        return f"{self.token_type} {self.access_token}"

    def to_dict(self) -> dict[str, Any]:
        """Flatten back to a response-shaped dict with ``expires_at`` as ISO 8601."""
        data: dict[str, Any] = dict(self.extras)
        data.update(
            self.model_dump(mode="json", exclude={"extras"}, exclude_none=True)
        )
        return data
