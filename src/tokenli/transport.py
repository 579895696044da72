"""HTTP exchange for token requests.

:class:`Transport` (blocking, over :class:`httpx.Client`) and
:class:`AsyncTransport` (non-blocking, over :class:`httpx.AsyncClient`)
send one built :class:`httpx.Request` and return the final
:class:`httpx.Response`. They are the only place tokenli performs I/O.

Redirects are followed here rather than by httpx because a token request
must reach the redirect target unchanged: httpx rewrites ``POST`` to
``GET`` on 301/302 and drops ``Authorization`` when the host changes,
either of which would break a Basic-authenticated token exchange. The
rules are:

- 301, 302, 307 and 308 resend the same method, headers and body to the
  ``Location``, which is resolved against the URL that answered (so a
  relative redirect stays on that host).
- 303 switches to a ``GET`` without a body.
- After ``max_redirects`` hops a :class:`~tokenli.exceptions.TransportError`
  is raised.

Every :class:`httpx.RequestError` (connect, read, TLS, timeout, protocol)
is re-raised as :class:`~tokenli.exceptions.TransportError`. HTTP error
statuses are *not* errors at this layer; they are classified by
:mod:`tokenli.response`.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from tokenli.exceptions import TransportError
from tokenli.models import ClientOptions

logger = logging.getLogger(__name__)

_BODY_HEADERS = ("Content-Type", "Content-Length", "Transfer-Encoding")


def _redirect_request(request: httpx.Request, response: httpx.Response) -> Optional[httpx.Request]:
    """Return the request to send next, or ``None`` if *response* is final."""
    if not response.has_redirect_location:
        return None

    location = response.headers["Location"]
    try:
        url = request.url.join(location)
    except httpx.InvalidURL as exc:
        raise TransportError(
            f"Token request to {request.url} redirected to an invalid URL {location!r}: {exc}"
        ) from exc
    headers = httpx.Headers(request.headers)
    headers.pop("Host", None)

    if response.status_code == httpx.codes.SEE_OTHER:
        for name in _BODY_HEADERS:
            headers.pop(name, None)
        return httpx.Request("GET", url, headers=headers)
    return httpx.Request(request.method, url, headers=headers, content=request.content)


def _too_many_redirects(request: httpx.Request, limit: int) -> TransportError:
    return TransportError(f"Token request to {request.url} exceeded {limit} redirects")


class Transport:
    """Blocking transport for token requests.

    Args:
        options: Timeout, TLS verification and redirect limit. Only the
            redirect limit applies when *client* is given.
        client: An existing :class:`httpx.Client` to send through. It is
            not closed by :meth:`close`; the caller keeps ownership.

    Example::

        with Transport(options) as transport:
            response = transport.send(request)
    """

    def __init__(
        self,
        options: Optional[ClientOptions] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._options = options or ClientOptions()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self._options.timeout,
            verify=self._options.verify_ssl,
            follow_redirects=False,
        )

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def send(self, request: httpx.Request) -> httpx.Response:
        """Send *request*, following redirects, and return the final response.

        Raises:
            TransportError: On any network-level failure or redirect overflow.
        """
        hops = 0
        while True:
            try:
                response = self._client.send(request, follow_redirects=False)
            except httpx.RequestError as exc:
                raise TransportError(f"Token request to {request.url} failed: {exc}") from exc

            next_request = _redirect_request(request, response)
            if next_request is None:
                return response
            response.close()
            if hops >= self._options.max_redirects:
                raise _too_many_redirects(request, self._options.max_redirects)
            hops += 1
            logger.debug(
                "Following %d redirect from %s to %s",
                response.status_code,
                request.url,
                next_request.url,
            )
            request = next_request


class AsyncTransport:
    """Non-blocking counterpart of :class:`Transport` over :class:`httpx.AsyncClient`."""

    def __init__(
        self,
        options: Optional[ClientOptions] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._options = options or ClientOptions()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._options.timeout,
            verify=self._options.verify_ssl,
            follow_redirects=False,
        )

    async def __aenter__(self) -> AsyncTransport:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send *request*, following redirects, and return the final response.

        Raises:
            TransportError: On any network-level failure or redirect overflow.
        """
        hops = 0
        while True:
            try:
                response = await self._client.send(request, follow_redirects=False)
            except httpx.RequestError as exc:
                raise TransportError(f"Token request to {request.url} failed: {exc}") from exc

            next_request = _redirect_request(request, response)
            if next_request is None:
                return response
            await response.aclose()
            if hops >= self._options.max_redirects:
                raise _too_many_redirects(request, self._options.max_redirects)
            hops += 1
            logger.debug(
                "Following %d redirect from %s to %s",
                response.status_code,
                request.url,
                next_request.url,
            )
            request = next_request
