"""Process exit codes of the ``tokenli`` command.

Every :class:`~tokenli.exceptions.TokenliError` subclass carries one of
these, and :func:`tokenli.app.main` exits with it. A script can branch on
``$?`` after ``tokenli token`` to tell a rejected client (3) from an
unreachable authorization server (6).
"""

EXIT_GENERIC_FAILURE = 1
"""Unexpected failure outside the classified errors."""

EXIT_INVALID_USAGE = 2
"""Bad flags, an invalid profile or credential source, or invalid client options."""

EXIT_AUTH_FAILURE = 3
"""The token endpoint answered 400, 401 or 403."""

EXIT_SERVER_ERROR = 5
"""Any other error status, a non-JSON body, or a malformed token response."""

EXIT_CONNECTION_ERROR = 6
"""The token request never completed: connect, TLS, timeout or redirect failure."""
