"""Exception hierarchy for sfquery.

All exceptions inherit from :class:`SfQueryError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`sfquery.exit_codes`.
The CLI catches ``SfQueryError`` and exits with the appropriate code, while
unexpected exceptions produce a crash log and exit with
:data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SfQueryError (exit 1)
    +-- InvalidUsageError           (exit 2)
    +-- ConfigError                 (exit 1)
    |   +-- InvalidLoginUrlError
    |   +-- InvalidVersionError
    +-- AuthError                   (exit 3)
    |   +-- TokenRequestError
    |   +-- AuthResponseParseError
    +-- QueryError                  (exit 4)
    |   +-- QueryAPIError
    |   +-- QueryResponseParseError
    +-- NetworkError                (exit 6)

:class:`SessionClient <sfquery.client.session.SessionClient>` retries
:class:`AuthError`, :class:`QueryError` and :class:`NetworkError`;
:class:`ConfigError` is raised before any network work and never retried.
"""

from __future__ import annotations

from sfquery.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_QUERY_FAILURE,
)
from sfquery.models import AuthFailure, QueryFailure


class SfQueryError(Exception):
    """Base exception for all sfquery errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SfQueryError):
    """Raised for invalid CLI arguments or out-of-range settings."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SfQueryError):
    """Raised for configuration problems (missing file, invalid TOML, bad secret sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidLoginUrlError(ConfigError):
    """Raised when the login URL is empty."""

    def __init__(self, message: str = "Supplied login url is not a valid login url"):
        super().__init__(message)


class InvalidVersionError(ConfigError):
    """Raised when the API version is empty."""

    def __init__(self, message: str = "Supplied version is not a valid API version"):
        super().__init__(message)


class AuthError(SfQueryError):
    """Base class for failures while obtaining a credential."""

    exit_code = EXIT_AUTH_FAILURE


class TokenRequestError(AuthError):
    """The login server refused the password grant.

    Attributes:
        failure: The classified reason, see :class:`~sfquery.models.AuthFailure`.
        description: The server's ``error_description``, possibly empty.
    """

    def __init__(self, failure: AuthFailure, description: str = ""):
        message = failure.description
        if description:
            message = f"{message} ({description})"
        super().__init__(message)
        self.failure = failure
        self.description = description


class AuthResponseParseError(AuthError):
    """The login server replied with neither a token nor an error record."""

    def __init__(self, message: str = "Could not parse the authentication response"):
        super().__init__(message)


class QueryError(SfQueryError):
    """Base class for failures reported while running a query."""

    exit_code = EXIT_QUERY_FAILURE


class QueryAPIError(QueryError):
    """The query service answered with a non-200 status and an error record.

    Attributes:
        failure: The decoded :class:`~sfquery.models.QueryFailure`.
    """

    def __init__(self, failure: QueryFailure):
        message = f"HTTP {failure.status_code}: {failure.message}"
        if failure.fields:
            message = f"{message} (fields: {', '.join(failure.fields)})"
        super().__init__(message)
        self.failure = failure

    @property
    def status_code(self) -> int:
        """The HTTP status observed by the transport."""
        return self.failure.status_code


class QueryResponseParseError(QueryError):
    """The query service sent a body that matches no known shape.

    Attributes:
        status_code: The HTTP status of the unreadable response.
    """

    def __init__(self, status_code: int):
        super().__init__(f"Could not parse the query response (HTTP {status_code})")
        self.status_code = status_code


class NetworkError(SfQueryError):
    """Raised on transport failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR
