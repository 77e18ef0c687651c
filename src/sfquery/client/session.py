"""Session client with credential caching and bounded retry.

This module provides :class:`SessionClient`, the only stateful part of the
query pipeline. It layers on top of
:class:`~sfquery.auth.token.Authenticator` and
:class:`~sfquery.client.query.QueryExecutor`:

- **Credential caching** -- the first query authenticates; later queries
  reuse the cached credential until the server rejects it.
- **Eviction** -- a :class:`~sfquery.exceptions.QueryAPIError` with HTTP
  401 drops the cached credential so the next attempt logs in again.
- **Bounded retry** -- any authentication, query or network failure is
  retried up to ``attempt_limit`` times per :meth:`SessionClient.query`
  call, with no delay in between. When attempts run out the last failure is
  re-raised unchanged.

A session handles one request at a time. Overlapping ``query`` calls from
several threads are not supported; callers serialize them.
"""

from __future__ import annotations

from typing import Optional

import httpx

from sfquery.auth.token import Authenticator
from sfquery.client.query import QueryExecutor
from sfquery.exceptions import (
    AuthError,
    InvalidLoginUrlError,
    InvalidUsageError,
    InvalidVersionError,
    NetworkError,
    QueryAPIError,
    QueryError,
)
from sfquery.models import ClientConfig, Credential, QueryResult
from sfquery.output import get_output

DEFAULT_ATTEMPT_LIMIT = 3

_RETRYABLE = (AuthError, QueryError, NetworkError)


class SessionClient:
    """Authenticated query client for one user on one login server.

    Must be closed when done, either with :meth:`close` or by using it as a
    context manager. When *http_client* is supplied the caller keeps
    ownership of it and it is left open.

    Args:
        login_url: OAuth2 token endpoint. Must not be empty.
        version: REST API version, e.g. ``"v20.0"``. Must not be empty.
        client_id: OAuth2 client id.
        client_secret: OAuth2 client secret.
        username: Login of the user to act as.
        password: Password of the user.
        attempt_limit: Extra attempts allowed per query after the first.
            ``0`` disables retry.
        http_client: Optional pre-built :class:`httpx.Client`.
        timeout: Transport timeout in seconds for an owned client.
        verify_ssl: Whether an owned client verifies certificates.

    Raises:
        InvalidLoginUrlError: If *login_url* is empty.
        InvalidVersionError: If *version* is empty.
        InvalidUsageError: If *attempt_limit* is negative.

    Example::

        with SessionClient(url, "v20.0", cid, secret, user, pwd) as client:
            result = client.query("SELECT Id FROM Account")
    """

    def __init__(
        self,
        login_url: str,
        version: str,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
        attempt_limit: int = DEFAULT_ATTEMPT_LIMIT,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
        verify_ssl: bool = True,
    ) -> None:
        if not login_url:
            raise InvalidLoginUrlError()
        if not version:
            raise InvalidVersionError()

        self._login_url = login_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._username = username
        self._password = password
        self.attempt_limit = attempt_limit

        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=timeout,
            verify=verify_ssl,
            follow_redirects=True,
        )
        self._authenticator = Authenticator(self._client)
        self._executor = QueryExecutor(self._client, version)
        self._credential: Optional[Credential] = None

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        http_client: Optional[httpx.Client] = None,
    ) -> SessionClient:
        """Build a session from a loaded :class:`~sfquery.models.ClientConfig`.

        Secret fields must already be resolved; see
        :func:`~sfquery.config.resolve_secrets`.
        """
        return cls(
            login_url=config.login_url,
            version=config.version,
            client_id=config.client_id,
            client_secret=config.client_secret,
            username=config.username,
            password=config.password,
            attempt_limit=config.attempt_limit,
            http_client=http_client,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
        )

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SessionClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying transport if this session created it."""
        if self._owns_client:
            self._client.close()

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def attempt_limit(self) -> int:
        """How many times a failed query may be retried."""
        return self._attempt_limit

    @attempt_limit.setter
    def attempt_limit(self, value: int) -> None:
        if value < 0:
            raise InvalidUsageError(f"attempt_limit must be 0 or greater, got {value}")
        self._attempt_limit = value

    @property
    def credential(self) -> Optional[Credential]:
        """The cached credential, or ``None`` before the first login."""
        return self._credential

    def set_credential(self, credential: Credential) -> None:
        """Replace the cached credential, e.g. with one issued elsewhere."""
        self._credential = credential

    def clear_credential(self) -> None:
        """Drop the cached credential so the next query logs in again."""
        self._credential = None

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def authenticate(self) -> Credential:
        """Log in now and cache the issued credential.

        Returns:
            The new :class:`~sfquery.models.Credential`.

        Raises:
            AuthError: If the login server refused the grant or replied
                with an unreadable body.
            NetworkError: If the login server could not be reached.
        """
        credential = self._authenticator.authenticate(
            self._login_url,
            self._client_id,
            self._client_secret,
            self._username,
            self._password,
        )
        self._credential = credential
        return credential

    def query(self, query: str) -> QueryResult:
        """Run *query*, logging in first if needed.

        Up to ``attempt_limit + 1`` attempts are made. Each attempt
        authenticates when no credential is cached, then executes the
        query. A 401 from the query service evicts the credential; every
        other failure keeps it.

        Args:
            query: The query text, unescaped.

        Returns:
            The decoded :class:`~sfquery.models.QueryResult`.

        Raises:
            AuthError: The last attempt failed while logging in.
            QueryError: The last attempt failed while querying.
            NetworkError: The last attempt could not reach the server.
        """
        output = get_output()
        attempt = 0
        while True:
            try:
                return self._attempt(query)
            except _RETRYABLE as exc:
                if isinstance(exc, QueryAPIError) and exc.status_code == 401:
                    output.debug("Credential rejected (HTTP 401), discarding it")
                    self._credential = None

                if attempt >= self._attempt_limit:
                    raise

                attempt += 1
                output.debug(
                    f"Query failed: {exc}, retrying "
                    f"(attempt {attempt}/{self._attempt_limit})"
                )

    def _attempt(self, query: str) -> QueryResult:
        """One pass of login-if-needed followed by the query itself."""
        credential = self._credential
        if credential is None:
            credential = self.authenticate()
        return self._executor.execute(credential, query)
