"""Single authenticated query call against the query service.

:class:`QueryExecutor` sends one ``GET`` to
``{instance_url}services/data/{version}/query?q=...`` with the credential's
access token in an ``Authorization: Bearer`` header, and classifies the
reply:

- **200** -- decoded as :class:`~sfquery.models.QueryResult`.
- **any other status** -- decoded as :class:`~sfquery.models.QueryFailure`
  with the observed status attached, raised as
  :class:`~sfquery.exceptions.QueryAPIError`.
- **unreadable body** -- :class:`~sfquery.exceptions.QueryResponseParseError`.
- **transport failure** -- :class:`~sfquery.exceptions.NetworkError`.

The executor attaches status codes but does not act on them; deciding that
a 401 means "credential expired" is left to
:class:`~sfquery.client.session.SessionClient`.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx
from pydantic import ValidationError

from sfquery.exceptions import (
    InvalidUsageError,
    NetworkError,
    QueryAPIError,
    QueryResponseParseError,
)
from sfquery.models import Credential, QueryFailure, QueryResult

API_BASE = "services/data/"
"""Path from an instance URL to the versioned REST API root."""


def build_query_url(instance_url: str, version: str, query: str) -> str:
    """Return the URL that runs *query* on the given instance.

    The query text is percent-encoded in full, so spaces, quotes and ``&``
    survive the trip. A missing trailing slash on *instance_url* is added.

    Example::

        >>> build_query_url("https://na1.example.com", "v20.0", "SELECT Id FROM Account")
        'https://na1.example.com/services/data/v20.0/query?q=SELECT%20Id%20FROM%20Account'

    Raises:
        InvalidUsageError: If *query* cannot be encoded as UTF-8 (for
            example undecodable command-line bytes).
    """
    try:
        escaped = quote(query, safe="")
    except UnicodeEncodeError as exc:
        raise InvalidUsageError(f"Query text is not valid UTF-8: {exc.reason}") from exc
    base = instance_url.rstrip("/") + "/"
    return f"{base}{API_BASE}{version}/query?q={escaped}"


class QueryExecutor:
    """Issue one query per call and classify the response.

    Args:
        client: The :class:`httpx.Client` used to reach the instance.
        version: REST API version segment, e.g. ``"v20.0"``.
    """

    def __init__(self, client: httpx.Client, version: str) -> None:
        self._client = client
        self._version = version

    @property
    def version(self) -> str:
        """The REST API version queries are sent to."""
        return self._version

    def execute(self, credential: Credential, query: str) -> QueryResult:
        """Run *query* with *credential* and return the decoded result.

        Args:
            credential: The bearer credential; its ``instance_url`` selects
                the server.
            query: The query text, unescaped.

        Returns:
            The :class:`~sfquery.models.QueryResult` of a 200 response.

        Raises:
            QueryAPIError: On any non-200 status with a readable error body.
            QueryResponseParseError: If the body matches no expected shape.
            NetworkError: If the request could not be completed, including
                when the credential's ``instance_url`` is not a valid URL.
            InvalidUsageError: If *query* cannot be encoded.
        """
        url = build_query_url(credential.instance_url, self._version, query)
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {credential.access_token}",
        }

        try:
            response = self._client.get(url, headers=headers)
        except httpx.InvalidURL as exc:
            # instance_url comes from the login server, not from the caller.
            raise NetworkError(
                f"Invalid instance URL {credential.instance_url!r}: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Query request failed: {exc}") from exc

        status = response.status_code
        if status == httpx.codes.OK:
            try:
                return QueryResult.model_validate_json(response.content)
            except ValidationError as exc:
                raise QueryResponseParseError(status) from exc

        try:
            failure = QueryFailure.from_wire(response.content, status)
        except ValidationError as exc:
            raise QueryResponseParseError(status) from exc
        raise QueryAPIError(failure)
