"""Query client module for sfquery.

Classes:
    :class:`QueryExecutor` -- sends one authenticated query and classifies
    the response.
    :class:`SessionClient` -- caches the credential, re-authenticates after
    a 401, and retries failed queries up to a configurable limit.

Example::

    from sfquery.client import SessionClient

    with SessionClient.from_config(config) as client:
        result = client.query("SELECT Id FROM Account")
"""

from sfquery.client.query import QueryExecutor, build_query_url
from sfquery.client.session import SessionClient

__all__ = ["QueryExecutor", "SessionClient", "build_query_url"]
