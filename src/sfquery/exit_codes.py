"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~sfquery.exceptions.SfQueryError` subclass, so shell
wrappers can tell a rejected login from an unreachable server without
parsing stderr.

Example::

    $ sfquery query "SELECT Id FROM Account"
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the login server refused the credentials
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or the configuration is unusable."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""The login server rejected the credentials or sent an unreadable reply."""

EXIT_QUERY_FAILURE = 4
"""The query service reported an error or sent an unreadable reply."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
