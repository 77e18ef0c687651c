"""sfquery -- an OAuth2-authenticated client for record-query REST APIs.

The package authenticates against a login endpoint with the OAuth2
*password* grant, caches the resulting bearer credential, and issues
queries against the instance returned by the login server. When the
server stops accepting the credential, the client re-authenticates and
retries up to a configurable number of attempts.

Typical usage::

    from sfquery.client import SessionClient

    with SessionClient(login_url, "v20.0", client_id, secret, user, pwd) as client:
        result = client.query("SELECT Id FROM Account")
        print(result.total_size, result.records)

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for wire payloads and configuration.
    config: XDG-aware TOML configuration loading.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
