"""Typer application and CLI entry point for sfquery.

Commands:

* ``sfquery query TEXT`` -- log in, run one query and print the records.
* ``sfquery login`` -- log in once and report the instance URL, to check
  a config file before querying.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`sfquery.config`: Config file resolution.
    :mod:`sfquery.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

import typer

from sfquery import __version__
from sfquery.exceptions import SfQueryError
from sfquery.exit_codes import EXIT_GENERIC_FAILURE
from sfquery.models import ClientConfig

if TYPE_CHECKING:
    from sfquery.client import SessionClient

app = typer.Typer(
    name="sfquery",
    help="Run authenticated queries against a record-query REST API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"sfquery {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~sfquery.output.OutputManager` built from
    the output flags.
    """
    from sfquery.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )


def _load_config(config_path: Optional[str]) -> ClientConfig:
    """Resolve the config file and its secret sources."""
    from sfquery.config import resolve_config, resolve_secrets

    return resolve_secrets(resolve_config(config_path))


def _make_client(config: ClientConfig) -> SessionClient:
    """Build the session used by the commands. Replaced in tests."""
    from sfquery.client import SessionClient

    return SessionClient.from_config(config)


def _fail(exc: SfQueryError) -> typer.Exit:
    from sfquery.output import error

    error(str(exc))
    return typer.Exit(code=exc.exit_code)


@app.command("query")
def query_command(
    query: str = typer.Argument(help="Query to run against the API."),
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to config file."
    ),
    attempts: Optional[int] = typer.Option(
        None,
        "--attempts",
        min=0,
        help="Retries allowed after a failed attempt (overrides the config).",
    ),
) -> None:
    """Run QUERY and print the matching records.

    Records go to stdout; the record count and completion status go to
    stderr.

    Example::

        sfquery query "SELECT Id, Name FROM Account" -c config.toml
    """
    from sfquery.output import debug, format_response, info, warning

    try:
        config = _load_config(config_path)
        if attempts is not None:
            config = config.model_copy(update={"attempt_limit": attempts})
        debug(f"Querying {config.login_url} (API {config.version})")

        with _make_client(config) as client:
            result = client.query(query)
    except SfQueryError as exc:
        raise _fail(exc) from None

    format_response(result.records)
    info(f"{result.total_size} record(s) matched")
    if not result.done:
        warning("More records match than were returned in this response.")


@app.command("login")
def login_command(
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to config file."
    ),
) -> None:
    """Log in once to check the configured credentials.

    Prints the instance URL the login server assigned. The access token is
    never printed.
    """
    from sfquery.output import print_data, success

    try:
        config = _load_config(config_path)
        with _make_client(config) as client:
            credential = client.authenticate()
    except SfQueryError as exc:
        raise _fail(exc) from None

    success(f"Authenticated as {config.username}")
    print_data(credential.instance_url)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from sfquery.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``sfquery`` console script.

    :class:`~sfquery.exceptions.SfQueryError` instances that escape a
    command cause a clean exit with the error's ``exit_code``. All other
    exceptions produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from sfquery.output import error

        if isinstance(exc, SfQueryError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
