"""Configuration loading with XDG paths, precedence resolution and secret sources.

This module handles all persistent configuration for sfquery:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.sfquery/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Config file** -- a TOML file deserialised into a
  :class:`~sfquery.models.ClientConfig` by :func:`load_config`.
* **Precedence resolution** -- :func:`resolve_config` picks the config file
  from the CLI flag, environment, project directory or user config
  directory, and applies environment overrides.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files or interactive prompts; :func:`resolve_secrets`
  applies it to every secret field of a config.
"""

from __future__ import annotations

import getpass
import os
import platform
import sys
import tomllib
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from sfquery.exceptions import ConfigError
from sfquery.models import ClientConfig

_APP_NAME = "sfquery"
_CONFIG_FILENAME = "config.toml"
_PROJECT_CONFIG_FILENAME = "sfquery.toml"

ENV_CONFIG = "SFQUERY_CONFIG"
ENV_LOGIN_URL = "SFQUERY_LOGIN_URL"

SECRET_FIELDS = ("client_id", "client_secret", "username", "password")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory (not created).

    On Linux/BSD: ``$XDG_CONFIG_HOME/sfquery/`` (default ``~/.config/sfquery/``).
    On macOS/Windows: ``~/.sfquery/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/sfquery/`` (default ``~/.local/share/sfquery/``).
    On macOS/Windows: ``~/.sfquery/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Config file ---


def load_config(path: Path) -> ClientConfig:
    """Load and validate a TOML config file.

    Secret fields are returned as written; call :func:`resolve_secrets`
    to turn ``env:``/``file:``/``prompt`` descriptors into values.

    Args:
        path: Path to the TOML file.

    Returns:
        The validated :class:`~sfquery.models.ClientConfig`.

    Raises:
        ConfigError: If the file does not exist, cannot be read, is not
            valid TOML, or has missing or misspelled properties.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc

    try:
        return ClientConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(
            f"Supplied config {path} could not be understood. Try checking for a "
            f"misspelled or missing property.\n{exc}"
        ) from exc


def find_config_path(cli_config: Optional[str] = None) -> Path:
    """Pick the config file to load.

    Precedence (high to low):
        1. ``--config`` CLI flag
        2. ``SFQUERY_CONFIG`` environment variable
        3. ``./sfquery.toml`` in the working directory
        4. ``config.toml`` in :func:`get_config_dir`

    Returns:
        The chosen path. It is not checked for existence unless it came
        from the project or user fallbacks.

    Raises:
        ConfigError: If no flag or env var was given and neither fallback
            file exists.
    """
    if cli_config:
        return Path(cli_config).expanduser()

    env_config = os.environ.get(ENV_CONFIG)
    if env_config:
        return Path(env_config).expanduser()

    project = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if project.is_file():
        return project

    user = get_config_dir() / _CONFIG_FILENAME
    if user.is_file():
        return user

    raise ConfigError(
        f"No config file found. Pass --config, set {ENV_CONFIG}, or create "
        f"{project} or {user}"
    )


def resolve_config(cli_config: Optional[str] = None) -> ClientConfig:
    """Find, load and override the effective configuration.

    ``SFQUERY_LOGIN_URL``, when set, replaces the file's ``login_url``.
    Secrets are left unresolved.

    Args:
        cli_config: Value of the ``--config`` flag, if given.

    Returns:
        The effective :class:`~sfquery.models.ClientConfig`.

    Raises:
        ConfigError: If no config file can be found or loaded.
    """
    config = load_config(find_config_path(cli_config))

    env_login_url = os.environ.get(ENV_LOGIN_URL)
    if env_login_url:
        config = config.model_copy(update={"login_url": env_login_url})

    return config


# --- Credential source resolution ---


def resolve_credential(value: str, name: str = "credential") -> str:
    """Resolve a secret from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts the user without echo (requires a TTY)
        - anything else -- used literally

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if value.startswith("env:"):
        var_name = value[4:]
        resolved = os.environ.get(var_name)
        if resolved is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {value})"
            )
        return resolved

    if value.startswith("file:"):
        path = Path(value[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {value})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if value == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass(f"Enter {name.replace('_', ' ')}: ")

    return value


def resolve_secrets(config: ClientConfig) -> ClientConfig:
    """Return a copy of *config* with every secret field resolved."""
    return config.model_copy(
        update={
            name: resolve_credential(getattr(config, name), name) for name in SECRET_FIELDS
        }
    )
