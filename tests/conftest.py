"""Shared test fixtures for sfquery.

Provides a fake login/query server behind :class:`httpx.MockTransport`,
isolated config environments, output-state management, and a CLI runner.
These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator, Union

import httpx
import pytest

from sfquery.output import OutputManager, reset_output, set_output


LOGIN_URL = "https://login.example.com/services/oauth2/token"
INSTANCE_URL = "https://na1.example.com/instance/"
ACCESS = (
    "00Dx0000000BV7z!AR8AQAxo9UfVkh8AlV0Gomt9Czx9LjHnSSpwBMmbRcgKFmxOtvxjTrKW19ye6PE3"
    "Ds1eQz3z8jr3W7_VbWmEu4Q8TVGSTHxs"
)

Body = Union[dict[str, Any], list[Any], str, bytes]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _quiet_output() -> Iterator[None]:
    """Install a quiet, colourless OutputManager and reset it afterwards."""
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake server
# ---------------------------------------------------------------------------


class FakeAPI:
    """Mock transport handler standing in for the login and query servers.

    ``POST`` requests are answered from the auth queue and ``GET`` requests
    from the query queue. Each queue hands out its responses in order and
    repeats the last one once exhausted. Every request is recorded.
    """

    login_url = LOGIN_URL
    instance_url = INSTANCE_URL
    access = ACCESS

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._auth: list[tuple[int, Body]] = [(200, self.token_body())]
        self._query: list[tuple[int, Body]] = [(200, self.query_body())]

    # --- configuration ---

    def on_auth(self, *responses: tuple[int, Body]) -> None:
        self._auth = list(responses)

    def on_query(self, *responses: tuple[int, Body]) -> None:
        self._query = list(responses)

    # --- recorded traffic ---

    @property
    def auth_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def query_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    # --- transport handler ---

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._auth if request.method == "POST" else self._query
        status, body = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        if isinstance(body, str):
            body = body.encode()
        return httpx.Response(status, content=body)

    # --- wire bodies ---

    @staticmethod
    def token_body(access_token: str = ACCESS, instance_url: str = INSTANCE_URL) -> dict[str, Any]:
        return {
            "id": "https://login.example.com/id/00Dx0000000BV7z/005x00000012Q9P",
            "issued_at": "1278448832702",
            "instance_url": instance_url,
            "signature": "0CmxinZir53Yex7nE0TD+zMpvIWYGb/bdJh6XfOH6EQ=",
            "access_token": access_token,
            "token_type": "Bearer",
        }

    @staticmethod
    def token_error(code: str, description: str = "mock error") -> dict[str, Any]:
        return {"error": code, "error_description": description}

    @staticmethod
    def query_body(
        records: list[Any] | None = None,
        total_size: int | None = None,
        done: bool = True,
    ) -> dict[str, Any]:
        if records is None:
            records = [{"id": "12345"}]
        return {
            "total_size": len(records) if total_size is None else total_size,
            "done": done,
            "records": records,
        }

    @staticmethod
    def query_error(message: str = "Token is expired", fields: list[str] | None = None) -> dict[str, Any]:
        return {"fields": fields or [], "message": message}


@pytest.fixture
def fake_api() -> FakeAPI:
    """A fresh fake server answering with a valid token and one record."""
    return FakeAPI()


@pytest.fixture
def http_client(fake_api: FakeAPI) -> Iterator[httpx.Client]:
    """An :class:`httpx.Client` wired to :func:`fake_api`."""
    with httpx.Client(transport=httpx.MockTransport(fake_api)) as client:
        yield client


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at subdirectories of tmp_path, clears all
    SFQUERY_* environment variables and changes the working directory to
    tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("sfquery.config._is_xdg_platform", lambda: True)
    for var in ["SFQUERY_CONFIG", "SFQUERY_LOGIN_URL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_config(isolated_config: Path):
    """Return a helper that writes a TOML config file and returns its path."""

    def _write(name: str = "config.toml", **overrides: Any) -> Path:
        values: dict[str, Any] = {
            "login_url": LOGIN_URL,
            "version": "v20.0",
            "client_id": "id",
            "client_secret": "secret",
            "username": "user",
            "password": "pass",
        }
        values.update(overrides)
        lines = [f"{key} = {json.dumps(value)}" for key, value in values.items()]
        path = isolated_config / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
