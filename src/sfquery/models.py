"""Canonical Pydantic models shared across all sfquery modules.

The models fall into two groups:

**Wire models** -- the JSON shapes exchanged with the login server and the
query service:
    :class:`Credential`, :class:`TokenErrorResponse`, :class:`QueryResult`,
    and :class:`QueryFailure`, plus the :class:`AuthFailure` enumeration
    that classifies OAuth2 error codes.

**Configuration models** -- loaded from the user's TOML config file:
    :class:`ClientConfig`.

All models use Pydantic v2. Wire models ignore unknown keys so that extra
fields added by the server (``id``, ``nextRecordsUrl``, ...) never break
decoding.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# --- Authentication ---


class Credential(BaseModel):
    """A bearer credential issued by the login server.

    Instances are immutable: a session replaces its credential wholesale on
    re-authentication and never edits one field by field.

    Example::

        Credential(
            access_token="00Dx0000000BV7z!AR8AQ...",
            token_type="Bearer",
            instance_url="https://na1.example.com/",
            signature="0CmxinZir53Yex7nE0TD+zMpvIWYGb/bdJh6XfOH6EQ=",
            issued_at="1278448832702",
        )
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(repr=False)
    token_type: str
    instance_url: str = Field(description="Base URL of the instance to query")
    signature: str
    issued_at: str = Field(description="Issuance time in epoch milliseconds")


class TokenErrorResponse(BaseModel):
    """Error body returned by the login server when a grant is refused."""

    error: str
    error_description: str = ""


class AuthFailure(str, enum.Enum):
    """Closed set of reasons a password grant can be refused.

    Built from the OAuth2 ``error`` code with :meth:`from_code`. Codes
    outside the known table map to :attr:`TOKEN_UNAVAILABLE`.
    """

    INVALID_CLIENT_ID = "invalid_client_id"
    INVALID_CLIENT_SECRET = "invalid_client_credentials"
    INVALID_GRANT = "invalid_grant"
    INVALID_USER = "inactive_user"
    ORG_UNAVAILABLE = "inactive_org"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    TOKEN_UNAVAILABLE = "token_unavailable"

    @classmethod
    def from_code(cls, code: str) -> AuthFailure:
        """Map an OAuth2 ``error`` code to a failure kind.

        Args:
            code: The ``error`` value from the token error response.

        Returns:
            The matching :class:`AuthFailure`, or :attr:`TOKEN_UNAVAILABLE`
            when the code is not one the login server is known to send.
        """
        return _AUTH_FAILURE_CODES.get(code, cls.TOKEN_UNAVAILABLE)

    @property
    def description(self) -> str:
        """Human-readable explanation of the failure."""
        return _AUTH_FAILURE_DESCRIPTIONS[self]


_AUTH_FAILURE_CODES: dict[str, AuthFailure] = {
    "invalid_client_id": AuthFailure.INVALID_CLIENT_ID,
    "invalid_client_credentials": AuthFailure.INVALID_CLIENT_SECRET,
    "invalid_grant": AuthFailure.INVALID_GRANT,
    "inactive_user": AuthFailure.INVALID_USER,
    "inactive_org": AuthFailure.ORG_UNAVAILABLE,
    "rate_limit_exceeded": AuthFailure.RATE_LIMIT_EXCEEDED,
}

_AUTH_FAILURE_DESCRIPTIONS: dict[AuthFailure, str] = {
    AuthFailure.INVALID_CLIENT_ID: "The client id was not recognised by the login server",
    AuthFailure.INVALID_CLIENT_SECRET: "The client secret was rejected by the login server",
    AuthFailure.INVALID_GRANT: "The username or password is invalid",
    AuthFailure.INVALID_USER: "The user account is inactive",
    AuthFailure.ORG_UNAVAILABLE: "The organisation is inactive or unavailable",
    AuthFailure.RATE_LIMIT_EXCEEDED: "Too many login attempts, try again later",
    AuthFailure.TOKEN_UNAVAILABLE: "Failed to get token from the API",
}


# --- Query ---


class QueryResult(BaseModel):
    """A successful query response.

    ``records`` are kept as opaque JSON values in the order the server sent
    them; their schema depends on the query and is not modelled.
    """

    total_size: int = Field(ge=0, description="Number of records matching the query")
    done: bool = Field(description="Whether every matching record is in this response")
    records: list[Any] = Field(default_factory=list)


class QueryFailure(BaseModel):
    """An error reported by the query service.

    ``status_code`` never comes from the response body. It is supplied by
    the transport through :meth:`from_wire`.
    """

    message: str
    status_code: int = 0
    fields: list[str] = Field(default_factory=list)

    @classmethod
    def from_wire(cls, body: bytes, status_code: int) -> QueryFailure:
        """Decode an error body and attach the observed HTTP status.

        Args:
            body: The raw response body.
            status_code: The HTTP status the transport observed.

        Returns:
            The decoded failure with ``status_code`` set.

        Raises:
            pydantic.ValidationError: If *body* is not an error record.
        """
        wire = _QueryFailureBody.model_validate_json(body)
        return cls(message=wire.message, fields=wire.fields, status_code=status_code)


class _QueryFailureBody(BaseModel):
    """The error record exactly as it appears on the wire."""

    message: str
    fields: list[str] = Field(default_factory=list)


# --- Configuration ---


class ClientConfig(BaseModel):
    """Connection settings loaded from the TOML config file.

    Secret fields (``client_id``, ``client_secret``, ``username``,
    ``password``) may hold a literal value or a source descriptor such as
    ``env:SF_PASSWORD``; see :func:`~sfquery.config.resolve_credential`.

    Example (``config.toml``)::

        login_url = "https://login.example.com/services/oauth2/token"
        version = "v20.0"
        client_id = "env:SF_CLIENT_ID"
        client_secret = "env:SF_CLIENT_SECRET"
        username = "user@example.com"
        password = "prompt"
    """

    model_config = ConfigDict(extra="forbid")

    login_url: str
    version: str
    client_id: str
    client_secret: str
    username: str
    password: str
    attempt_limit: int = Field(default=3, ge=0, description="Retries per query")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
