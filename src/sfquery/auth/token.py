"""OAuth2 password-grant authenticator.

This module provides :class:`Authenticator`, which exchanges a client id,
client secret, username and password for a bearer
:class:`~sfquery.models.Credential` using the Resource Owner Password
Credentials grant (:rfc:`6749` section 4.3).

The login server's reply is decoded in a fixed order, regardless of the
HTTP status it arrives with:

1. a token record -- returned as a :class:`~sfquery.models.Credential`;
2. an error record -- raised as :class:`~sfquery.exceptions.TokenRequestError`
   carrying the classified :class:`~sfquery.models.AuthFailure`;
3. anything else -- raised as
   :class:`~sfquery.exceptions.AuthResponseParseError`.

Transport failures are raised as :class:`~sfquery.exceptions.NetworkError`.

See Also:
    :class:`sfquery.client.session.SessionClient` for credential caching
    and re-authentication.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from sfquery.exceptions import (
    AuthResponseParseError,
    InvalidLoginUrlError,
    NetworkError,
    TokenRequestError,
)
from sfquery.models import AuthFailure, Credential, TokenErrorResponse

logger = logging.getLogger(__name__)

GRANT_TYPE = "password"


class Authenticator:
    """Obtain credentials with the OAuth2 password grant.

    Every call to :meth:`authenticate` sends exactly one request; no
    caching happens here.

    Args:
        client: The :class:`httpx.Client` used to reach the login server.

    Example::

        with httpx.Client() as http:
            credential = Authenticator(http).authenticate(
                "https://login.example.com/services/oauth2/token",
                "client-id", "client-secret", "user@example.com", "hunter2",
            )
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def authenticate(
        self,
        login_url: str,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
    ) -> Credential:
        """Exchange user and client credentials for a bearer credential.

        Args:
            login_url: The token endpoint. Must not be empty.
            client_id: OAuth2 client id (consumer key).
            client_secret: OAuth2 client secret (consumer secret).
            username: Login of the user to act as.
            password: Password of the user.

        Returns:
            The issued :class:`~sfquery.models.Credential`.

        Raises:
            InvalidLoginUrlError: If *login_url* is empty or malformed. No
                request is sent.
            TokenRequestError: If the server refused the grant.
            AuthResponseParseError: If the reply matches no known shape.
            NetworkError: If the request could not be completed.
        """
        if not login_url:
            raise InvalidLoginUrlError()

        form = {
            "grant_type": GRANT_TYPE,
            "client_id": client_id,
            "client_secret": client_secret,
            "username": username,
            "password": password,
        }

        logger.debug("Requesting token from %s for %s", login_url, username)
        try:
            response = self._client.post(
                login_url,
                data=form,
                headers={"Accept": "application/json"},
            )
        except httpx.InvalidURL as exc:
            raise InvalidLoginUrlError(
                f"Supplied login url is not a valid login url: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Token request failed: {exc}") from exc

        return self._decode(response)

    def _decode(self, response: httpx.Response) -> Credential:
        """Decode a token reply as a credential, then as an error record."""
        try:
            return Credential.model_validate_json(response.content)
        except ValidationError:
            pass

        try:
            token_error = TokenErrorResponse.model_validate_json(response.content)
        except ValidationError as exc:
            logger.debug(
                "Unrecognised token response (HTTP %s)", response.status_code
            )
            raise AuthResponseParseError() from exc

        failure = AuthFailure.from_code(token_error.error)
        logger.debug("Token request refused: %s", token_error.error)
        raise TokenRequestError(failure, token_error.error_description)
