"""Authentication for sfquery.

The login server issues bearer credentials through the OAuth2 *password*
grant. :class:`Authenticator` performs one exchange per call and classifies
refusals with :class:`~sfquery.models.AuthFailure`; caching and
re-authentication are the job of
:class:`~sfquery.client.session.SessionClient`.

Typical usage::

    from sfquery.auth import Authenticator

    credential = Authenticator(http_client).authenticate(
        login_url, client_id, client_secret, username, password,
    )
"""

from sfquery.auth.token import Authenticator

__all__ = ["Authenticator"]
