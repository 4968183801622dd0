"""Set and unset the session cookie on a response."""

import logging
from datetime import datetime
from typing import Mapping

from pytz import UTC
from werkzeug.wrappers import Response

logger = logging.getLogger(__name__)


def _params(config: Mapping) -> dict:
    params = dict(
        path=config.get('AUTH_SESSION_COOKIE_PATH', '/'),
        httponly=True,
        samesite=config.get('AUTH_SESSION_COOKIE_SAMESITE', 'Strict')
    )
    if config.get('AUTH_SESSION_COOKIE_SECURE'):
        params['secure'] = True
    return params


def cookie_name(config: Mapping) -> str:
    """Name of the session cookie."""
    return config.get('AUTH_SESSION_COOKIE_NAME', 'auth_token')


def set_session_cookie(response: Response, token: str, max_age: int,
                       config: Mapping) -> None:
    """
    Put a session token on ``response``.

    Parameters
    ----------
    response : :class:`Response`
    token : str
        Signed session token.
    max_age : int
        Lifetime of the cookie in seconds. This should match the ``exp`` of
        the token.
    config : dict
        Application config (``AUTH_SESSION_COOKIE_*``).

    """
    logger.debug('Set session cookie, max_age %i', max_age)
    response.set_cookie(cookie_name(config), token, max_age=max_age,
                        **_params(config))


def clear_session_cookie(response: Response, config: Mapping) -> None:
    """Tell the browser to discard the session cookie."""
    response.set_cookie(cookie_name(config), '', max_age=0,
                        expires=datetime.now(UTC), **_params(config))
