"""Middleware that enforces the route authorization policy."""

import logging
from typing import Callable, Iterable, Mapping, Optional
from urllib.parse import urlencode

from werkzeug.utils import redirect
from werkzeug.wrappers import Request, Response

from . import cookies, policy, tokens
from .exceptions import ConfigurationError, InvalidToken
from .. import domain

logger = logging.getLogger(__name__)


class RouteAuthorizationMiddleware(object):
    """
    Gatekeeper for every request, applied before the application runs.

    - Public paths (see :mod:`.policy`) are passed through untouched.
    - For everything else the session cookie must carry a valid token.
      Otherwise the client is redirected to the sign-in page, with the
      requested path as ``returnUrl``. If a token was present but could not
      be verified, the cookie is cleared on the redirect.
    - Admin paths also require the ADMIN role. Other users are redirected to
      the home page.

    A verified session is attached to the WSGI environ as ``session``, where
    :class:`.Auth` picks it up. This middleware never raises: any failure to
    verify a token is treated like an invalid token.
    """

    def __init__(self, wsgi_app: Callable, config: Mapping) -> None:
        """
        Wrap ``wsgi_app``.

        Parameters
        ----------
        wsgi_app : callable
            The WSGI application being protected.
        config : mapping
            Application config. Read on every request.

        """
        self.app = wsgi_app
        self.config = config

    def _redirect_to_signin(self, path: str, clear: bool) -> Response:
        signin = self.config.get('SIGNIN_PATH', '/signin')
        response = redirect(f'{signin}?{urlencode({"returnUrl": path})}')
        if clear:
            cookies.clear_session_cookie(response, self.config)
        return response

    def _verify(self, token: str) -> domain.Session:
        secret = self.config.get('JWT_SECRET')
        if not secret:
            raise ConfigurationError('Missing JWT_SECRET')
        return tokens.decode(token, secret)

    def __call__(self, environ: dict,
                 start_response: Callable) -> Iterable[bytes]:
        """Classify the request, and let it through or redirect it."""
        environ['session'] = None
        request = Request(environ)
        path = request.path
        access = policy.classify(path)
        if access is policy.Access.PUBLIC:
            return self.app(environ, start_response)

        token: Optional[str] = request.cookies.get(
            cookies.cookie_name(self.config)
        )
        if not token:
            logger.debug('No session token for %s', path)
            return self._redirect_to_signin(path, clear=False)(
                environ, start_response
            )
        try:
            session = self._verify(token)
        except InvalidToken as e:
            logger.info('Session token rejected: %s', e)
            return self._redirect_to_signin(path, clear=True)(
                environ, start_response
            )
        except Exception as e:
            logger.exception('Unexpected error verifying session: %s', e)
            return self._redirect_to_signin(path, clear=True)(
                environ, start_response
            )

        if access is policy.Access.ADMIN and not session.is_admin:
            logger.info('User %s is not an admin; denied %s',
                        session.user_id, path)
            home = self.config.get('HOME_PATH', '/')
            return redirect(home)(environ, start_response)

        environ['session'] = session
        return self.app(environ, start_response)
