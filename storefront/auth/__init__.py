"""Provides tools for working with authenticated user sessions."""

import logging
from typing import Optional

from flask import Flask, request

from . import cookies, decorators, middleware, policy, tokens
from .exceptions import InvalidToken
from .. import domain

logger = logging.getLogger(__name__)


class Auth(object):
    """
    Attaches session information to the request as ``request.auth``.

    Intended for use in a Flask application factory, for example:

    .. code-block:: python

       from flask import Flask
       from storefront.auth import Auth


       def create_web_app() -> Flask:
          app = Flask('storefront')
          app.config.from_pyfile('config.py')
          Auth(app)
          return app

    ``request.auth`` is a :class:`.domain.Session`, or ``None`` if the request
    does not carry a valid session token.
    """

    def __init__(self, app: Optional[Flask] = None) -> None:
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Attach :meth:`.load_session` to the Flask app."""
        self.app = app
        self.app.config.setdefault('AUTH_SESSION_COOKIE_NAME', 'auth_token')
        self.app.config.setdefault('SESSION_DURATION', 86400)
        self.app.config.setdefault('REMEMBER_ME_DURATION', 2592000)
        self.app.before_request(self.load_session)

    def load_session(self) -> None:
        """
        Find the session for this request, and attach it to the request.

        On protected routes :class:`.middleware.RouteAuthorizationMiddleware`
        has already verified the token and put the session in the WSGI
        environ. Public routes are not checked by the middleware, so here we
        look at the cookie ourselves.
        """
        session: Optional[domain.Session] = request.environ.get('session')
        if session is None:
            token = request.cookies.get(cookies.cookie_name(self.app.config))
            if token:
                try:
                    session = tokens.decode(token,
                                            self.app.config['JWT_SECRET'])
                except InvalidToken as e:
                    logger.debug('Ignoring invalid session token: %s', e)
        request.auth = session
