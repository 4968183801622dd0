"""Application factory for the storefront service."""

import logging
from typing import Any, Mapping, Optional

from flask import Flask
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers import Response

from . import auth
from .app_logging import setup_logger
from .auth.middleware import RouteAuthorizationMiddleware
from .exceptions import InternalError, error_body
from .routes import admin_api, auth_api, store_api
from .services import database, mail

logger = logging.getLogger(__name__)


def handle_http_exception(error: HTTPException) -> Any:
    """Render werkzeug HTTP exceptions (including ours) as JSON."""
    return error_body(error), error.code or 500


def handle_unexpected_exception(error: Exception) -> Response:
    """Log anything unhandled, and answer with a generic 500."""
    logger.exception('Unhandled exception: %s', error)
    return InternalError().get_response()


def create_web_app(config: Optional[Mapping] = None) -> Flask:
    """
    Initialize and configure the storefront application.

    Parameters
    ----------
    config : mapping
        Overrides for the values in :mod:`.config`, applied before any
        extension is initialized. Mostly useful for tests.

    """
    app = Flask('storefront')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)

    setup_logger(app.config['LOGLEVEL'], json=app.config['LOGJSON'])

    database.init_app(app)
    mail.init_app(app)
    auth.Auth(app)  # Attaches the session to each request.

    app.register_blueprint(auth_api.blueprint)
    app.register_blueprint(admin_api.blueprint)
    app.register_blueprint(store_api.blueprint)

    app.register_error_handler(HTTPException, handle_http_exception)
    app.register_error_handler(Exception, handle_unexpected_exception)

    app.wsgi_app = RouteAuthorizationMiddleware(  # type: ignore
        app.wsgi_app, app.config
    )

    if app.config['CREATE_DB']:
        with app.app_context():
            database.create_all()

    return app
