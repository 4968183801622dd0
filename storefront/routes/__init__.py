"""Flask blueprints for the storefront JSON API."""

import logging
from typing import Any, Optional

from flask import current_app, jsonify, request
from werkzeug.wrappers import Response

from ..auth import cookies

logger = logging.getLogger(__name__)


def json_body() -> Optional[dict]:
    """The JSON body of the request, or ``None`` if it is missing or bad."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else None


def respond(data: Any, code: int, headers: dict) -> Response:
    """
    Render controller data as a JSON response.

    Controllers seeking to update cookies must include a ``cookies`` key in
    their response data, mapping to ``(value, max_age)``. An empty value
    removes the cookie.
    """
    cookie_data = data.pop('cookies', None) if isinstance(data, dict) \
        else None
    response = jsonify(data)
    response.status_code = code
    response.headers.extend(headers)
    for _, (value, max_age) in (cookie_data or {}).items():
        if value:
            cookies.set_session_cookie(response, value, max_age,
                                       current_app.config)
        else:
            cookies.clear_session_cookie(response, current_app.config)
    return response
