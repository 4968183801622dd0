"""
HTTP-facing error taxonomy.

Controllers raise these; every one of them renders as a JSON body with an
``error`` string, so that the storefront can display the message next to the
offending form.
"""

from typing import Any, Iterable, Optional

from flask import jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers import Response


class APIError(HTTPException):
    """Base class for errors rendered as ``{"error": ...}``."""

    code = 500
    description = 'Internal error'

    def body(self) -> dict:
        """The JSON payload for this error."""
        return {'error': self.description}

    def get_response(self, environ: Any = None,
                     scope: Optional[dict] = None) -> Response:
        """Render the error as JSON."""
        response = jsonify(self.body())
        response.status_code = self.code
        return response


class ValidationError(APIError):
    """Missing or malformed input."""

    code = 400
    description = 'Invalid request'


class ConflictError(APIError):
    """The resource (e.g. an e-mail address) is already taken."""

    code = 409
    description = 'Email already in use'


class AuthenticationError(APIError):
    """Bad credentials, or no valid session."""

    code = 401
    description = 'Invalid email or password'


class UnverifiedError(APIError):
    """Correct credentials, but the e-mail address is not verified yet."""

    code = 403
    description = 'Please verify your email before signing in'

    def body(self) -> dict:
        """Flag the response so the client can offer to resend the e-mail."""
        return {'error': self.description, 'needsVerification': True}


class AuthorizationError(APIError):
    """Authenticated, but not allowed to do this."""

    code = 403
    description = 'Unauthorized'


class NotFoundError(APIError):
    """No such resource."""

    code = 404
    description = 'Not found'


class InternalError(APIError):
    """Anything unexpected. Details stay in the server log."""

    code = 500
    description = 'Internal error'


def error_body(exc: HTTPException) -> dict:
    """JSON payload for any werkzeug HTTP exception."""
    if isinstance(exc, APIError):
        return exc.body()
    return {'error': exc.description or exc.name}


def first_error(errors: Iterable[str], precedence: Iterable[str]) -> str:
    """Pick the message to report when a form has several errors."""
    errors = list(errors)
    for message in precedence:
        if message in errors:
            return message
    return errors[0] if errors else ValidationError.description
