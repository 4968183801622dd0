"""Exceptions raised while handling session tokens."""


class InvalidToken(ValueError):
    """Token in request is not valid: bad signature, malformed or expired."""


class ConfigurationError(RuntimeError):
    """The application is not configured correctly."""
