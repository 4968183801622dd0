"""Password hashing and single-use token generation."""

import logging
import secrets
from typing import Optional

import bcrypt
from flask import current_app, has_app_context

from .exceptions import PasswordAuthenticationFailed

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10
MAX_PASSWORD_BYTES = 72
"""bcrypt ignores everything past the 72nd byte of a password."""


def _rounds() -> int:
    if has_app_context():
        return int(current_app.config.get('BCRYPT_ROUNDS', DEFAULT_ROUNDS))
    return DEFAULT_ROUNDS


def is_too_long(password: str) -> bool:
    """Whether ``password`` exceeds what bcrypt will actually hash."""
    return len(password.encode('utf-8')) > MAX_PASSWORD_BYTES


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """
    Generate a salted bcrypt hash of a password.

    Parameters
    ----------
    password : str
        Password (as entered).
    rounds : int
        bcrypt work factor. Defaults to ``BCRYPT_ROUNDS`` from the application
        config, or 10 outside of an application context.

    Returns
    -------
    str
        The hash in modular crypt format (``$2b$10$...``).

    """
    if is_too_long(password):
        raise ValueError('Password is too long')
    salt = bcrypt.gensalt(rounds=rounds or _rounds())
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('ascii')


def check_password(password: str, encrypted: Optional[str]) -> bool:
    """
    Check a password against a stored hash.

    Raises
    ------
    :class:`PasswordAuthenticationFailed`
        If there is no stored hash, or the password does not match it.

    """
    if not encrypted:
        raise PasswordAuthenticationFailed('No password set')
    if is_too_long(password):
        raise PasswordAuthenticationFailed('Password is too long')
    try:
        matches = bcrypt.checkpw(password.encode('utf-8'),
                                 encrypted.encode('ascii'))
    except ValueError as e:     # Malformed hash in the database.
        logger.error('Stored password hash is not valid bcrypt: %s', e)
        raise PasswordAuthenticationFailed('Invalid hash') from e
    if not matches:
        raise PasswordAuthenticationFailed('Incorrect password')
    return True


def generate_token(nbytes: int = 32) -> str:
    """A random, hex-encoded token for e-mail verification or reset links."""
    return secrets.token_hex(nbytes)
