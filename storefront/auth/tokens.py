"""Functions for working with signed session tokens."""

import logging
from datetime import datetime, timedelta
from typing import Optional

import jwt
from pytz import UTC

from . import exceptions
from .. import domain

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'


def create_session(user: domain.User, duration: int,
                   now: Optional[datetime] = None) -> domain.Session:
    """Build the claims for a new session lasting ``duration`` seconds."""
    # JWT timestamps have one-second resolution.
    issued_at = (now or datetime.now(tz=UTC)).replace(microsecond=0)
    return domain.Session(
        user_id=user.id,
        email=user.email,
        role=user.role,
        issued_at=issued_at,
        expires_at=issued_at + timedelta(seconds=duration)
    )


def encode(session: domain.Session, secret: str) -> str:
    """Encode session information as a signed JWT."""
    claims = {
        'userId': session.user_id,
        'email': session.email,
        'role': session.role.value,
        'iat': int(session.issued_at.timestamp()),
        'exp': int(session.expires_at.timestamp())
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode(token: str, secret: str) -> domain.Session:
    """
    Decode a session token.

    Raises
    ------
    :class:`.exceptions.InvalidToken`
        If the signature does not match, ``exp`` is missing or in the past,
        or the claims do not describe a session.

    """
    try:
        data: dict = jwt.decode(token, secret, algorithms=[ALGORITHM],
                                options={'require': ['exp', 'iat']})
    except jwt.exceptions.ExpiredSignatureError as e:
        raise exceptions.InvalidToken('Token has expired') from e
    except jwt.exceptions.InvalidTokenError as e:
        raise exceptions.InvalidToken('Not a valid token') from e

    try:
        return domain.Session(
            user_id=str(data['userId']),
            email=data['email'],
            role=domain.Role(data['role']),
            issued_at=datetime.fromtimestamp(data['iat'], tz=UTC),
            expires_at=datetime.fromtimestamp(data['exp'], tz=UTC)
        )
    except (KeyError, ValueError, TypeError) as e:
        raise exceptions.InvalidToken('Token claims are malformed') from e
