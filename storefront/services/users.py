"""
Credential store: account creation, authentication and single-use tokens.

All functions here work on :class:`.models.DBUser` rows but only ever hand
:class:`.domain.User` instances back to the caller, so password hashes and
tokens never leave this module unless explicitly returned (e.g. a freshly
generated verification token, which the caller must e-mail to the user).

E-mail addresses are stored lower-cased, and looked up case-insensitively.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from pytz import UTC
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from .. import domain
from . import passwords
from .database import transaction
from .exceptions import AuthenticationFailed, EmailAlreadyExists, \
    InvalidToken, NoSuchUser, PasswordAuthenticationFailed
from .models import DBUser

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Canonical form of an e-mail address for storage and lookup."""
    return email.strip().lower()


def _get_db_user_by_email(session, email: str) -> Optional[DBUser]:
    return session.query(DBUser) \
        .filter(func.lower(DBUser.email) == normalize_email(email)) \
        .first()


def email_exists(email: str) -> bool:
    """Determine whether or not an e-mail address already exists in the DB."""
    with transaction() as session:
        return _get_db_user_by_email(session, email) is not None


def get_user(user_id: str) -> domain.User:
    """
    Get a user by id.

    Raises
    ------
    :class:`NoSuchUser`

    """
    with transaction() as session:
        db_user = session.get(DBUser, user_id)
        if db_user is None:
            raise NoSuchUser(f'No user with id {user_id}')
        return db_user.to_domain()


def list_users() -> List[domain.User]:
    """All accounts, newest first."""
    with transaction() as session:
        return [db_user.to_domain() for db_user
                in session.query(DBUser).order_by(DBUser.created_at.desc())]


def register(email: str, password: str, name: Optional[str] = None,
             phone: Optional[str] = None,
             role: domain.Role = domain.Role.CUSTOMER,
             verified: bool = False,
             token_bytes: int = 32) -> Tuple[domain.User, Optional[str]]:
    """
    Add a new user to the database.

    Parameters
    ----------
    email : str
    password : str
        Plain text; only its bcrypt hash is stored.
    name : str
    phone : str
    role : :class:`.domain.Role`
    verified : bool
        Accounts created by the public sign-up flow are never verified.
    token_bytes : int
        Size of the e-mail verification token.

    Returns
    -------
    :class:`.domain.User`
    str or None
        The verification token that must be sent to the user, or ``None`` if
        the account is created verified.

    Raises
    ------
    :class:`EmailAlreadyExists`
        Also raised if a concurrent registration wins the race to the unique
        constraint on ``users.email``.

    """
    token = None if verified else passwords.generate_token(token_bytes)
    try:
        with transaction() as session:
            if _get_db_user_by_email(session, email) is not None:
                raise EmailAlreadyExists('Email already in use')
            db_user = DBUser(
                email=normalize_email(email),
                name=name,
                phone=phone or None,
                password_hash=passwords.hash_password(password),
                role=role,
                is_verified=verified,
                verification_token=token
            )
            session.add(db_user)
            session.flush()
            user = db_user.to_domain()
    except IntegrityError as e:
        logger.info('Lost registration race for a new account')
        raise EmailAlreadyExists('Email already in use') from e
    logger.info('Registered user %s', user.id)
    return user, token


def authenticate(email: str, password: str) -> domain.User:
    """
    Validate e-mail and password. If successful, retrieve user details.

    Unknown addresses, accounts without a password and wrong passwords are
    indistinguishable to the caller. Whether the account is verified is left
    to the caller to decide.

    Raises
    ------
    :class:`AuthenticationFailed`

    """
    with transaction() as session:
        db_user = _get_db_user_by_email(session, email)
        if db_user is None:
            logger.debug('No such user')
            raise AuthenticationFailed('Invalid email or password')
        try:
            passwords.check_password(password, db_user.password_hash)
        except PasswordAuthenticationFailed as e:
            logger.debug('Password check failed for %s: %s', db_user.id, e)
            raise AuthenticationFailed('Invalid email or password') from e
        return db_user.to_domain()


def verify_email(token: str) -> domain.User:
    """
    Consume an e-mail verification token.

    Raises
    ------
    :class:`InvalidToken`
        If no account holds this token (including if it was already used).

    """
    if not token:
        raise InvalidToken('Missing token')
    with transaction() as session:
        db_user = session.query(DBUser) \
            .filter(DBUser.verification_token == token) \
            .first()
        if db_user is None:
            raise InvalidToken('Unknown verification token')
        db_user.is_verified = True
        db_user.verification_token = None
        session.add(db_user)
        session.flush()
        logger.info('Verified e-mail address of user %s', db_user.id)
        return db_user.to_domain()


def renew_verification_token(email: str, token_bytes: int = 32) \
        -> Tuple[domain.User, str]:
    """
    Replace the verification token of an unverified account.

    Raises
    ------
    :class:`NoSuchUser`
        If there is no unverified account with this address.

    """
    with transaction() as session:
        db_user = _get_db_user_by_email(session, email)
        if db_user is None or db_user.is_verified:
            raise NoSuchUser('No unverified user with that e-mail address')
        token = passwords.generate_token(token_bytes)
        db_user.verification_token = token
        session.add(db_user)
        return db_user.to_domain(), token


def create_reset_token(email: str, duration: int = 3600,
                       token_bytes: int = 32) -> Tuple[domain.User, str]:
    """
    Issue a password reset token, valid for ``duration`` seconds.

    Any earlier reset token of the account stops working.

    Raises
    ------
    :class:`NoSuchUser`

    """
    with transaction() as session:
        db_user = _get_db_user_by_email(session, email)
        if db_user is None:
            raise NoSuchUser('No user with that e-mail address')
        token = passwords.generate_token(token_bytes)
        db_user.reset_token = token
        db_user.reset_token_expiry = datetime.now(tz=UTC) \
            + timedelta(seconds=duration)
        session.add(db_user)
        return db_user.to_domain(), token


def reset_password(token: str, password: str) -> domain.User:
    """
    Set a new password using a reset token, and burn the token.

    Raises
    ------
    :class:`InvalidToken`
        If the token is unknown or expired.

    """
    if not token:
        raise InvalidToken('Missing token')
    with transaction() as session:
        db_user = session.query(DBUser) \
            .filter(DBUser.reset_token == token) \
            .first()
        if db_user is None:
            raise InvalidToken('Unknown reset token')
        expiry = db_user.reset_token_expiry
        if expiry is None or expiry <= datetime.now(tz=UTC):
            raise InvalidToken('Reset token has expired')
        db_user.password_hash = passwords.hash_password(password)
        db_user.reset_token = None
        db_user.reset_token_expiry = None
        session.add(db_user)
        session.flush()
        logger.info('Password reset for user %s', db_user.id)
        return db_user.to_domain()


def update_profile(user_id: str, name: str, email: str,
                   phone: Optional[str] = None,
                   image: Optional[str] = None) -> domain.User:
    """
    Update the editable parts of an account.

    Raises
    ------
    :class:`NoSuchUser`
    :class:`EmailAlreadyExists`
        If ``email`` belongs to another account.

    """
    try:
        with transaction() as session:
            db_user = session.get(DBUser, user_id)
            if db_user is None:
                raise NoSuchUser(f'No user with id {user_id}')
            other = _get_db_user_by_email(session, email)
            if other is not None and other.id != db_user.id:
                raise EmailAlreadyExists('Email already in use')
            db_user.name = name
            db_user.email = normalize_email(email)
            db_user.phone = phone or None
            db_user.image = image or None
            session.add(db_user)
            session.flush()
            return db_user.to_domain()
    except IntegrityError as e:
        raise EmailAlreadyExists('Email already in use') from e
