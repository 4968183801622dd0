"""
Controllers for storefront accounts: sign-up, sign-in, sign-out and session.

When a user signs in they are issued a signed session token, which the route
sets as an HTTP-only cookie in their browser. The token carries the user id,
e-mail address and role, and is verified on every subsequent request. Nothing
about the session is kept on the server: signing out only removes the cookie,
and a copy of the token taken before sign-out keeps working until it expires.

Controllers return ``(data, status, headers)``. Where a cookie must be set or
removed, ``data`` carries a ``cookies`` key that the route pops and applies to
the response.
"""

import logging
from typing import Optional, Tuple

from flask import current_app
from retry import retry

from .. import domain
from ..auth import tokens
from ..auth.exceptions import InvalidToken as InvalidSessionToken
from ..exceptions import AuthenticationError, ConflictError, \
    UnverifiedError, ValidationError
from ..next_page import good_next_page
from ..services import accounts, mail, users
from ..services.exceptions import AuthenticationFailed, EmailAlreadyExists, \
    InvalidToken, MailDeliveryFailed, NoSuchUser, Unavailable
from .forms import CREDENTIALS_REQUIRED, PASSWORD_RULES, EmailForm, \
    ResetPasswordForm, SignInForm, SignUpForm, form_errors, to_multidict

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]

SIGNUP_MESSAGE = 'Account created successfully. Please verify your email.'
SIGNIN_MESSAGE = 'Authentication successful'
SIGNOUT_MESSAGE = 'Signed out successfully'
RESEND_MESSAGE = ('If an unverified account exists for this address, a new'
                  ' verification email has been sent.')
RESET_REQUEST_MESSAGE = ('If an account exists for this address, a password'
                         ' reset link has been sent.')
INVALID_VERIFICATION_TOKEN = 'Invalid or expired verification token'
INVALID_RESET_TOKEN = 'Invalid or expired reset token'


def signup(payload: Optional[dict]) -> ResponseData:
    """
    Create a new, unverified customer account.

    Parameters
    ----------
    payload : dict
        JSON body with ``name``, ``email``, ``password``,
        ``confirmPassword`` and optionally ``phone``.

    Returns
    -------
    dict
        The new user, and a message asking them to verify their e-mail.
    int
        201 Created.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`.ValidationError`
    :class:`.ConflictError`
        If the e-mail address is already in use.

    """
    form = SignUpForm(to_multidict(payload))
    if not form.validate():
        logger.debug('Sign-up form is not valid')
        raise ValidationError(form_errors(form, PASSWORD_RULES))

    try:
        user, token = _do_register(form)
    except EmailAlreadyExists as e:
        logger.debug('Sign-up for an existing address: %s', e)
        raise ConflictError('Email already in use') from e

    _send_verification(user.email, token)
    data = {'user': domain.to_dict(user), 'message': SIGNUP_MESSAGE}
    return data, 201, {}


def signin(payload: Optional[dict]) -> ResponseData:
    """
    Authenticate a user, and issue a session token.

    Parameters
    ----------
    payload : dict
        JSON body with ``email``, ``password``, and optionally ``rememberMe``
        and ``returnUrl``.

    Returns
    -------
    dict
        The user, a message, where to go next (``redirectTo``), and the
        session cookie to set.
    int
        200 OK.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`.ValidationError`
        If the e-mail address or password is missing.
    :class:`.AuthenticationError`
        Unknown address and wrong password look exactly the same.
    :class:`.UnverifiedError`
        If the credentials are right but the address is not verified.

    """
    form = SignInForm(to_multidict(payload))
    if not form.validate():
        raise ValidationError(CREDENTIALS_REQUIRED)

    try:
        user = _do_authn(form.email.data, form.password.data)
    except AuthenticationFailed as e:
        logger.debug('Authentication failed: %s', e)
        raise AuthenticationError('Invalid email or password') from e

    if not user.is_verified:
        logger.debug('User %s is not verified', user.id)
        raise UnverifiedError()

    config = current_app.config
    duration = config['REMEMBER_ME_DURATION'] if form.remember_me.data \
        else config['SESSION_DURATION']
    session = tokens.create_session(user, duration)
    token = tokens.encode(session, config['JWT_SECRET'])
    logger.info('User %s signed in', user.id)
    data = {
        'user': domain.to_dict(user),
        'message': SIGNIN_MESSAGE,
        'redirectTo': good_next_page(form.return_url.data or ''),
        'cookies': {'auth_session_cookie': (token, duration)}
    }
    return data, 200, {}


def signout() -> ResponseData:
    """Remove the session cookie. Always succeeds."""
    data = {
        'success': True,
        'message': SIGNOUT_MESSAGE,
        'cookies': {'auth_session_cookie': ('', 0)}
    }
    return data, 200, {}


def get_session(token: Optional[str]) -> ResponseData:
    """
    Describe the session carried by the request, if any.

    Parameters
    ----------
    token : str or None
        Value of the session cookie.

    Returns
    -------
    dict
        ``{"user": null}`` if there is no valid session. Otherwise the user
        with counts of their addresses and favorites and their most recent
        orders, plus when the session ``expires``. If a cookie was sent but
        is no good, the cookie is removed.
    int
        200 OK.
    dict
        Headers to add to the response.

    """
    if not token:
        return {'user': None}, 200, {}

    clear = {'user': None, 'cookies': {'auth_session_cookie': ('', 0)}}
    try:
        session = tokens.decode(token, current_app.config['JWT_SECRET'])
    except InvalidSessionToken as e:
        logger.debug('Invalid session token: %s', e)
        return clear, 200, {}

    try:
        user, address_count, favorite_count, orders = \
            _do_session_summary(session.user_id)
    except NoSuchUser as e:
        logger.info('Session for a user that no longer exists: %s', e)
        return clear, 200, {}

    view = domain.SessionView(user=user, address_count=address_count,
                              favorite_count=favorite_count,
                              recent_orders=orders,
                              expires=session.expires_at)
    data = domain.to_dict(view)
    # The snapshot is flattened into the user object.
    user_data = data.pop('user')
    user_data.update(data)
    return {'user': user_data, 'expires': user_data.pop('expires')}, 200, {}


def verify_email(token: Optional[str]) -> ResponseData:
    """
    Mark an e-mail address as verified.

    Raises
    ------
    :class:`.ValidationError`
        If the token is unknown or already used.

    """
    try:
        user = _do_verify(token or '')
    except InvalidToken as e:
        logger.debug('Verification failed: %s', e)
        raise ValidationError(INVALID_VERIFICATION_TOKEN) from e
    data = {'message': 'Email verified successfully',
            'user': domain.to_dict(user)}
    return data, 200, {}


def resend_verification(payload: Optional[dict]) -> ResponseData:
    """
    Send a new verification e-mail.

    The response does not reveal whether the address belongs to an account.
    """
    form = EmailForm(to_multidict(payload))
    if not form.validate():
        raise ValidationError(form_errors(form))
    try:
        user, token = _do_renew_verification(form.email.data)
    except NoSuchUser:
        logger.debug('No unverified account to re-send verification for')
    else:
        _send_verification(user.email, token)
    return {'message': RESEND_MESSAGE}, 200, {}


def request_password_reset(payload: Optional[dict]) -> ResponseData:
    """
    Send a password reset link.

    The response does not reveal whether the address belongs to an account.
    """
    form = EmailForm(to_multidict(payload))
    if not form.validate():
        raise ValidationError(form_errors(form))
    duration = current_app.config['RESET_TOKEN_DURATION']
    try:
        user, token = _do_create_reset_token(form.email.data, duration)
    except NoSuchUser:
        logger.debug('Password reset requested for unknown address')
    else:
        try:
            mail.send_password_reset(user.email, token)
        except MailDeliveryFailed as e:
            logger.error('Could not send password reset e-mail: %s', e)
    return {'message': RESET_REQUEST_MESSAGE}, 200, {}


def reset_password(token: str, payload: Optional[dict]) -> ResponseData:
    """
    Choose a new password with a reset token.

    Raises
    ------
    :class:`.ValidationError`
        If the new password is not acceptable, or the token is unknown,
        already used or expired.

    """
    form = ResetPasswordForm(to_multidict(payload))
    if not form.validate():
        raise ValidationError(form_errors(form, PASSWORD_RULES))
    try:
        _do_reset_password(token, form.password.data)
    except InvalidToken as e:
        logger.debug('Password reset failed: %s', e)
        raise ValidationError(INVALID_RESET_TOKEN) from e
    return {'message': 'Password has been reset successfully'}, 200, {}


def _send_verification(email: str, token: Optional[str]) -> None:
    if token is None:
        return
    try:
        mail.send_verification(email, token)
    except MailDeliveryFailed as e:
        # The account exists; the user can ask for the e-mail again.
        logger.error('Could not send verification e-mail: %s', e)


# These are broken out to add retry logic.
@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_register(form: SignUpForm) -> Tuple[domain.User, Optional[str]]:
    return users.register(
        email=form.email.data,
        password=form.password.data,
        name=form.name.data,
        phone=form.phone.data,
        token_bytes=current_app.config['VERIFICATION_TOKEN_BYTES']
    )


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_authn(email: str, password: str) -> domain.User:
    return users.authenticate(email, password)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_session_summary(user_id: str) -> tuple:
    return accounts.session_summary(user_id)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_verify(token: str) -> domain.User:
    return users.verify_email(token)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_renew_verification(email: str) -> Tuple[domain.User, str]:
    return users.renew_verification_token(
        email, token_bytes=current_app.config['VERIFICATION_TOKEN_BYTES']
    )


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_create_reset_token(email: str,
                           duration: int) -> Tuple[domain.User, str]:
    return users.create_reset_token(
        email, duration,
        token_bytes=current_app.config['VERIFICATION_TOKEN_BYTES']
    )


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_reset_password(token: str, password: str) -> domain.User:
    return users.reset_password(token, password)
