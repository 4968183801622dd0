"""Flask configuration."""
import secrets
import os

#################### General config for app ####################
STOREFRONT_ENV = os.environ.get('STOREFRONT_ENV', 'development')
"""Deployment environment. Cookies are only marked ``Secure`` in production."""

API_BASE_URL = os.environ.get('API_BASE_URL', 'http://localhost:5000/api')
"""Public base URL of this API, as seen by the storefront."""

STORE_ID = os.environ.get('STORE_ID', '')
"""Store that the customer-facing storefront is bound to."""

SIGNIN_PATH = os.environ.get('SIGNIN_PATH', '/signin')
"""Where anonymous requests for protected routes are sent."""

HOME_PATH = os.environ.get('HOME_PATH', '/')
"""Where authenticated but under-privileged requests are sent."""


#################### Session tokens ####################
JWT_SECRET = os.environ.get('JWT_SECRET', secrets.token_urlsafe(16))
"""Secret used to sign and verify session tokens."""

SESSION_DURATION = int(os.environ.get('SESSION_DURATION', '86400'))
"""Lifetime of a session in seconds (1 day)."""

REMEMBER_ME_DURATION = int(os.environ.get('REMEMBER_ME_DURATION', '2592000'))
"""Lifetime of a session in seconds when "remember me" is set (30 days)."""

AUTH_SESSION_COOKIE_NAME = os.environ.get('AUTH_SESSION_COOKIE_NAME',
                                          'auth_token')
AUTH_SESSION_COOKIE_PATH = '/'
AUTH_SESSION_COOKIE_SAMESITE = 'Strict'
AUTH_SESSION_COOKIE_SECURE = bool(int(os.environ.get(
    'AUTH_SESSION_COOKIE_SECURE',
    '1' if STOREFRONT_ENV == 'production' else '0'
)))


#################### Credentials ####################
BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', '10'))
"""bcrypt work factor for new password hashes."""

VERIFICATION_TOKEN_BYTES = 32
"""Random bytes in e-mail verification and password reset tokens."""

RESET_TOKEN_DURATION = int(os.environ.get('RESET_TOKEN_DURATION', '3600'))
"""Lifetime of a password reset token in seconds."""


#################### Database ####################
SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///storefront.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False

CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))
"""Create missing tables when the application starts."""


#################### Mail ####################
MAIL_SERVER = os.environ.get('MAIL_SERVER', '')
"""SMTP host. If not set, verification and reset links are logged instead."""

MAIL_PORT = int(os.environ.get('MAIL_PORT', '25'))
MAIL_FROM = os.environ.get('MAIL_FROM', 'no-reply@localhost')
STOREFRONT_URL = os.environ.get('STOREFRONT_URL', 'http://localhost:3000')
"""Base URL of the storefront UI, used in links sent by e-mail."""


#################### Minor configs ##############################
SECRET_KEY = os.environ.get('SECRET_KEY', secrets.token_urlsafe(16))
"""Sets the `Flask` secret key. Not used for session tokens."""

LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))
LOGJSON = bool(int(os.environ.get('LOGJSON', 1)))
"""Emit log records as JSON."""

VERSION = '0.3.0'
