"""Helpers shared by the storefront test suites."""

from typing import Tuple

from storefront import domain
from storefront.services import users

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'CREATE_DB': True,
    'JWT_SECRET': 'foosecret',
    'BCRYPT_ROUNDS': 4,
    'MAIL_SERVER': '',
    'LOGJSON': False,
}
"""In-memory database, cheap hashes and a fixed signing secret."""

PASSWORD = 'correct horse'


def make_user(email: str = 'first@last.iv', password: str = PASSWORD,
              verified: bool = True,
              role: domain.Role = domain.Role.CUSTOMER,
              name: str = 'First Last') -> Tuple[domain.User, str]:
    """Register a user. Must be called in an application context."""
    return users.register(email, password, name=name, role=role,
                          verified=verified)
