"""Tests for :mod:`storefront.auth.tokens`."""

from datetime import datetime, timedelta
from unittest import TestCase

import jwt
from pytz import UTC

from .. import tokens
from ..exceptions import InvalidToken
from ... import domain

SECRET = 'foosecret'


class TestSessionTokens(TestCase):
    """Sessions are encoded as HS256 JWTs."""

    def setUp(self):
        self.user = domain.User(id='1234', email='first@last.iv',
                                role=domain.Role.CUSTOMER)

    def test_encode_decode(self):
        """The claims survive a trip through the token."""
        session = tokens.create_session(self.user, 86400)
        decoded = tokens.decode(tokens.encode(session, SECRET), SECRET)
        self.assertEqual(decoded, session)
        self.assertEqual(decoded.expires_at - decoded.issued_at,
                         timedelta(days=1))

    def test_remember_me(self):
        """A 30-day session expires 30 days after it is issued."""
        now = datetime(2026, 1, 1, 12, 0, 0, 123, tzinfo=UTC)
        session = tokens.create_session(self.user, 2592000, now=now)
        self.assertEqual(session.issued_at, now.replace(microsecond=0))
        self.assertEqual(session.expires_at,
                         datetime(2026, 1, 31, 12, 0, 0, tzinfo=UTC))

    def test_claims(self):
        """The payload carries exactly the session claims."""
        session = tokens.create_session(self.user, 60)
        claims = jwt.decode(tokens.encode(session, SECRET), SECRET,
                            algorithms=['HS256'])
        self.assertEqual(set(claims), {'userId', 'email', 'role', 'iat',
                                       'exp'})
        self.assertEqual(claims['role'], 'CUSTOMER')
        self.assertEqual(claims['exp'] - claims['iat'], 60)

    def test_expired(self):
        past = datetime.now(UTC) - timedelta(days=2)
        session = tokens.create_session(self.user, 86400, now=past)
        with self.assertRaises(InvalidToken):
            tokens.decode(tokens.encode(session, SECRET), SECRET)

    def test_wrong_secret(self):
        session = tokens.create_session(self.user, 60)
        with self.assertRaises(InvalidToken):
            tokens.decode(tokens.encode(session, 'notthesecret'), SECRET)

    def test_missing_expiry(self):
        """Tokens without ``exp`` are never accepted."""
        token = jwt.encode({'userId': '1234', 'email': 'first@last.iv',
                            'role': 'CUSTOMER', 'iat': 1},
                           SECRET, algorithm='HS256')
        with self.assertRaises(InvalidToken):
            tokens.decode(token, SECRET)

    def test_unknown_role(self):
        now = int(datetime.now(UTC).timestamp())
        token = jwt.encode({'userId': '1234', 'email': 'first@last.iv',
                            'role': 'ROOT', 'iat': now, 'exp': now + 60},
                           SECRET, algorithm='HS256')
        with self.assertRaises(InvalidToken):
            tokens.decode(token, SECRET)

    def test_garbage(self):
        with self.assertRaises(InvalidToken):
            tokens.decode('definitelynotatoken', SECRET)
