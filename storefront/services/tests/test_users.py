"""Tests for :mod:`storefront.services.users`."""

from datetime import datetime, timedelta
from unittest import TestCase, mock

from pytz import UTC

from ... import domain
from ...factory import create_web_app
from ...tests.util import TEST_CONFIG, PASSWORD, make_user
from .. import passwords, users
from ..database import transaction
from ..exceptions import AuthenticationFailed, EmailAlreadyExists, \
    InvalidToken, NoSuchUser
from ..models import DBUser


class UsersTestCase(TestCase):
    """Each test gets a fresh in-memory database."""

    def setUp(self):
        self.app = create_web_app(TEST_CONFIG)
        self.ctx = self.app.app_context()
        self.ctx.push()

    def tearDown(self):
        self.ctx.pop()

    def _db_user(self, email: str) -> DBUser:
        with transaction() as session:
            return session.query(DBUser).filter(DBUser.email == email).one()


class TestRegister(UsersTestCase):
    """Tests for :func:`.users.register`."""

    def test_register(self):
        """A new account is an unverified customer with a bcrypt hash."""
        user, token = users.register('Alice@Example.com', 'password123',
                                     name='Alice')
        self.assertEqual(user.email, 'alice@example.com')
        self.assertEqual(user.role, domain.Role.CUSTOMER)
        self.assertFalse(user.is_verified)
        self.assertEqual(len(token), 64, 'Token is 32 bytes, hex encoded')

        db_user = self._db_user('alice@example.com')
        self.assertEqual(db_user.verification_token, token)
        self.assertNotEqual(db_user.password_hash, 'password123')
        self.assertTrue(passwords.check_password('password123',
                                                 db_user.password_hash))

    def test_public_user_has_no_secrets(self):
        """The domain user never carries credentials or tokens."""
        user, _ = users.register('alice@example.com', 'password123')
        for field in ('password', 'password_hash', 'verification_token',
                      'reset_token', 'reset_token_expiry'):
            self.assertNotIn(field, user._fields)

    def test_duplicate_email(self):
        """A second registration with the same address is refused."""
        first, _ = users.register('alice@example.com', 'password123',
                                  name='Alice')
        with self.assertRaises(EmailAlreadyExists):
            users.register('ALICE@example.com', 'otherpassword',
                           name='Mallory')

        db_user = self._db_user('alice@example.com')
        self.assertEqual(db_user.id, first.id)
        self.assertEqual(db_user.name, 'Alice')
        self.assertTrue(passwords.check_password('password123',
                                                 db_user.password_hash))

    @mock.patch(f'{users.__name__}._get_db_user_by_email')
    def test_lost_race(self, mock_lookup):
        """The unique constraint catches a concurrent registration."""
        mock_lookup.return_value = None
        users.register('alice@example.com', 'password123')
        with self.assertRaises(EmailAlreadyExists):
            users.register('alice@example.com', 'password123')

    def test_verified_registration(self):
        """Accounts created verified get no verification token."""
        user, token = make_user(role=domain.Role.ADMIN)
        self.assertTrue(user.is_verified)
        self.assertTrue(user.is_admin)
        self.assertIsNone(token)


class TestAuthenticate(UsersTestCase):
    """Tests for :func:`.users.authenticate`."""

    def setUp(self):
        super().setUp()
        self.user, _ = make_user()

    def test_correct(self):
        user = users.authenticate('First@Last.iv', PASSWORD)
        self.assertEqual(user.id, self.user.id)

    def test_wrong_password(self):
        with self.assertRaises(AuthenticationFailed) as wrong:
            users.authenticate('first@last.iv', 'notthepassword')
        with self.assertRaises(AuthenticationFailed) as unknown:
            users.authenticate('nobody@last.iv', PASSWORD)
        self.assertEqual(str(wrong.exception), str(unknown.exception))

    def test_no_password(self):
        """An account without a password hash cannot sign in."""
        with transaction() as session:
            db_user = session.get(DBUser, self.user.id)
            db_user.password_hash = None
        with self.assertRaises(AuthenticationFailed):
            users.authenticate('first@last.iv', PASSWORD)


class TestVerifyEmail(UsersTestCase):
    """Tests for :func:`.users.verify_email`."""

    def test_verify(self):
        """The token verifies the account, and can be used only once."""
        user, token = make_user(verified=False)
        verified = users.verify_email(token)
        self.assertEqual(verified.id, user.id)
        self.assertTrue(verified.is_verified)
        with self.assertRaises(InvalidToken):
            users.verify_email(token)

    def test_unknown_token(self):
        with self.assertRaises(InvalidToken):
            users.verify_email('f' * 64)
        with self.assertRaises(InvalidToken):
            users.verify_email('')

    def test_renew(self):
        """A new token replaces the old one."""
        _, old = make_user(verified=False)
        _, new = users.renew_verification_token('first@last.iv')
        self.assertNotEqual(old, new)
        with self.assertRaises(InvalidToken):
            users.verify_email(old)
        self.assertTrue(users.verify_email(new).is_verified)

    def test_renew_verified(self):
        """Verified accounts do not get a new token."""
        make_user(verified=True)
        with self.assertRaises(NoSuchUser):
            users.renew_verification_token('first@last.iv')


class TestResetPassword(UsersTestCase):
    """Tests for password reset tokens."""

    def setUp(self):
        super().setUp()
        self.user, _ = make_user()

    def test_reset(self):
        """The new password works, the old one doesn't, the token is used."""
        _, token = users.create_reset_token('first@last.iv', 3600)
        users.reset_password(token, 'brand new password')
        users.authenticate('first@last.iv', 'brand new password')
        with self.assertRaises(AuthenticationFailed):
            users.authenticate('first@last.iv', PASSWORD)
        with self.assertRaises(InvalidToken):
            users.reset_password(token, 'yet another password')

    def test_expired(self):
        _, token = users.create_reset_token('first@last.iv', 3600)
        with transaction() as session:
            db_user = session.get(DBUser, self.user.id)
            db_user.reset_token_expiry = datetime.now(UTC) \
                - timedelta(seconds=1)
        with self.assertRaises(InvalidToken):
            users.reset_password(token, 'brand new password')

    def test_unknown_address(self):
        with self.assertRaises(NoSuchUser):
            users.create_reset_token('nobody@last.iv', 3600)


class TestUpdateProfile(UsersTestCase):
    """Tests for :func:`.users.update_profile`."""

    def test_update(self):
        user, _ = make_user()
        updated = users.update_profile(user.id, name='New Name',
                                       email='New@Last.iv', phone='555-1234')
        self.assertEqual(updated.name, 'New Name')
        self.assertEqual(updated.email, 'new@last.iv')
        self.assertEqual(updated.phone, '555-1234')
        self.assertEqual(users.get_user(user.id), updated)

    def test_email_taken(self):
        user, _ = make_user()
        make_user(email='other@last.iv')
        with self.assertRaises(EmailAlreadyExists):
            users.update_profile(user.id, name='First',
                                 email='other@last.iv')

    def test_no_such_user(self):
        with self.assertRaises(NoSuchUser):
            users.get_user('nope')
