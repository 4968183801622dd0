"""Tests for :mod:`storefront.services.passwords`."""

from unittest import TestCase

from hypothesis import given, settings
from hypothesis import strategies as st

from .. import passwords
from ..exceptions import PasswordAuthenticationFailed


class TestHashPassword(TestCase):
    """Passwords are stored as bcrypt hashes."""

    def test_hash_is_bcrypt(self):
        """The hash is in modular crypt format with the requested cost."""
        encrypted = passwords.hash_password('thepassword', rounds=4)
        self.assertTrue(encrypted.startswith('$2b$04$'))
        self.assertNotIn('thepassword', encrypted)

    def test_default_work_factor(self):
        """Outside of an application, the work factor is 10."""
        self.assertEqual(passwords._rounds(), 10)

    def test_hashes_are_salted(self):
        """The same password hashes differently every time."""
        self.assertNotEqual(passwords.hash_password('thepassword', rounds=4),
                            passwords.hash_password('thepassword', rounds=4))

    def test_too_long(self):
        """bcrypt would silently truncate passwords past 72 bytes."""
        self.assertTrue(passwords.is_too_long('a' * 73))
        self.assertTrue(passwords.is_too_long('é' * 37))
        self.assertFalse(passwords.is_too_long('a' * 72))
        with self.assertRaises(ValueError):
            passwords.hash_password('a' * 73, rounds=4)


class TestCheckPassword(TestCase):
    """Tests for :func:`.passwords.check_password`."""

    def setUp(self):
        self.encrypted = passwords.hash_password('thepassword', rounds=4)

    def test_correct_password(self):
        self.assertTrue(passwords.check_password('thepassword',
                                                 self.encrypted))

    def test_wrong_password(self):
        with self.assertRaises(PasswordAuthenticationFailed):
            passwords.check_password('notthepassword', self.encrypted)

    def test_no_stored_hash(self):
        """Accounts without a password cannot authenticate with one."""
        with self.assertRaises(PasswordAuthenticationFailed):
            passwords.check_password('thepassword', None)

    def test_malformed_hash(self):
        with self.assertRaises(PasswordAuthenticationFailed):
            passwords.check_password('thepassword', 'not-a-bcrypt-hash')

    @settings(max_examples=10, deadline=None)
    @given(st.text(min_size=1, max_size=24).filter(
        lambda s: '\x00' not in s
    ))
    def test_only_the_same_password_matches(self, other):
        """Any other password is rejected."""
        if other == 'thepassword':
            return
        with self.assertRaises(PasswordAuthenticationFailed):
            passwords.check_password(other, self.encrypted)


class TestGenerateToken(TestCase):
    """Verification and reset tokens."""

    def test_token(self):
        token = passwords.generate_token(32)
        self.assertEqual(len(token), 64)
        int(token, 16)      # Hex encoded.
        self.assertNotEqual(token, passwords.generate_token(32))
