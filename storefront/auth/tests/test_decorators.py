"""Tests for :mod:`storefront.auth.decorators`."""

from datetime import datetime, timedelta
from unittest import TestCase, mock

from flask import Flask
from pytz import UTC

from .. import decorators
from ... import domain
from ...exceptions import AuthenticationError, AuthorizationError


def _session(role=domain.Role.CUSTOMER):
    now = datetime.now(tz=UTC)
    return domain.Session(user_id='1234', email='first@last.iv', role=role,
                          issued_at=now, expires_at=now + timedelta(days=1))


class TestScoped(TestCase):
    """Tests for :func:`.decorators.scoped`."""

    def setUp(self):
        """Push a request context so ``mock.patch`` can inspect the proxy."""
        self.ctx = Flask(__name__).test_request_context()
        self.ctx.push()
        self.addCleanup(self.ctx.pop)

    @mock.patch(f'{decorators.__name__}.request')
    def test_no_session(self, mock_request):
        """No session is present on the request."""
        mock_request.auth = None

        @decorators.scoped()
        def protected():
            """A protected function."""

        with self.assertRaises(AuthenticationError):
            protected()

    @mock.patch(f'{decorators.__name__}.request')
    def test_role_is_missing(self, mock_request):
        """Session does not have the required role."""
        mock_request.auth = _session()

        @decorators.scoped(domain.Role.ADMIN)
        def protected():
            """A protected function."""

        with self.assertRaises(AuthorizationError):
            protected()

    @mock.patch(f'{decorators.__name__}.request')
    def test_role_is_present(self, mock_request):
        mock_request.auth = _session(domain.Role.ADMIN)

        @decorators.scoped(domain.Role.ADMIN)
        def protected():
            """A protected function."""
            return 'ok'

        self.assertEqual(protected(), 'ok')

    @mock.patch(f'{decorators.__name__}.request')
    def test_authorizer(self, mock_request):
        """The authorizer gets the session and the route arguments."""
        mock_request.auth = _session()
        authorizer = mock.MagicMock(return_value=False)

        @decorators.scoped(authorizer=authorizer)
        def protected(store_id):
            """A protected function."""
            return store_id

        with self.assertRaises(AuthorizationError):
            protected(store_id='store-1')
        authorizer.assert_called_once_with(mock_request.auth,
                                           store_id='store-1')

        authorizer.return_value = True
        self.assertEqual(protected(store_id='store-1'), 'store-1')
