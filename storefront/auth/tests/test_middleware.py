"""Tests for :class:`storefront.auth.middleware.RouteAuthorizationMiddleware`."""

from datetime import datetime, timedelta
from unittest import TestCase
from urllib.parse import parse_qs, urlparse

from pytz import UTC
from werkzeug.test import Client
from werkzeug.wrappers import Request, Response

from .. import tokens
from ..middleware import RouteAuthorizationMiddleware
from ... import domain

CONFIG = {
    'JWT_SECRET': 'foosecret',
    'AUTH_SESSION_COOKIE_NAME': 'auth_token',
    'SIGNIN_PATH': '/signin',
    'HOME_PATH': '/',
}


@Request.application
def inner_app(request: Request) -> Response:
    """Reports the session that the middleware attached."""
    session = request.environ.get('session')
    return Response(session.user_id if session else 'anonymous')


class TestRouteAuthorization(TestCase):
    """The middleware lets requests through or redirects them."""

    def setUp(self):
        self.client = Client(RouteAuthorizationMiddleware(inner_app, CONFIG),
                             use_cookies=False)

    def _token(self, role=domain.Role.CUSTOMER, duration=3600, now=None):
        user = domain.User(id='1234', email='first@last.iv', role=role)
        session = tokens.create_session(user, duration, now=now)
        return tokens.encode(session, CONFIG['JWT_SECRET'])

    def _get(self, path, token=None):
        headers = {'Cookie': f'auth_token={token}'} if token else {}
        return self.client.get(path, headers=headers)

    def _assert_signin_redirect(self, response, path):
        self.assertEqual(response.status_code, 302)
        location = urlparse(response.headers['Location'])
        self.assertEqual(location.path, '/signin')
        self.assertEqual(parse_qs(location.query), {'returnUrl': [path]})

    def _cleared(self, response):
        return any(header.startswith('auth_token=;')
                   or header.startswith('auth_token="";')
                   for header in response.headers.getlist('Set-Cookie'))

    def test_public_path(self):
        """Public paths need no session."""
        response = self._get('/api/auth/signin')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_data(as_text=True), 'anonymous')

    def test_public_path_with_bad_token(self):
        """Public paths are not checked at all."""
        response = self._get('/product/foo', token='garbage')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(self._cleared(response))

    def test_no_token(self):
        """Protected paths without a token go to the sign-in page."""
        response = self._get('/account/orders')
        self._assert_signin_redirect(response, '/account/orders')
        self.assertFalse(self._cleared(response))

    def test_invalid_token(self):
        """A token that cannot be verified is cleared on the redirect."""
        response = self._get('/account', token='garbage')
        self._assert_signin_redirect(response, '/account')
        self.assertTrue(self._cleared(response))

    def test_expired_token(self):
        past = datetime.now(UTC) - timedelta(days=2)
        response = self._get('/account', token=self._token(now=past))
        self._assert_signin_redirect(response, '/account')
        self.assertTrue(self._cleared(response))

    def test_valid_token(self):
        response = self._get('/account', token=self._token())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_data(as_text=True), '1234')

    def test_customer_on_admin_path(self):
        """Non-admins are sent home from admin paths."""
        response = self._get('/admin/users', token=self._token())
        self.assertEqual(response.status_code, 302)
        self.assertEqual(urlparse(response.headers['Location']).path, '/')

    def test_admin_on_admin_path(self):
        response = self._get('/api/admin/users',
                             token=self._token(role=domain.Role.ADMIN))
        self.assertEqual(response.status_code, 200)

    def test_admin_path_without_token(self):
        """Authentication is checked before the role."""
        self._assert_signin_redirect(self._get('/admin'), '/admin')

    def test_missing_secret(self):
        """Misconfiguration is treated like an invalid token."""
        client = Client(RouteAuthorizationMiddleware(inner_app, {}),
                        use_cookies=False)
        response = client.get('/account',
                              headers={'Cookie': f'auth_token={self._token()}'})
        self._assert_signin_redirect(response, '/account')
