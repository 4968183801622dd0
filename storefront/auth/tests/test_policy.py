"""Tests for :mod:`storefront.auth.policy`."""

from unittest import TestCase

from ..policy import Access, classify, is_admin, is_public


class TestClassify(TestCase):
    """Paths are public, require a session, or require an admin."""

    def test_public_routes(self):
        for path in ['/', '/signin', '/signup', '/api/auth/signin',
                     '/api/auth/session', '/api/auth/signout',
                     '/api/auth/verify-email', '/api/status']:
            self.assertEqual(classify(path), Access.PUBLIC, path)

    def test_public_patterns(self):
        for path in ['/product/abc-123', '/category/shirts',
                     '/api/products', '/api/products/1234',
                     '/api/billboards/x', '/api/auth/reset-password/ab12',
                     '/logo.png', '/static/app.js',
                     '/api/store-1/products', '/api/store-1/sizes/99']:
            self.assertTrue(is_public(path), path)

    def test_exact_routes_only(self):
        """Exact public routes do not make their subpaths public."""
        self.assertEqual(classify('/signin/extra'), Access.AUTHENTICATED)
        self.assertEqual(classify('/product/a/b'), Access.AUTHENTICATED)

    def test_protected(self):
        for path in ['/account', '/api/auth/profile',
                     '/api/auth/addresses', '/api/stores']:
            self.assertEqual(classify(path), Access.AUTHENTICATED, path)

    def test_admin(self):
        for path in ['/admin', '/admin/users', '/api/admin/users']:
            self.assertEqual(classify(path), Access.ADMIN, path)
        self.assertTrue(is_admin('/administrator'))
        self.assertFalse(is_admin('/api/auth/admin'))

    def test_admin_catalog_not_public(self):
        """The store-scoped catalog pattern does not reach into admin."""
        self.assertEqual(classify('/api/admin/products'), Access.ADMIN)
