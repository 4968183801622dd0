"""
Static route authorization policy.

Every inbound path is either public, or requires an authenticated session.
Paths under one of :data:`ADMIN_PREFIXES` additionally require the ADMIN
role; that is checked only once the session is known to be valid.

The path is classified as public if it is in :data:`PUBLIC_ROUTES` (exact
match), or if it matches one of :data:`PUBLIC_PATTERNS`.
"""

import re
from enum import Enum
from typing import Pattern, Tuple

PUBLIC_ROUTES = frozenset([
    '/',
    '/signin',
    '/signup',
    '/forgot-password',
    '/reset-password',
    '/verify-email',
    '/product',
    '/category',
    '/search',
    '/api/auth/signin',
    '/api/auth/signup',
    '/api/auth/session',
    '/api/auth/signout',
    '/api/auth/verify-email',
    '/api/auth/resend-verification',
    '/api/auth/reset-password',
    '/api/status',
])

PUBLIC_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r'^/product/[\w-]+$'),
    re.compile(r'^/category/[\w-]+$'),
    re.compile(r'^/api/products(/.*)?$'),
    re.compile(r'^/api/categories(/.*)?$'),
    re.compile(r'^/api/billboards(/.*)?$'),
    # Store-scoped catalog; writes are checked by the application.
    re.compile(r'^/api/(?!auth/|admin/)[\w-]+/'
               r'(products|categories|billboards|sizes|colors|variants)'
               r'(/.*)?$'),
    re.compile(r'^/api/auth/reset-password/.+$'),
    re.compile(r'\.(jpg|jpeg|png|svg|webp|ico|css|js)$'),
)

ADMIN_PREFIXES = ('/admin', '/api/admin')


class Access(Enum):
    """What a request for a path must carry."""

    PUBLIC = 'public'
    AUTHENTICATED = 'authenticated'
    ADMIN = 'admin'


def is_public(path: str) -> bool:
    """Whether ``path`` can be requested without a session."""
    if path in PUBLIC_ROUTES:
        return True
    return any(pattern.search(path) for pattern in PUBLIC_PATTERNS)


def is_admin(path: str) -> bool:
    """Whether ``path`` is restricted to administrators."""
    return any(path.startswith(prefix) for prefix in ADMIN_PREFIXES)


def classify(path: str) -> Access:
    """Classify a request path."""
    if is_public(path):
        return Access.PUBLIC
    if is_admin(path):
        return Access.ADMIN
    return Access.AUTHENTICATED
