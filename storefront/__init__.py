"""
Storefront accounts and catalog service.

The storefront service is a Flask application that provides the JSON API used
by the customer-facing storefront and by store administrators. It has two
responsibilities.

Accounts
--------
Customers can create an account, verify their e-mail address, sign in and sign
out, reset a forgotten password, and manage their profile, shipping addresses,
favorite products and orders.

When a user signs in, they are issued a signed session token (a JWT carrying
the user id, e-mail address and role) in the form of an HTTP-only cookie.
There is no server-side session table: the token itself is the only source of
truth about an authenticated request, and it remains valid until it expires.
Signing out removes the cookie from the browser.

Every request passes through :class:`.auth.middleware.RouteAuthorizationMiddleware`
before it reaches the application. The middleware classifies the requested path
as public, protected or admin-only (see :mod:`.auth.policy`) and redirects
anonymous or under-privileged requests before any view runs.

Catalog
-------
Each store has billboards, categories, sizes, colors and products (with images
and size/color variants). The storefront reads the catalog anonymously; writes
are restricted to the user that owns the store.
"""
