"""Account routes under ``/api/auth``."""

import logging

from flask import Blueprint, current_app, request
from werkzeug.wrappers import Response

from . import json_body, respond
from ..auth.cookies import cookie_name
from ..auth.decorators import scoped
from ..controllers import account, authentication

logger = logging.getLogger(__name__)
blueprint = Blueprint('auth', __name__, url_prefix='/api/auth')


@blueprint.route('/signup', methods=['POST'])
def signup() -> Response:
    """Create an account."""
    return respond(*authentication.signup(json_body()))


@blueprint.route('/signin', methods=['POST'])
def signin() -> Response:
    """Sign in with e-mail and password; sets the session cookie."""
    payload = json_body()
    if payload is not None and 'returnUrl' not in payload \
            and request.args.get('returnUrl'):
        payload['returnUrl'] = request.args['returnUrl']
    return respond(*authentication.signin(payload))


@blueprint.route('/signout', methods=['GET', 'POST'])
def signout() -> Response:
    """Remove the session cookie."""
    return respond(*authentication.signout())


@blueprint.route('/session', methods=['GET'])
def session() -> Response:
    """Who is signed in, if anybody."""
    token = request.cookies.get(cookie_name(current_app.config))
    return respond(*authentication.get_session(token))


@blueprint.route('/verify-email', methods=['GET', 'POST'])
def verify_email() -> Response:
    """Consume an e-mail verification token."""
    token = request.args.get('token') or (json_body() or {}).get('token')
    return respond(*authentication.verify_email(token))


@blueprint.route('/resend-verification', methods=['POST'])
def resend_verification() -> Response:
    """Send another verification e-mail."""
    return respond(*authentication.resend_verification(json_body()))


@blueprint.route('/reset-password', methods=['POST'])
def request_password_reset() -> Response:
    """Send a password reset link."""
    return respond(*authentication.request_password_reset(json_body()))


@blueprint.route('/reset-password/<string:token>', methods=['POST'])
def reset_password(token: str) -> Response:
    """Choose a new password."""
    return respond(*authentication.reset_password(token, json_body()))


@blueprint.route('/profile', methods=['GET'])
@scoped()
def view_profile() -> Response:
    """The signed-in user's profile."""
    return respond(*account.view_profile(request.auth.user_id))


@blueprint.route('/profile', methods=['PUT'])
@scoped()
def edit_profile() -> Response:
    """Update the signed-in user's profile."""
    return respond(*account.edit_profile(request.auth.user_id, json_body()))


@blueprint.route('/addresses', methods=['GET'])
@scoped()
def list_addresses() -> Response:
    """The signed-in user's addresses."""
    return respond(*account.list_addresses(request.auth.user_id))


@blueprint.route('/addresses', methods=['POST'])
@scoped()
def add_address() -> Response:
    """Save a new address."""
    return respond(*account.add_address(request.auth.user_id, json_body()))


@blueprint.route('/addresses/<string:address_id>', methods=['PUT'])
@scoped()
def edit_address(address_id: str) -> Response:
    """Update an address."""
    return respond(*account.edit_address(request.auth.user_id, address_id,
                                         json_body()))


@blueprint.route('/addresses/<string:address_id>', methods=['DELETE'])
@scoped()
def delete_address(address_id: str) -> Response:
    """Delete an address."""
    return respond(*account.delete_address(request.auth.user_id,
                                           address_id))


@blueprint.route('/favorites', methods=['GET'])
@scoped()
def list_favorites() -> Response:
    """The signed-in user's favorite products."""
    return respond(*account.list_favorites(request.auth.user_id))


@blueprint.route('/favorites', methods=['POST'])
@scoped()
def add_favorite() -> Response:
    """Add a product to the favorites."""
    return respond(*account.add_favorite(request.auth.user_id, json_body()))


@blueprint.route('/favorites/<string:product_id>', methods=['DELETE'])
@scoped()
def remove_favorite(product_id: str) -> Response:
    """Remove a product from the favorites."""
    return respond(*account.remove_favorite(request.auth.user_id,
                                            product_id))


@blueprint.route('/orders', methods=['GET'])
@scoped()
def list_orders() -> Response:
    """The signed-in user's orders."""
    return respond(*account.list_orders(request.auth.user_id))
