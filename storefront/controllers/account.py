"""Controllers for the signed-in user's profile, addresses, favorites and orders."""

import logging
from typing import Optional, Tuple

from retry import retry

from .. import domain
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..services import accounts, users
from ..services.exceptions import EmailAlreadyExists, NoSuchResource, \
    NoSuchUser, Unavailable
from .forms import AddressForm, FavoriteForm, ProfileForm, form_errors, \
    to_multidict

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]


def view_profile(user_id: str) -> ResponseData:
    """The public profile of the signed-in user."""
    try:
        user = _do(users.get_user, user_id)
    except NoSuchUser as e:
        raise NotFoundError('User not found') from e
    return {'user': domain.to_dict(user)}, 200, {}


def edit_profile(user_id: str, payload: Optional[dict]) -> ResponseData:
    """
    Update name, e-mail address, phone and image.

    Raises
    ------
    :class:`.ValidationError`
    :class:`.ConflictError`
        If the new e-mail address belongs to another account.
    :class:`.NotFoundError`

    """
    form = ProfileForm(to_multidict(payload))
    if not form.validate():
        raise ValidationError(form_errors(form))
    try:
        user = _do(users.update_profile, user_id, name=form.name.data,
                   email=form.email.data, phone=form.phone.data,
                   image=form.image.data)
    except EmailAlreadyExists as e:
        raise ConflictError('Email already in use') from e
    except NoSuchUser as e:
        raise NotFoundError('User not found') from e
    logger.info('User %s updated their profile', user_id)
    return {'user': domain.to_dict(user),
            'message': 'Profile updated successfully'}, 200, {}


def list_addresses(user_id: str) -> ResponseData:
    """All of the user's addresses, default first."""
    addresses = _do(accounts.list_addresses, user_id)
    return {'addresses': [domain.to_dict(a) for a in addresses]}, 200, {}


def _address_fields(form: AddressForm) -> dict:
    return {
        'name': form.name.data,
        'line1': form.line1.data,
        'line2': form.line2.data or None,
        'city': form.city.data,
        'state': form.state.data or None,
        'postal_code': form.postal_code.data,
        'country': form.country.data,
        'is_default': bool(form.is_default.data)
    }


def add_address(user_id: str, payload: Optional[dict]) -> ResponseData:
    """Save a new address."""
    form = AddressForm(to_multidict(payload))
    if not form.validate():
        raise ValidationError(form_errors(form))
    address = _do(accounts.add_address, user_id, **_address_fields(form))
    return {'address': domain.to_dict(address)}, 201, {}


def edit_address(user_id: str, address_id: str,
                 payload: Optional[dict]) -> ResponseData:
    """Replace one of the user's addresses."""
    form = AddressForm(to_multidict(payload))
    if not form.validate():
        raise ValidationError(form_errors(form))
    try:
        address = _do(accounts.update_address, user_id, address_id,
                      **_address_fields(form))
    except NoSuchResource as e:
        raise NotFoundError('Address not found') from e
    return {'address': domain.to_dict(address)}, 200, {}


def delete_address(user_id: str, address_id: str) -> ResponseData:
    """Delete one of the user's addresses."""
    try:
        _do(accounts.delete_address, user_id, address_id)
    except NoSuchResource as e:
        raise NotFoundError('Address not found') from e
    return {'success': True}, 200, {}


def list_favorites(user_id: str) -> ResponseData:
    """The user's favorite products."""
    products = _do(accounts.list_favorites, user_id)
    return {'favorites': [domain.to_dict(p) for p in products]}, 200, {}


def add_favorite(user_id: str, payload: Optional[dict]) -> ResponseData:
    """Add a product to the user's favorites; adding it again is harmless."""
    form = FavoriteForm(to_multidict(payload))
    if not form.validate():
        raise ValidationError(form_errors(form))
    try:
        product = _do(accounts.add_favorite, user_id, form.product_id.data)
    except NoSuchResource as e:
        raise NotFoundError('Product not found') from e
    return {'favorite': domain.to_dict(product)}, 200, {}


def remove_favorite(user_id: str, product_id: str) -> ResponseData:
    """Remove a product from the user's favorites."""
    _do(accounts.remove_favorite, user_id, product_id)
    return {'success': True}, 200, {}


def list_orders(user_id: str) -> ResponseData:
    """The user's orders, newest first."""
    orders = _do(accounts.list_orders, user_id)
    return {'orders': [domain.to_dict(o) for o in orders]}, 200, {}


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do(func, *args, **kwargs):  # type: ignore
    return func(*args, **kwargs)
