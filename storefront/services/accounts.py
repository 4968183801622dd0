"""Per-user account data: addresses, favorites, orders and session snapshot."""

import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from .. import domain
from .database import transaction
from .exceptions import NoSuchResource, NoSuchUser
from .models import DBAddress, DBFavorite, DBOrder, DBProduct, DBUser

logger = logging.getLogger(__name__)

RECENT_ORDERS = 5
"""Number of orders included in a session snapshot."""

ADDRESS_FIELDS = ('name', 'line1', 'line2', 'city', 'state', 'postal_code',
                  'country', 'is_default')


def session_summary(user_id: str) -> Tuple[domain.User, int, int,
                                           List[domain.OrderSummary]]:
    """
    Load what the session endpoint reports about a user.

    Returns
    -------
    :class:`.domain.User`
    int
        Number of saved addresses.
    int
        Number of favorite products.
    list
        Up to five most recent orders, newest first.

    Raises
    ------
    :class:`NoSuchUser`

    """
    with transaction() as session:
        db_user = session.get(DBUser, user_id)
        if db_user is None:
            raise NoSuchUser(f'No user with id {user_id}')
        address_count = session.query(DBAddress) \
            .filter(DBAddress.user_id == user_id) \
            .count()
        favorite_count = session.query(DBFavorite) \
            .filter(DBFavorite.user_id == user_id) \
            .count()
        recent = session.query(DBOrder) \
            .filter(DBOrder.user_id == user_id) \
            .order_by(DBOrder.created_at.desc()) \
            .limit(RECENT_ORDERS) \
            .all()
        orders = [domain.OrderSummary(id=o.id, is_paid=bool(o.is_paid),
                                      is_sent=bool(o.is_sent))
                  for o in recent]
        return db_user.to_domain(), address_count, favorite_count, orders


# Addresses.

def list_addresses(user_id: str) -> List[domain.Address]:
    """A user's addresses, default first."""
    with transaction() as session:
        return [a.to_domain() for a in session.query(DBAddress)
                .filter(DBAddress.user_id == user_id)
                .order_by(DBAddress.is_default.desc(),
                          DBAddress.created_at.desc())]


def _clear_default(session: Any, user_id: str,
                   keep: Optional[str] = None) -> None:
    query = session.query(DBAddress) \
        .filter(DBAddress.user_id == user_id) \
        .filter(DBAddress.is_default.is_(True))
    for db_address in query:
        if db_address.id != keep:
            db_address.is_default = False
            session.add(db_address)


def _get_own_address(session: Any, user_id: str,
                     address_id: str) -> DBAddress:
    db_address = session.get(DBAddress, address_id)
    # Other users' addresses are indistinguishable from missing ones.
    if db_address is None or db_address.user_id != user_id:
        raise NoSuchResource('Address not found')
    return db_address


def add_address(user_id: str, **fields: Any) -> domain.Address:
    """
    Save a new address for a user.

    If the address is marked as default, any other default address of the
    user loses that flag.
    """
    with transaction() as session:
        if fields.get('is_default'):
            _clear_default(session, user_id)
        db_address = DBAddress(
            user_id=user_id,
            **{k: v for k, v in fields.items() if k in ADDRESS_FIELDS}
        )
        session.add(db_address)
        session.flush()
        return db_address.to_domain()


def update_address(user_id: str, address_id: str,
                   **fields: Any) -> domain.Address:
    """
    Update one of the user's addresses.

    Raises
    ------
    :class:`NoSuchResource`
        If the address does not exist or belongs to somebody else.

    """
    with transaction() as session:
        db_address = _get_own_address(session, user_id, address_id)
        if fields.get('is_default'):
            _clear_default(session, user_id, keep=address_id)
        for key, value in fields.items():
            if key in ADDRESS_FIELDS:
                setattr(db_address, key, value)
        session.add(db_address)
        session.flush()
        return db_address.to_domain()


def delete_address(user_id: str, address_id: str) -> None:
    """Delete one of the user's addresses."""
    with transaction() as session:
        session.delete(_get_own_address(session, user_id, address_id))


# Favorites.

def list_favorites(user_id: str) -> List[domain.Product]:
    """Products the user has marked as favorites, most recent first."""
    with transaction() as session:
        query = session.query(DBFavorite) \
            .filter(DBFavorite.user_id == user_id) \
            .order_by(DBFavorite.created_at.desc())
        return [favorite.product.to_domain() for favorite in query]


def _get_favorite(session: Any, user_id: str,
                  product_id: str) -> Optional[DBFavorite]:
    return session.query(DBFavorite) \
        .filter(DBFavorite.user_id == user_id) \
        .filter(DBFavorite.product_id == product_id) \
        .first()


def add_favorite(user_id: str, product_id: str) -> domain.Product:
    """
    Mark a product as a favorite. Adding the same product twice is a no-op.

    Raises
    ------
    :class:`NoSuchResource`
        If the product does not exist.

    """
    try:
        with transaction() as session:
            db_product = session.get(DBProduct, product_id)
            if db_product is None:
                raise NoSuchResource('Product not found')
            product = db_product.to_domain()
            if _get_favorite(session, user_id, product_id) is None:
                session.add(DBFavorite(user_id=user_id,
                                       product_id=product_id))
                session.flush()
    except IntegrityError:
        # A concurrent request may have saved the same favorite first.
        with transaction() as session:
            if _get_favorite(session, user_id, product_id) is None:
                raise
        logger.debug('Favorite %s of user %s already saved', product_id,
                     user_id)
    return product


def remove_favorite(user_id: str, product_id: str) -> None:
    """Un-favorite a product. Removing a non-favorite is a no-op."""
    with transaction() as session:
        session.query(DBFavorite) \
            .filter(DBFavorite.user_id == user_id) \
            .filter(DBFavorite.product_id == product_id) \
            .delete()


# Orders.

def list_orders(user_id: str) -> List[domain.Order]:
    """The user's orders with their items, newest first."""
    with transaction() as session:
        return [o.to_domain() for o in session.query(DBOrder)
                .filter(DBOrder.user_id == user_id)
                .order_by(DBOrder.created_at.desc())]
