"""
Store-scoped catalog persistence.

Every catalog row belongs to exactly one store, and every lookup here is
filtered by store id: an id that exists in another store is treated exactly
like an id that does not exist at all.

Billboards, categories, sizes and colors are simple enough to share the
generic ``*_resource`` functions. Products (with their images and variants)
and variants have dedicated functions.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

from .. import domain
from .database import transaction
from .exceptions import InvalidReference, NoSuchResource, ResourceInUse
from .models import DBBillboard, DBCategory, DBColor, DBFavorite, DBImage, \
    DBOrderItem, DBProduct, DBSize, DBStore, DBVariant

logger = logging.getLogger(__name__)

MODELS: Dict[str, Type] = {
    'billboards': DBBillboard,
    'categories': DBCategory,
    'sizes': DBSize,
    'colors': DBColor,
    'products': DBProduct,
}

FIELDS: Dict[str, Tuple[str, ...]] = {
    'billboards': ('label', 'image_url'),
    'categories': ('name', 'billboard_id'),
    'sizes': ('name', 'value'),
    'colors': ('name', 'value'),
    'products': ('name', 'price', 'category_id', 'description',
                 'is_featured', 'is_archived'),
}

LABELS = {
    'billboards': 'Billboard',
    'categories': 'Category',
    'sizes': 'Size',
    'colors': 'Color',
    'products': 'Product',
    'variants': 'Variant',
}


def _model(resource: str) -> Type:
    try:
        return MODELS[resource]
    except KeyError as e:
        raise NoSuchResource(f'No such resource: {resource}') from e


# Stores.

def create_store(user_id: str, name: str) -> domain.Store:
    """Create a store owned by ``user_id``."""
    with transaction() as session:
        db_store = DBStore(user_id=user_id, name=name)
        session.add(db_store)
        session.flush()
        logger.info('Created store %s for user %s', db_store.id, user_id)
        return db_store.to_domain()


def list_stores(user_id: str) -> List[domain.Store]:
    """Stores owned by ``user_id``, oldest first."""
    with transaction() as session:
        return [s.to_domain() for s in session.query(DBStore)
                .filter(DBStore.user_id == user_id)
                .order_by(DBStore.created_at)]


def get_store(store_id: str) -> domain.Store:
    """
    Get a store by id.

    Raises
    ------
    :class:`NoSuchResource`

    """
    with transaction() as session:
        db_store = session.get(DBStore, store_id)
        if db_store is None:
            raise NoSuchResource('Store not found')
        return db_store.to_domain()


# Helpers shared by all store-scoped resources.

def _get(session: Any, model: Type, store_id: str, item_id: str,
         label: str) -> Any:
    db_obj = session.query(model) \
        .filter(model.id == item_id) \
        .filter(model.store_id == store_id) \
        .first()
    if db_obj is None:
        raise NoSuchResource(f'{label} not found')
    return db_obj


def _check_reference(session: Any, model: Type, store_id: str,
                     item_id: str, label: str) -> None:
    if not session.query(model) \
            .filter(model.id == item_id) \
            .filter(model.store_id == store_id) \
            .count():
        raise InvalidReference(f'{label} not found')


def _resolve(session: Any, model: Type, store_id: str, label: str,
             item_id: Optional[str] = None,
             name: Optional[str] = None) -> str:
    """
    Translate a size or color reference into an id within the store.

    The reference may be given either as an id, or as the human-readable
    name used in the admin UI. The admin UI also sends names in the id
    field, so an id that matches nothing is tried as a name.
    """
    query = session.query(model).filter(model.store_id == store_id)
    if item_id:
        db_obj = query.filter(model.id == item_id).first()
        if db_obj is not None:
            return db_obj.id
        name = item_id
    db_obj = query.filter(model.name == name).first()
    if db_obj is None:
        raise InvalidReference(f'{label} with name "{name}" not found')
    return db_obj.id


def _check_not_in_use(session: Any, resource: str, item_id: str) -> None:
    if resource == 'billboards':
        in_use = session.query(DBCategory) \
            .filter(DBCategory.billboard_id == item_id).count()
    elif resource == 'categories':
        in_use = session.query(DBProduct) \
            .filter(DBProduct.category_id == item_id).count()
    elif resource == 'sizes':
        in_use = session.query(DBVariant) \
            .filter(DBVariant.size_id == item_id).count()
    elif resource == 'colors':
        in_use = session.query(DBVariant) \
            .filter(DBVariant.color_id == item_id).count()
    elif resource == 'products':
        in_use = session.query(DBOrderItem) \
            .filter(DBOrderItem.product_id == item_id).count()
    else:
        in_use = 0
    if in_use:
        raise ResourceInUse(f'{LABELS[resource]} in use')


# Billboards, categories, sizes and colors.

def list_resources(resource: str, store_id: str) -> List[Any]:
    """All items of a simple resource in the store, newest first."""
    model = _model(resource)
    with transaction() as session:
        return [obj.to_domain() for obj in session.query(model)
                .filter(model.store_id == store_id)
                .order_by(model.created_at.desc())]


def get_resource(resource: str, store_id: str, item_id: str) -> Any:
    """
    Get a single item.

    Products are returned even when archived, so that they can be edited.

    Raises
    ------
    :class:`NoSuchResource`

    """
    model = _model(resource)
    with transaction() as session:
        return _get(session, model, store_id, item_id,
                    LABELS[resource]).to_domain()


def create_resource(resource: str, store_id: str, **fields: Any) -> Any:
    """
    Create a billboard, category, size or color.

    Raises
    ------
    :class:`InvalidReference`
        If a category refers to a billboard outside the store.

    """
    model = _model(resource)
    with transaction() as session:
        if resource == 'categories':
            _check_reference(session, DBBillboard, store_id,
                             fields.get('billboard_id'), 'Billboard')
        db_obj = model(store_id=store_id,
                       **{k: v for k, v in fields.items()
                          if k in FIELDS[resource]})
        session.add(db_obj)
        session.flush()
        logger.debug('Created %s %s', LABELS[resource], db_obj.id)
        return db_obj.to_domain()


def update_resource(resource: str, store_id: str, item_id: str,
                    **fields: Any) -> Any:
    """Update the given fields of a billboard, category, size or color."""
    model = _model(resource)
    with transaction() as session:
        db_obj = _get(session, model, store_id, item_id, LABELS[resource])
        if resource == 'categories' and fields.get('billboard_id'):
            _check_reference(session, DBBillboard, store_id,
                             fields['billboard_id'], 'Billboard')
        for key, value in fields.items():
            if key in FIELDS[resource] and value is not None:
                setattr(db_obj, key, value)
        session.add(db_obj)
        session.flush()
        return db_obj.to_domain()


def delete_resource(resource: str, store_id: str, item_id: str) -> Any:
    """
    Delete an item, returning what was deleted.

    Raises
    ------
    :class:`NoSuchResource`
    :class:`ResourceInUse`
        If other catalog rows (or orders) still refer to the item.

    """
    model = _model(resource)
    with transaction() as session:
        db_obj = _get(session, model, store_id, item_id, LABELS[resource])
        _check_not_in_use(session, resource, item_id)
        deleted = db_obj.to_domain()
        if resource == 'products':
            session.query(DBFavorite) \
                .filter(DBFavorite.product_id == item_id) \
                .delete()
        session.delete(db_obj)
        logger.debug('Deleted %s %s', LABELS[resource], item_id)
        return deleted


# Products.

def list_products(store_id: str, category_id: Optional[str] = None,
                  color_id: Optional[str] = None,
                  size_id: Optional[str] = None,
                  name: Optional[str] = None,
                  is_featured: Optional[bool] = None) -> List[domain.Product]:
    """
    Products of a store that are not archived, newest first.

    Parameters
    ----------
    store_id : str
    category_id : str
    color_id : str
        Only products with a variant in this color.
    size_id : str
        Only products with a variant in this size.
    name : str
        Case-insensitive substring of the product name.
    is_featured : bool

    """
    with transaction() as session:
        query = session.query(DBProduct) \
            .filter(DBProduct.store_id == store_id) \
            .filter(DBProduct.is_archived.is_(False))
        if category_id:
            query = query.filter(DBProduct.category_id == category_id)
        if color_id:
            query = query.filter(
                DBProduct.variants.any(DBVariant.color_id == color_id)
            )
        if size_id:
            query = query.filter(
                DBProduct.variants.any(DBVariant.size_id == size_id)
            )
        if name:
            query = query.filter(DBProduct.name.ilike(f'%{name}%'))
        if is_featured is not None:
            query = query.filter(DBProduct.is_featured.is_(is_featured))
        query = query.order_by(DBProduct.created_at.desc())
        return [db_product.to_domain() for db_product in query]


def _build_variants(session: Any, store_id: str,
                    variants: Iterable[dict]) -> List[DBVariant]:
    built = []
    for variant in variants:
        size_id = _resolve(session, DBSize, store_id, 'Size',
                           item_id=variant.get('size_id'),
                           name=variant.get('size'))
        color_id = _resolve(session, DBColor, store_id, 'Color',
                            item_id=variant.get('color_id'),
                            name=variant.get('color'))
        built.append(DBVariant(size_id=size_id, color_id=color_id,
                               in_stock=int(variant.get('in_stock') or 0)))
    return built


def create_product(store_id: str, name: str, price: Decimal,
                   category_id: str, description: str,
                   images: Iterable[str], variants: Iterable[dict],
                   is_featured: bool = False,
                   is_archived: bool = False) -> domain.Product:
    """
    Create a product with its images and variants.

    Parameters
    ----------
    images : list
        Image URLs.
    variants : list
        Dicts with ``in_stock`` and either ``size_id`` or ``size`` (a size
        name), and either ``color_id`` or ``color`` (a color name).

    Raises
    ------
    :class:`InvalidReference`
        If the category, or a size or color, does not exist in the store.

    """
    with transaction() as session:
        _check_reference(session, DBCategory, store_id, category_id,
                         'Category')
        db_product = DBProduct(
            store_id=store_id,
            name=name,
            price=price,
            category_id=category_id,
            description=description,
            is_featured=is_featured,
            is_archived=is_archived,
            images=[DBImage(url=url) for url in images],
            variants=_build_variants(session, store_id, variants)
        )
        session.add(db_product)
        session.flush()
        logger.debug('Created product %s', db_product.id)
        return db_product.to_domain()


def update_product(store_id: str, product_id: str,
                   images: Optional[Iterable[str]] = None,
                   variants: Optional[Iterable[dict]] = None,
                   **fields: Any) -> domain.Product:
    """
    Update a product. Images and variants are replaced when given.

    Raises
    ------
    :class:`NoSuchResource`
    :class:`InvalidReference`

    """
    with transaction() as session:
        db_product = _get(session, DBProduct, store_id, product_id,
                          'Product')
        if fields.get('category_id'):
            _check_reference(session, DBCategory, store_id,
                             fields['category_id'], 'Category')
        for key, value in fields.items():
            if key in FIELDS['products'] and value is not None:
                setattr(db_product, key, value)
        if images is not None:
            db_product.images = [DBImage(url=url) for url in images]
        if variants is not None:
            db_product.variants = _build_variants(session, store_id,
                                                  variants)
        session.add(db_product)
        session.flush()
        return db_product.to_domain()


# Variants.

def _get_variant(session: Any, store_id: str, variant_id: str) -> DBVariant:
    db_variant = session.query(DBVariant) \
        .join(DBProduct, DBVariant.product_id == DBProduct.id) \
        .filter(DBVariant.id == variant_id) \
        .filter(DBProduct.store_id == store_id) \
        .first()
    if db_variant is None:
        raise NoSuchResource('Variant not found')
    return db_variant


def list_variants(store_id: str,
                  product_id: Optional[str] = None) -> List[domain.Variant]:
    """Variants of the store's products, optionally of a single product."""
    with transaction() as session:
        query = session.query(DBVariant) \
            .join(DBProduct, DBVariant.product_id == DBProduct.id) \
            .filter(DBProduct.store_id == store_id)
        if product_id:
            query = query.filter(DBVariant.product_id == product_id)
        return [db_variant.to_domain() for db_variant in query]


def get_variant(store_id: str, variant_id: str) -> domain.Variant:
    """Get a single variant."""
    with transaction() as session:
        return _get_variant(session, store_id, variant_id).to_domain()


def create_variant(store_id: str, product_id: str, in_stock: int,
                   size_id: Optional[str] = None,
                   color_id: Optional[str] = None,
                   size: Optional[str] = None,
                   color: Optional[str] = None) -> domain.Variant:
    """Add a variant to one of the store's products."""
    with transaction() as session:
        _check_reference(session, DBProduct, store_id, product_id,
                         'Product')
        db_variant, = _build_variants(session, store_id, [{
            'size_id': size_id, 'size': size,
            'color_id': color_id, 'color': color,
            'in_stock': in_stock
        }])
        db_variant.product_id = product_id
        session.add(db_variant)
        session.flush()
        return db_variant.to_domain()


def update_variant(store_id: str, variant_id: str,
                   in_stock: Optional[int] = None,
                   size_id: Optional[str] = None,
                   color_id: Optional[str] = None,
                   size: Optional[str] = None,
                   color: Optional[str] = None) -> domain.Variant:
    """Change the size, color or stock of a variant."""
    with transaction() as session:
        db_variant = _get_variant(session, store_id, variant_id)
        if size_id or size:
            db_variant.size_id = _resolve(session, DBSize, store_id, 'Size',
                                          item_id=size_id, name=size)
        if color_id or color:
            db_variant.color_id = _resolve(session, DBColor, store_id,
                                           'Color', item_id=color_id,
                                           name=color)
        if in_stock is not None:
            db_variant.in_stock = in_stock
        session.add(db_variant)
        session.flush()
        return db_variant.to_domain()


def delete_variant(store_id: str, variant_id: str) -> domain.Variant:
    """Delete a variant, returning what was deleted."""
    with transaction() as session:
        db_variant = _get_variant(session, store_id, variant_id)
        deleted = db_variant.to_domain()
        session.delete(db_variant)
        return deleted
