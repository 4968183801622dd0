"""
Controllers for stores and the store-scoped catalog.

Reads are public. Writes are only routed here once the caller is known to
own the store (see :func:`owns_store`).
"""

import logging
from typing import Any, List, Optional, Tuple

from retry import retry
from werkzeug.datastructures import MultiDict

from .. import domain
from ..exceptions import NotFoundError, ValidationError
from ..services import catalog
from ..services.exceptions import InvalidReference, NoSuchResource, \
    ResourceInUse, Unavailable
from .forms import BillboardForm, CategoryForm, ColorForm, ProductForm, \
    SizeForm, StoreForm, VariantForm, form_errors, to_multidict

logger = logging.getLogger(__name__)

ResponseData = Tuple[Any, int, dict]

FORMS = {
    'billboards': BillboardForm,
    'categories': CategoryForm,
    'sizes': SizeForm,
    'colors': ColorForm,
}

RESOURCES = ('billboards', 'categories', 'sizes', 'colors', 'products',
             'variants')


def owns_store(session: domain.Session, store_id: str, **kw: Any) -> bool:
    """
    Determine whether the authenticated user owns the requested store.

    Raises
    ------
    :class:`.NotFoundError`
        If there is no such store.

    """
    try:
        store = _do(catalog.get_store, store_id)
    except NoSuchResource as e:
        raise NotFoundError('Store not found') from e
    return bool(store.user_id == session.user_id)


# Stores.

def list_stores(user_id: str) -> ResponseData:
    """Stores owned by the signed-in user."""
    stores = _do(catalog.list_stores, user_id)
    return [domain.to_dict(store) for store in stores], 200, {}


def create_store(user_id: str, payload: Optional[dict]) -> ResponseData:
    """Create a store owned by the signed-in user."""
    form = StoreForm(to_multidict(payload))
    if not form.validate():
        raise ValidationError(form_errors(form))
    store = _do(catalog.create_store, user_id, form.name.data)
    return domain.to_dict(store), 200, {}


# Catalog.

def _flag(value: Optional[str]) -> Optional[bool]:
    if value is None or value == '':
        return None
    return value.lower() in ('true', '1', 'yes')


def list_items(store_id: str, resource: str,
               params: MultiDict) -> ResponseData:
    """
    List a catalog resource.

    Products may be filtered with the ``categoryId``, ``colorId``,
    ``sizeId``, ``name`` and ``isFeatured`` query parameters, and variants
    with ``productId``. Archived products are never listed.
    """
    if resource == 'products':
        items = _do(catalog.list_products, store_id,
                    category_id=params.get('categoryId') or None,
                    color_id=params.get('colorId') or None,
                    size_id=params.get('sizeId') or None,
                    name=params.get('name') or None,
                    is_featured=_flag(params.get('isFeatured')))
    elif resource == 'variants':
        items = _do(catalog.list_variants, store_id,
                    product_id=params.get('productId') or None)
    else:
        items = _do(catalog.list_resources, resource, store_id)
    return [domain.to_dict(item) for item in items], 200, {}


def get_item(store_id: str, resource: str, item_id: str) -> ResponseData:
    """Get one item. A product can be read even if it is archived."""
    try:
        if resource == 'variants':
            item = _do(catalog.get_variant, store_id, item_id)
        else:
            item = _do(catalog.get_resource, resource, store_id, item_id)
    except NoSuchResource as e:
        raise NotFoundError(str(e)) from e
    return domain.to_dict(item), 200, {}


def create_item(store_id: str, resource: str,
                payload: Optional[dict]) -> ResponseData:
    """
    Create a catalog item.

    Raises
    ------
    :class:`.ValidationError`
        If a required field is missing, or a reference (billboard, category,
        size, color, product) does not exist in the store.

    """
    try:
        if resource == 'products':
            fields = _product_fields(payload, require_children=True)
            item = _do(catalog.create_product, store_id, **fields)
        elif resource == 'variants':
            payload = payload or {}
            if not payload.get('productId'):
                raise ValidationError('Product id is required')
            item = _do(catalog.create_variant, store_id,
                       product_id=payload['productId'],
                       **_variant_fields(payload))
        else:
            fields = _simple_fields(resource, payload)
            item = _do(catalog.create_resource, resource, store_id, **fields)
    except InvalidReference as e:
        raise ValidationError(str(e)) from e
    logger.info('Created %s in store %s', resource, store_id)
    return domain.to_dict(item), 200, {}


def update_item(store_id: str, resource: str, item_id: str,
                payload: Optional[dict]) -> ResponseData:
    """
    Update a catalog item.

    The payload is validated as for creation, except that a product's images
    and variants are optional; when given, they replace the existing ones.
    """
    try:
        if resource == 'products':
            fields = _product_fields(payload, require_children=False)
            item = _do(catalog.update_product, store_id, item_id, **fields)
        elif resource == 'variants':
            item = _do(catalog.update_variant, store_id, item_id,
                       **_variant_fields(payload or {}))
        else:
            fields = _simple_fields(resource, payload)
            item = _do(catalog.update_resource, resource, store_id, item_id,
                       **fields)
    except InvalidReference as e:
        raise ValidationError(str(e)) from e
    except NoSuchResource as e:
        raise NotFoundError(str(e)) from e
    return domain.to_dict(item), 200, {}


def delete_item(store_id: str, resource: str, item_id: str) -> ResponseData:
    """
    Delete a catalog item, returning it.

    Raises
    ------
    :class:`.ValidationError`
        If the item is still in use (e.g. a size that variants refer to).
    :class:`.NotFoundError`

    """
    try:
        if resource == 'variants':
            item = _do(catalog.delete_variant, store_id, item_id)
        else:
            item = _do(catalog.delete_resource, resource, store_id, item_id)
    except NoSuchResource as e:
        raise NotFoundError(str(e)) from e
    except ResourceInUse as e:
        raise ValidationError(str(e)) from e
    logger.info('Deleted %s %s from store %s', resource, item_id, store_id)
    return domain.to_dict(item), 200, {}


def _simple_fields(resource: str, payload: Optional[dict]) -> dict:
    form = FORMS[resource](to_multidict(payload))
    if not form.validate():
        raise ValidationError(form_errors(form))
    return form.data


def _image_urls(images: Any) -> List[str]:
    if not isinstance(images, list):
        raise ValidationError('Images must be a list')
    urls = []
    for image in images:
        url = image.get('url') if isinstance(image, dict) else image
        if not url or not isinstance(url, str):
            raise ValidationError('Image url is required')
        urls.append(url)
    return urls


def _variant_fields(variant: Any) -> dict:
    if not isinstance(variant, dict):
        raise ValidationError('Variants must be objects')
    form = VariantForm(to_multidict(variant))
    if not form.validate():
        raise ValidationError(form_errors(form))
    return {
        'size_id': form.size_id.data or None,
        'size': form.size.data or None,
        'color_id': form.color_id.data or None,
        'color': form.color.data or None,
        'in_stock': form.in_stock.data
    }


def _product_fields(payload: Optional[dict], require_children: bool) -> dict:
    payload = payload or {}
    form = ProductForm(to_multidict(payload))
    if not form.validate():
        raise ValidationError(form_errors(form))
    fields = {
        'name': form.name.data,
        'price': form.price.data,
        'category_id': form.category_id.data,
        'description': form.description.data,
        'is_featured': bool(form.is_featured.data),
        'is_archived': bool(form.is_archived.data),
    }
    images = payload.get('images')
    variants = payload.get('variants')
    if require_children and not images:
        raise ValidationError('Images are required')
    if require_children and not variants:
        raise ValidationError('Variants are required')
    if images is not None:
        fields['images'] = _image_urls(images)
    if variants is not None:
        if not isinstance(variants, list):
            raise ValidationError('Variants must be a list')
        fields['variants'] = [_variant_fields(v) for v in variants]
    return fields


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do(func, *args, **kwargs):  # type: ignore
    return func(*args, **kwargs)
