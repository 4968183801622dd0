"""Defines the core data structures for the storefront service."""

from typing import Any, Optional, NamedTuple, List
from datetime import datetime
from decimal import Decimal
from enum import Enum


class Role(Enum):
    """The closed set of user roles."""

    CUSTOMER = 'CUSTOMER'
    ADMIN = 'ADMIN'


class User(NamedTuple):
    """
    Public view of a user account.

    Credentials and single-use tokens are deliberately absent; anything
    typed as :class:`User` is safe to hand to a client.
    """

    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    image: Optional[str] = None
    role: Role = Role.CUSTOMER
    is_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        """Whether the user holds the ADMIN role."""
        return self.role is Role.ADMIN


class Session(NamedTuple):
    """Claims carried by a signed session token."""

    user_id: str
    email: str
    role: Role
    issued_at: datetime
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        """Whether the session was issued to an ADMIN."""
        return self.role is Role.ADMIN


class Address(NamedTuple):
    """A shipping address belonging to a user."""

    id: str
    name: str
    line1: str
    city: str
    postal_code: str
    country: str
    line2: Optional[str] = None
    state: Optional[str] = None
    is_default: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderSummary(NamedTuple):
    """The short form of an order shown in a session snapshot."""

    id: str
    is_paid: bool
    is_sent: bool


class SessionView(NamedTuple):
    """What ``GET /api/auth/session`` reports about the signed-in user."""

    user: User
    address_count: int
    favorite_count: int
    recent_orders: List[OrderSummary]
    expires: datetime


class Store(NamedTuple):
    """A tenant of the catalog."""

    id: str
    name: str
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Billboard(NamedTuple):
    """A promotional banner."""

    id: str
    store_id: str
    label: str
    image_url: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Category(NamedTuple):
    """A product category, shown with its billboard."""

    id: str
    store_id: str
    billboard_id: str
    name: str
    billboard: Optional[Billboard] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Size(NamedTuple):
    """A size that product variants may come in."""

    id: str
    store_id: str
    name: str
    value: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Color(NamedTuple):
    """A color that product variants may come in."""

    id: str
    store_id: str
    name: str
    value: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Image(NamedTuple):
    """A product image."""

    id: str
    url: str


class Variant(NamedTuple):
    """A stocked size/color combination of a product."""

    id: str
    product_id: str
    size_id: str
    color_id: str
    in_stock: int
    size: Optional[Size] = None
    color: Optional[Color] = None


class Product(NamedTuple):
    """A product with its images and variants."""

    id: str
    store_id: str
    category_id: str
    name: str
    price: Decimal
    description: str
    is_featured: bool = False
    is_archived: bool = False
    images: List[Image] = []
    variants: List[Variant] = []
    category: Optional[Category] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderItem(NamedTuple):
    """One product in an order."""

    id: str
    product_id: str
    product_name: Optional[str] = None


class Order(NamedTuple):
    """A customer order."""

    id: str
    store_id: str
    is_paid: bool
    is_sent: bool
    phone: str = ''
    address: str = ''
    items: List[OrderItem] = []
    created_at: Optional[datetime] = None


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def to_dict(obj: tuple) -> dict:
    """
    Generate a JSON-ready dict representation of a NamedTuple instance.

    Child NamedTuples (and lists of them) are converted recursively, field
    names are rendered in camelCase, datetimes as ISO-8601 strings, enums by
    value and decimals as floats.

    Parameters
    ----------
    obj : tuple
        A NamedTuple instance.

    Returns
    -------
    dict

    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}

    def _cast(value: Any) -> Any:
        if hasattr(value, '_asdict'):
            return to_dict(value)
        if isinstance(value, list):
            return [_cast(item) for item in value]
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, Decimal):
            return float(value)
        return value

    return {_camel(key): _cast(value)
            for key, value in obj._asdict().items()}  # type: ignore
