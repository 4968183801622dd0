"""Storefront database models."""

import uuid
from datetime import datetime

from pytz import UTC
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, \
    Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import relationship

from .. import domain
from .database import db


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(tz=UTC)


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes, also on databases that drop the zone."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):  # type: ignore
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value

    def process_result_value(self, value, dialect):  # type: ignore
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value


class TimestampMixin:
    """Creation and update times, maintained by SQLAlchemy."""

    created_at = Column(UTCDateTime, nullable=False,
                        default=_now, index=True)
    updated_at = Column(UTCDateTime, nullable=False,
                        default=_now, onupdate=_now)


class DBUser(TimestampMixin, db.Model):  # type: ignore
    """
    A storefront account.

    ``password_hash`` is null for accounts that cannot sign in locally.
    ``verification_token`` and ``reset_token`` are single-use; they are
    cleared as soon as they are consumed.
    """

    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255))
    password_hash = Column(String(255))
    phone = Column(String(50))
    image = Column(String(1024))
    role = Column(Enum(domain.Role), nullable=False,
                  default=domain.Role.CUSTOMER)
    is_verified = Column(Boolean, nullable=False, default=False)
    verification_token = Column(String(128), index=True)
    reset_token = Column(String(128), index=True)
    reset_token_expiry = Column(UTCDateTime)

    addresses = relationship('DBAddress', back_populates='user',
                             cascade='all, delete-orphan')
    favorites = relationship('DBFavorite', back_populates='user',
                             cascade='all, delete-orphan')
    orders = relationship('DBOrder', back_populates='user')

    def to_domain(self) -> domain.User:
        """The public view of this account."""
        return domain.User(
            id=self.id,
            email=self.email,
            name=self.name,
            phone=self.phone,
            image=self.image,
            role=self.role,
            is_verified=bool(self.is_verified),
            created_at=self.created_at,
            updated_at=self.updated_at
        )


class DBAddress(TimestampMixin, db.Model):  # type: ignore
    """A shipping address."""

    __tablename__ = 'addresses'

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(ForeignKey('users.id'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    line1 = Column(String(255), nullable=False)
    line2 = Column(String(255))
    city = Column(String(255), nullable=False)
    state = Column(String(255))
    postal_code = Column(String(32), nullable=False)
    country = Column(String(2), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)

    user = relationship('DBUser', back_populates='addresses')

    def to_domain(self) -> domain.Address:
        return domain.Address(
            id=self.id,
            name=self.name,
            line1=self.line1,
            line2=self.line2,
            city=self.city,
            state=self.state,
            postal_code=self.postal_code,
            country=self.country,
            is_default=bool(self.is_default),
            created_at=self.created_at,
            updated_at=self.updated_at
        )


class DBFavorite(db.Model):  # type: ignore
    """A product a user has marked as a favorite."""

    __tablename__ = 'favorites'
    __table_args__ = (UniqueConstraint('user_id', 'product_id'),)

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(ForeignKey('users.id'), nullable=False, index=True)
    product_id = Column(ForeignKey('products.id'), nullable=False)
    created_at = Column(UTCDateTime, nullable=False,
                        default=_now)

    user = relationship('DBUser', back_populates='favorites')
    product = relationship('DBProduct')


class DBStore(TimestampMixin, db.Model):  # type: ignore
    """A tenant, owned by a single user."""

    __tablename__ = 'stores'

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    user_id = Column(ForeignKey('users.id'), nullable=False, index=True)

    def to_domain(self) -> domain.Store:
        return domain.Store(id=self.id, name=self.name, user_id=self.user_id,
                            created_at=self.created_at,
                            updated_at=self.updated_at)


class DBBillboard(TimestampMixin, db.Model):  # type: ignore
    """Billboard table."""

    __tablename__ = 'billboards'

    id = Column(String(36), primary_key=True, default=_new_id)
    store_id = Column(ForeignKey('stores.id'), nullable=False, index=True)
    label = Column(String(255), nullable=False)
    image_url = Column(String(1024), nullable=False)

    def to_domain(self) -> domain.Billboard:
        return domain.Billboard(id=self.id, store_id=self.store_id,
                                label=self.label, image_url=self.image_url,
                                created_at=self.created_at,
                                updated_at=self.updated_at)


class DBCategory(TimestampMixin, db.Model):  # type: ignore
    """Category table."""

    __tablename__ = 'categories'

    id = Column(String(36), primary_key=True, default=_new_id)
    store_id = Column(ForeignKey('stores.id'), nullable=False, index=True)
    billboard_id = Column(ForeignKey('billboards.id'), nullable=False,
                          index=True)
    name = Column(String(255), nullable=False)

    billboard = relationship('DBBillboard')

    def to_domain(self) -> domain.Category:
        return domain.Category(
            id=self.id, store_id=self.store_id,
            billboard_id=self.billboard_id, name=self.name,
            billboard=self.billboard.to_domain() if self.billboard else None,
            created_at=self.created_at, updated_at=self.updated_at
        )


class DBSize(TimestampMixin, db.Model):  # type: ignore
    """Size table."""

    __tablename__ = 'sizes'

    id = Column(String(36), primary_key=True, default=_new_id)
    store_id = Column(ForeignKey('stores.id'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    value = Column(String(255), nullable=False)

    def to_domain(self) -> domain.Size:
        return domain.Size(id=self.id, store_id=self.store_id,
                           name=self.name, value=self.value,
                           created_at=self.created_at,
                           updated_at=self.updated_at)


class DBColor(TimestampMixin, db.Model):  # type: ignore
    """Color table. ``value`` is a hex code."""

    __tablename__ = 'colors'

    id = Column(String(36), primary_key=True, default=_new_id)
    store_id = Column(ForeignKey('stores.id'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    value = Column(String(255), nullable=False)

    def to_domain(self) -> domain.Color:
        return domain.Color(id=self.id, store_id=self.store_id,
                            name=self.name, value=self.value,
                            created_at=self.created_at,
                            updated_at=self.updated_at)


class DBProduct(TimestampMixin, db.Model):  # type: ignore
    """Product table. Images and variants are owned by the product."""

    __tablename__ = 'products'

    id = Column(String(36), primary_key=True, default=_new_id)
    store_id = Column(ForeignKey('stores.id'), nullable=False, index=True)
    category_id = Column(ForeignKey('categories.id'), nullable=False,
                         index=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=False, default='')
    is_featured = Column(Boolean, nullable=False, default=False)
    is_archived = Column(Boolean, nullable=False, default=False)

    category = relationship('DBCategory')
    images = relationship('DBImage', back_populates='product',
                          cascade='all, delete-orphan')
    variants = relationship('DBVariant', back_populates='product',
                            cascade='all, delete-orphan')

    def to_domain(self) -> domain.Product:
        return domain.Product(
            id=self.id,
            store_id=self.store_id,
            category_id=self.category_id,
            name=self.name,
            price=self.price,
            description=self.description,
            is_featured=bool(self.is_featured),
            is_archived=bool(self.is_archived),
            images=[image.to_domain() for image in self.images],
            variants=[variant.to_domain() for variant in self.variants],
            category=self.category.to_domain() if self.category else None,
            created_at=self.created_at,
            updated_at=self.updated_at
        )


class DBImage(db.Model):  # type: ignore
    """Product image table."""

    __tablename__ = 'images'

    id = Column(String(36), primary_key=True, default=_new_id)
    product_id = Column(ForeignKey('products.id'), nullable=False, index=True)
    url = Column(String(1024), nullable=False)

    product = relationship('DBProduct', back_populates='images')

    def to_domain(self) -> domain.Image:
        return domain.Image(id=self.id, url=self.url)


class DBVariant(db.Model):  # type: ignore
    """A stocked size/color combination of a product."""

    __tablename__ = 'variants'

    id = Column(String(36), primary_key=True, default=_new_id)
    product_id = Column(ForeignKey('products.id'), nullable=False, index=True)
    size_id = Column(ForeignKey('sizes.id'), nullable=False, index=True)
    color_id = Column(ForeignKey('colors.id'), nullable=False, index=True)
    in_stock = Column(Integer, nullable=False, default=0)

    product = relationship('DBProduct', back_populates='variants')
    size = relationship('DBSize')
    color = relationship('DBColor')

    def to_domain(self) -> domain.Variant:
        return domain.Variant(
            id=self.id, product_id=self.product_id, size_id=self.size_id,
            color_id=self.color_id, in_stock=self.in_stock,
            size=self.size.to_domain() if self.size else None,
            color=self.color.to_domain() if self.color else None
        )


class DBOrder(TimestampMixin, db.Model):  # type: ignore
    """Order table."""

    __tablename__ = 'orders'

    id = Column(String(36), primary_key=True, default=_new_id)
    store_id = Column(ForeignKey('stores.id'), nullable=False, index=True)
    user_id = Column(ForeignKey('users.id'), index=True)
    is_paid = Column(Boolean, nullable=False, default=False)
    is_sent = Column(Boolean, nullable=False, default=False)
    phone = Column(String(50), nullable=False, default='')
    address = Column(Text, nullable=False, default='')

    user = relationship('DBUser', back_populates='orders')
    items = relationship('DBOrderItem', back_populates='order',
                         cascade='all, delete-orphan')

    def to_domain(self) -> domain.Order:
        return domain.Order(
            id=self.id, store_id=self.store_id,
            is_paid=bool(self.is_paid), is_sent=bool(self.is_sent),
            phone=self.phone, address=self.address,
            items=[item.to_domain() for item in self.items],
            created_at=self.created_at
        )


class DBOrderItem(db.Model):  # type: ignore
    """Order line table."""

    __tablename__ = 'order_items'

    id = Column(String(36), primary_key=True, default=_new_id)
    order_id = Column(ForeignKey('orders.id'), nullable=False, index=True)
    product_id = Column(ForeignKey('products.id'), nullable=False)

    order = relationship('DBOrder', back_populates='items')
    product = relationship('DBProduct')

    def to_domain(self) -> domain.OrderItem:
        return domain.OrderItem(
            id=self.id, product_id=self.product_id,
            product_name=self.product.name if self.product else None
        )
