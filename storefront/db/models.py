from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import CheckConstraint, Integer, String, Text, DateTime, ForeignKey, Numeric, JSON, Enum as SAEnum
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List
from storefront.db.session import Base


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    USER = 'user'
    ADMIN = 'admin'


class OrderStatus(str, Enum):
    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class PaymentMethod(str, Enum):
    CREDIT_CARD = 'credit_card'
    PAYPAL = 'paypal'
    BANK_TRANSFER = 'bank_transfer'


def _str_enum(enum_cls):
    # store the lowercase values, not the member names
    return SAEnum(enum_cls, native_enum=False, length=32, values_callable=lambda e: [m.value for m in e])


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class User(TimestampMixin, Base):
    __tablename__ = 'users'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(_str_enum(Role), default=Role.USER)
    orders = relationship('Order', back_populates='user')


class Category(TimestampMixin, Base):
    __tablename__ = 'categories'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, default='')
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    products = relationship('Product', back_populates='category', passive_deletes='all')


class Product(TimestampMixin, Base):
    __tablename__ = 'products'
    __table_args__ = (CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, default='')
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    sku: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category_id: Mapped[int] = mapped_column(ForeignKey('categories.id'), nullable=False, index=True)
    images: Mapped[List[str]] = mapped_column(JSON, default=list)
    category = relationship('Category', back_populates='products')


class Order(TimestampMixin, Base):
    __tablename__ = 'orders'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id'), index=True, nullable=False)
    status: Mapped[OrderStatus] = mapped_column(_str_enum(OrderStatus), default=OrderStatus.PENDING, index=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal('0.00'))
    payment_method: Mapped[PaymentMethod] = mapped_column(_str_enum(PaymentMethod), nullable=False)

    user = relationship('User', back_populates='orders')
    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan',
                         passive_deletes=True, order_by='OrderItem.id')
    shipping_info = relationship('ShippingInfo', back_populates='order', uselist=False,
                                 cascade='all, delete-orphan', passive_deletes=True)


class OrderItem(TimestampMixin, Base):
    __tablename__ = 'order_items'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey('orders.id', ondelete='CASCADE'), index=True, nullable=False)
    product_id: Mapped[int] = mapped_column(ForeignKey('products.id'), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # price at purchase time; never follows later product price changes
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order = relationship('Order', back_populates='items')
    product = relationship('Product')


class ShippingInfo(TimestampMixin, Base):
    __tablename__ = 'shipping_info'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey('orders.id', ondelete='CASCADE'), unique=True, nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state: Mapped[str] = mapped_column(String(120), default='')
    country: Mapped[str] = mapped_column(String(120), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(32), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), default='')

    order = relationship('Order', back_populates='shipping_info')
