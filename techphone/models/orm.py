import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Integer, Float, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship

from techphone.db.session import Base


def _uuid():
    return str(uuid.uuid4())


def _now():
    return datetime.now(timezone.utc)


class User(Base):
    """Login credentials. The matching Profile shares the same id."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now)


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255))
    phone = Column(String(20))
    role = Column(String(20), default="user", nullable=False)
    status = Column(String(20), default="active", nullable=False)
    last_login = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=_now)


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    price = Column(Float, nullable=False, default=0)
    category = Column(String(50), index=True)
    brand = Column(String(100), index=True)
    stock = Column(Integer, default=0)
    image = Column(Text)
    discount = Column(Float, default=0)
    featured = Column(Boolean, default=False)
    condition = Column(String(20), default="new", index=True)
    rating = Column(Float, default=0)
    is_sale = Column(Boolean, default=False)
    is_trending = Column(Boolean, default=False)
    is_best_seller = Column(Boolean, default=False)
    status = Column(String(20), default="active")
    specifications = Column(JSON)
    deleted_at = Column(DateTime(timezone=True), index=True)
    created_at = Column(DateTime(timezone=True), default=_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_uuid)
    order_number = Column(String(32), unique=True, index=True)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), index=True)
    total_amount = Column(Float, nullable=False)
    shipping_fee = Column(Float, default=0)
    status = Column(String(20), default="pending", index=True)
    payment_status = Column(String(20), default="pending")
    payment_method = Column(String(20), default="cod")
    customer_name = Column(String(255))
    customer_email = Column(String(255))
    customer_phone = Column(String(20))
    shipping_address = Column(Text)
    notes = Column(Text)
    items = Column(JSON)
    created_at = Column(DateTime(timezone=True), default=_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    user = relationship("Profile")
    order_items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="order_items")
    product = relationship("Product")


def to_dict(row, fields=None) -> dict:
    """Column values of an ORM row, optionally restricted to ``fields``."""
    names = fields or [c.name for c in row.__table__.columns]
    return {name: getattr(row, name) for name in names}
