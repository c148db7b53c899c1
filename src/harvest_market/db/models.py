"""
harvest_market.db.models

Core persistence schema for the marketplace.

Responsibilities:
- Define ORM models for users, categories, products, orders and reviews.
- Define the enumerations stored in string columns.

References between records (product -> seller, order -> buyer, ...) are plain
id columns without foreign keys; services keep them consistent.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from harvest_market.db.base import Base, Record


class ProductUnit(enum.StrEnum):
    kg = "kg"
    lbs = "lbs"
    dozen = "dozen"
    piece = "piece"
    bunch = "bunch"
    bag = "bag"
    box = "box"
    liter = "liter"


class ProductStatus(enum.StrEnum):
    available = "available"
    out_of_stock = "out-of-stock"
    removed = "removed"


class OrderStatus(enum.StrEnum):
    pending = "pending"
    confirmed = "confirmed"
    preparing = "preparing"
    ready_for_pickup = "ready-for-pickup"
    in_transit = "in-transit"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentStatus(enum.StrEnum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"


class DeliveryType(enum.StrEnum):
    pickup = "pickup"
    delivery = "delivery"


class User(Record, Base):
    __tablename__ = "users"

    first_name: Mapped[str] = mapped_column(String(64), nullable=False)
    last_name: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Ids (as strings) of the products this user sells.
    products_listed: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    rating_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Category(Record, Base):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    parent_category_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Product(Record, Base):
    __tablename__ = "products"

    # Set once at creation; no update path writes it.
    seller_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), nullable=False, index=True
    )
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    video: Mapped[str | None] = mapped_column(String(512), nullable=True)

    price: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(16), nullable=False)
    quantity_available: Mapped[float] = mapped_column(Float, nullable=False)

    # {address, city, state, coordinates?: {latitude, longitude}}
    location: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    is_organic: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    harvest_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ProductStatus.available.value, index=True
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    buys: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (Index("ix_products_status_price", "status", "price"),)


class Order(Record, Base):
    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    buyer_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False, index=True)
    seller_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False, index=True)

    # [{product, productName, quantity, pricePerUnit, unit, subtotal}]; names and
    # prices are snapshots so the order survives product edits/deletes.
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)

    status: Mapped[str] = mapped_column(
        String(24), nullable=False, default=OrderStatus.pending.value, index=True
    )
    payment_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=PaymentStatus.pending.value
    )
    payment_method: Mapped[str | None] = mapped_column(String(64), nullable=True)
    payment_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # {street, city, state, zipCode, country}
    delivery_address: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    delivery_type: Mapped[str] = mapped_column(String(16), nullable=False)
    delivery_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    cancel_reason: Mapped[str | None] = mapped_column(Text, nullable=True)


class Review(Record, Base):
    __tablename__ = "reviews"

    order_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False)
    product_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False, index=True)
    reviewer_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), nullable=False, index=True
    )
    reviewee_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), nullable=False, index=True
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    response_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    response_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    is_verified_purchase: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (UniqueConstraint("order_id", "product_id", name="uq_reviews_order_product"),)


# --- Module Notes -----------------------------------------------------------
# JSON columns are reassigned (never mutated in place) so SQLAlchemy sees the change.
