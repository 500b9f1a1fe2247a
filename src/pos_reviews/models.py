"""SQLAlchemy models.

Define all ORM models here. They must inherit from Base so that
Alembic's autogenerate can detect them.

rating/review_count on Business, Service, Item and Staff are aggregate fields
written only by the rating services; catalog CRUD lives outside this project.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_reviews.db.session import Base  # noqa: F401, re-exported for convenience


def _new_id() -> str:
    return str(uuid.uuid4())


def _aggregate_constraints() -> tuple[CheckConstraint, ...]:
    return (
        CheckConstraint("review_count >= 0", name="review_count_non_negative"),
        CheckConstraint("rating >= 0", name="rating_non_negative"),
    )


class Business(Base):
    __tablename__ = "businesses"
    __table_args__ = _aggregate_constraints()

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(120))
    rating: Mapped[float] = mapped_column(default=0.0)
    review_count: Mapped[int] = mapped_column(default=0)
    admin_id: Mapped[str | None] = mapped_column(String(64))
    subscription_id: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    services: Mapped[list["Service"]] = relationship(back_populates="business")
    staff: Mapped[list["Staff"]] = relationship(back_populates="business")


class Service(Base):
    __tablename__ = "services"
    __table_args__ = _aggregate_constraints()

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    business_id: Mapped[str] = mapped_column(ForeignKey("businesses.id"), index=True)
    name: Mapped[str] = mapped_column(String(120))
    rating: Mapped[float] = mapped_column(default=0.0)
    review_count: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    business: Mapped["Business"] = relationship(back_populates="services")
    items: Mapped[list["Item"]] = relationship(back_populates="service")


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (
        *_aggregate_constraints(),
        CheckConstraint("price >= 0", name="price_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    business_id: Mapped[str] = mapped_column(ForeignKey("businesses.id"), index=True)
    service_id: Mapped[str] = mapped_column(ForeignKey("services.id"), index=True)
    name: Mapped[str] = mapped_column(String(120))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    category: Mapped[str] = mapped_column(String(60))
    rating: Mapped[float] = mapped_column(default=0.0)
    review_count: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    service: Mapped["Service"] = relationship(back_populates="items")


class Staff(Base):
    __tablename__ = "staff"
    __table_args__ = _aggregate_constraints()

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    business_id: Mapped[str] = mapped_column(ForeignKey("businesses.id"), index=True)
    name: Mapped[str] = mapped_column(String(120))
    pin: Mapped[str] = mapped_column(String(12), unique=True)
    rating: Mapped[float] = mapped_column(default=0.0)
    review_count: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    business: Mapped["Business"] = relationship(back_populates="staff")
    sessions: Mapped[list["StaffSession"]] = relationship(back_populates="staff")


class StaffSession(Base):
    """One staff-customer interaction, eligible for exactly one rating.

    ``items`` holds the purchased line items as JSON
    (``[{"itemId", "businessId", "serviceId", "name", "price"}]``) and
    ``ratings`` the submitted payload verbatim once ``rated`` flips to true.
    """

    __tablename__ = "sessions"
    __table_args__ = (CheckConstraint("total_amount > 0", name="total_amount_positive"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    staff_id: Mapped[str] = mapped_column(ForeignKey("staff.id"), index=True)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    rated: Mapped[bool] = mapped_column(default=False)
    ratings: Mapped[dict[str, Any] | None] = mapped_column(JSON(none_as_null=True))
    rated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    verified: Mapped[bool] = mapped_column(default=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    staff: Mapped["Staff"] = relationship(back_populates="sessions")
