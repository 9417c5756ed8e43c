"""SQLAlchemy ORM models."""

from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vehicle_care.db.session import Base

SERVICE_STATUSES = ("pending", "in_progress", "completed", "cancelled", "delayed")
NOTIFICATION_TYPES = ("service_due", "reminder", "alert", "info")


class User(Base):
    """Represents a vehicle owner."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    role: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="user",
        server_default=text("'user'"),
    )

    # Raw channel -> bool mapping; resolved through NotificationPreferences.
    notification_preferences: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    vehicles: Mapped[list["Vehicle"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
    )
    notifications: Mapped[list["Notification"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
    )


class Vehicle(Base):
    """Represents a vehicle owned by a user."""

    __tablename__ = "vehicles"
    __table_args__ = (
        CheckConstraint("current_mileage >= 0", name="ck_vehicles_mileage_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    plate_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    chassis_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, unique=True)
    make: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    current_mileage: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )
    next_service_due: Mapped[int] = mapped_column(Integer, nullable=False)
    next_service_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    last_service_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    owner: Mapped["User"] = relationship(back_populates="vehicles")

    service_records: Mapped[list["ServiceRecord"]] = relationship(
        back_populates="vehicle",
        cascade="all, delete-orphan",
    )
    notifications: Mapped[list["Notification"]] = relationship(
        back_populates="vehicle",
        cascade="all, delete-orphan",
    )


class ServiceRecord(Base):
    """Represents a service performed (or planned) on a vehicle."""

    __tablename__ = "service_records"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    vehicle_id: Mapped[int] = mapped_column(
        ForeignKey("vehicles.id"),
        nullable=False,
        index=True,
    )

    service_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    mileage_at_service: Mapped[int] = mapped_column(Integer, nullable=False)
    total_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    invoice_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, unique=True)
    notes: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="pending",
        server_default=text("'pending'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    vehicle: Mapped["Vehicle"] = relationship(back_populates="service_records")


class Notification(Base):
    """An in-app notification addressed to a single owner."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    vehicle_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("vehicles.id"),
        nullable=True,
        index=True,
    )

    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(String(2000), nullable=False)

    is_read: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("0"),
    )
    sent_via: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="in_app",
        server_default=text("'in_app'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    owner: Mapped["User"] = relationship(back_populates="notifications")
    vehicle: Mapped[Optional["Vehicle"]] = relationship(back_populates="notifications")
