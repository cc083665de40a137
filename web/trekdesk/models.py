from datetime import datetime

from sqlalchemy import (
    String, Integer, ForeignKey, Numeric, DateTime, Boolean, Text,
    CheckConstraint, Index,
)
from sqlalchemy.orm import mapped_column, relationship, DeclarativeBase

from .roles import Role


class Base(DeclarativeBase): ...


# ---------- Users ----------
class User(Base):
    __tablename__ = "users"
    id         = mapped_column(Integer, primary_key=True)
    name       = mapped_column(String(120), nullable=False)
    email      = mapped_column(String(128), unique=True, nullable=False)
    # Stored in E.164 so lookups are independent of how the number was typed
    phone      = mapped_column(String(32), unique=True, nullable=True, index=True)
    role       = mapped_column(String(16), default=Role.user.value, nullable=False)
    address    = mapped_column(String(255), nullable=True)
    city       = mapped_column(String(64), nullable=True)
    state      = mapped_column(String(64), nullable=True)
    zip_code   = mapped_column(String(16), nullable=True)
    country    = mapped_column(String(64), nullable=True)
    created_by_admin = mapped_column(Boolean, default=False, nullable=False)
    created_at = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    bookings   = relationship("Booking", back_populates="user")


# ---------- Treks ----------
class Trek(Base):
    __tablename__ = "treks"
    id            = mapped_column(Integer, primary_key=True)
    name          = mapped_column(String(200), nullable=False)
    region        = mapped_column(String(120), nullable=True)
    difficulty    = mapped_column(String(32), nullable=True)
    duration_days = mapped_column(Integer, nullable=True)
    description   = mapped_column(Text, nullable=True)
    is_enabled    = mapped_column(Boolean, default=True, nullable=False)
    created_at    = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    batches       = relationship(
        "Batch",
        back_populates="trek",
        cascade="all, delete-orphan",
        order_by="Batch.start_date",
    )


# ---------- Batches (scheduled departures of a Trek) ----------
class Batch(Base):
    __tablename__ = "batches"
    id                   = mapped_column(Integer, primary_key=True)
    trek_id              = mapped_column(ForeignKey("treks.id"), nullable=False, index=True)
    start_date           = mapped_column(DateTime, nullable=False)
    end_date             = mapped_column(DateTime, nullable=False)
    price                = mapped_column(Numeric(10, 2), nullable=False)
    max_participants     = mapped_column(Integer, nullable=False)
    # Denormalised count of active participants, recalculated from bookings
    current_participants = mapped_column(Integer, default=0, nullable=False)
    # Capacity withheld from public booking without a participant record
    reserved_slots       = mapped_column(Integer, default=0, nullable=False)
    status               = mapped_column(String(16), default="upcoming", nullable=False, comment="upcoming | ongoing | completed | cancelled")
    is_active            = mapped_column(Boolean, default=True, nullable=False)

    trek                 = relationship("Trek", back_populates="batches")

    __table_args__ = (
        CheckConstraint("max_participants >= 1", name="ck_batch_max_participants"),
        CheckConstraint("current_participants >= 0", name="ck_batch_current_participants"),
        CheckConstraint("reserved_slots >= 0", name="ck_batch_reserved_slots"),
    )


# ---------- Bookings ----------
class Booking(Base):
    __tablename__ = "bookings"
    id                     = mapped_column(Integer, primary_key=True)
    trek_id                = mapped_column(ForeignKey("treks.id"), nullable=False)
    batch_id               = mapped_column(ForeignKey("batches.id"), nullable=False)
    user_id                = mapped_column(ForeignKey("users.id"), nullable=False)
    number_of_participants = mapped_column(Integer, nullable=False)
    total_price            = mapped_column(Numeric(10, 2), nullable=False)
    payment_status         = mapped_column(String(32), default="pending", nullable=False, comment="pending | payment_completed | refunded")
    status                 = mapped_column(String(16), default="pending", nullable=False, comment="pending | confirmed | cancelled | completed")
    # Contact snapshot taken at booking time
    user_name              = mapped_column(String(120), nullable=False)
    user_email             = mapped_column(String(128), nullable=False)
    user_phone             = mapped_column(String(32), nullable=False)
    emergency_name         = mapped_column(String(120), nullable=True)
    emergency_phone        = mapped_column(String(32), nullable=True)
    emergency_relation     = mapped_column(String(64), nullable=True)
    additional_requests    = mapped_column(String(2000), nullable=True)
    created_by_admin       = mapped_column(Boolean, default=False, nullable=False)
    created_at             = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    # Cancellation & refund
    cancelled_at           = mapped_column(DateTime, nullable=True)
    cancellation_reason    = mapped_column(String(500), nullable=True)
    refund_status          = mapped_column(String(20), default="not_applicable", nullable=False, comment="not_applicable | pending | processing | success | failed")
    refund_amount          = mapped_column(Numeric(10, 2), default=0, nullable=False)
    refund_date            = mapped_column(DateTime, nullable=True)

    trek                   = relationship("Trek")
    batch                  = relationship("Batch")
    user                   = relationship("User", back_populates="bookings")
    participants           = relationship(
        "BookingParticipant",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingParticipant.id",
    )

    # Participant recount and batch listings filter on these
    __table_args__ = (
        Index("ix_booking_batch_status", "batch_id", "status"),
    )


class BookingParticipant(Base):
    __tablename__ = "booking_participants"
    id                 = mapped_column(Integer, primary_key=True)
    booking_id         = mapped_column(ForeignKey("bookings.id"), nullable=False, index=True)
    name               = mapped_column(String(120), nullable=False)
    age                = mapped_column(Integer, nullable=False)
    gender             = mapped_column(String(8), nullable=True, comment="Male | Female | Other")
    medical_conditions = mapped_column(String(500), nullable=True)
    is_cancelled       = mapped_column(Boolean, default=False, nullable=False)
    cancelled_at       = mapped_column(DateTime, nullable=True)
    refund_status      = mapped_column(String(20), default="not_applicable", nullable=False)
    refund_amount      = mapped_column(Numeric(10, 2), default=0, nullable=False)

    booking            = relationship("Booking", back_populates="participants")
