"""
Venue Admin — Reference Models
================================

What:  Tables this API reads but does not administer: cities, sports,
       menus, grounds, and the records that can hold on to a slot time
       (academies, memberships, events, slot bookings), plus the token
       blacklist written by the logout flow.
Why:   Reference checks (is the city live? does the ground belong to the
       venue?) and the slot usage guard query these tables directly.
"""

import enum
import uuid
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venue_admin.database import Base, TimestampMixin, utcnow


class SlotPeriod(str, enum.Enum):
    MORNING = "morning"
    EVENING = "evening"


class EventStatus(str, enum.Enum):
    UPCOMING = "Upcoming"
    COMPLETED = "Completed"


class BookingStatus(str, enum.Enum):
    BOOKED = "Booked"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# ── Association Tables ────────────────────────────────────────────────────

venue_sports = Table(
    "venue_sports",
    Base.metadata,
    Column("venue_id", Uuid, ForeignKey("venues.id", ondelete="CASCADE"), primary_key=True),
    Column("sport_id", Uuid, ForeignKey("sports.id", ondelete="CASCADE"), primary_key=True),
)

# Academies and memberships book slots either in the morning or the evening
academy_slots = Table(
    "academy_slots",
    Base.metadata,
    Column("academy_id", Uuid, ForeignKey("academies.id", ondelete="CASCADE"), primary_key=True),
    Column("slot_time_id", Uuid, ForeignKey("slot_times.id", ondelete="CASCADE"), primary_key=True),
    Column("period", Enum(SlotPeriod, native_enum=False, length=10), primary_key=True),
)

membership_slots = Table(
    "membership_slots",
    Base.metadata,
    Column("membership_id", Uuid, ForeignKey("memberships.id", ondelete="CASCADE"), primary_key=True),
    Column("slot_time_id", Uuid, ForeignKey("slot_times.id", ondelete="CASCADE"), primary_key=True),
    Column("period", Enum(SlotPeriod, native_enum=False, length=10), primary_key=True),
)

event_grounds = Table(
    "event_grounds",
    Base.metadata,
    Column("event_id", Uuid, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("ground_id", Uuid, ForeignKey("grounds.id", ondelete="CASCADE"), primary_key=True),
)

event_slots = Table(
    "event_slots",
    Base.metadata,
    Column("event_id", Uuid, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("slot_time_id", Uuid, ForeignKey("slot_times.id", ondelete="CASCADE"), primary_key=True),
)

slot_booking_slots = Table(
    "slot_booking_slots",
    Base.metadata,
    Column("slot_booking_id", Uuid, ForeignKey("slot_bookings.id", ondelete="CASCADE"), primary_key=True),
    Column("slot_time_id", Uuid, ForeignKey("slot_times.id", ondelete="CASCADE"), primary_key=True),
)


# ── Reference Entities ────────────────────────────────────────────────────

class City(TimestampMixin, Base):
    __tablename__ = "cities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<City(id={self.id}, name='{self.name}')>"


class Sport(TimestampMixin, Base):
    __tablename__ = "sports"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Menu(TimestampMixin, Base):
    """A section of the admin panel; role permissions are granted per menu."""

    __tablename__ = "menus"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Ground(TimestampMixin, Base):
    __tablename__ = "grounds"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    city_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("cities.id"), nullable=False)
    venue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("venues.id"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    venue = relationship("Venue", lazy="selectin")


class Academy(TimestampMixin, Base):
    __tablename__ = "academies"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    city_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("cities.id"), nullable=False)
    ground_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("grounds.id"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Membership(TimestampMixin, Base):
    __tablename__ = "memberships"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    city_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("cities.id"), nullable=False)
    ground_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("grounds.id"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Event(TimestampMixin, Base):
    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    event_status: Mapped[EventStatus] = mapped_column(
        Enum(EventStatus, native_enum=False, length=20),
        nullable=False,
        default=EventStatus.UPCOMING,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class SlotBooking(TimestampMixin, Base):
    __tablename__ = "slot_bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    ground_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("grounds.id"), nullable=False)
    booking_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    booking_status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, native_enum=False, length=20),
        nullable=False,
        default=BookingStatus.BOOKED,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class BlacklistedToken(Base):
    """Bearer tokens revoked at logout; any request carrying one is refused."""

    __tablename__ = "blacklisted_tokens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


__all__: List[str] = [
    "SlotPeriod",
    "EventStatus",
    "BookingStatus",
    "venue_sports",
    "academy_slots",
    "membership_slots",
    "event_grounds",
    "event_slots",
    "slot_booking_slots",
    "City",
    "Sport",
    "Menu",
    "Ground",
    "Academy",
    "Membership",
    "Event",
    "SlotBooking",
    "BlacklistedToken",
]
