"""
Venue Admin — SlotTime Model
==============================

What:  ORM model for the `slot_times` table: a bookable time window on a
       ground, priced per weekday.
How:   `price` is a JSON object keyed sun..sat. City and venue are copied
       from the ground's venue when the slot is written so listings can be
       scoped without joins.

Uniqueness:
    One live slot per (ground_id, slot). Enforced by a partial unique index
    (PostgreSQL and SQLite both support WHERE on an index) in addition to
    the service-level check, so a concurrent duplicate fails on flush.
"""

import uuid
from typing import Dict

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venue_admin.database import Base, TimestampMixin

WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


class SlotTime(TimestampMixin, Base):
    __tablename__ = "slot_times"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    city_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("cities.id"), nullable=False)
    venue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("venues.id"), nullable=False)
    ground_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("grounds.id"), nullable=False)
    price: Mapped[Dict[str, float]] = mapped_column(JSON, nullable=False)
    slot: Mapped[str] = mapped_column(String(50), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    ground = relationship("Ground", lazy="selectin")

    __table_args__ = (
        Index(
            "uq_slot_times_ground_slot_live",
            "ground_id",
            "slot",
            unique=True,
            postgresql_where=text("soft_delete = false"),
            sqlite_where=text("soft_delete = 0"),
        ),
        Index("idx_slot_times_city_venue", "city_id", "venue_id"),
    )

    def __repr__(self) -> str:
        return f"<SlotTime(id={self.id}, ground_id={self.ground_id}, slot='{self.slot}')>"
