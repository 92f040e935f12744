"""
Venue Admin — Venue Model
===========================

What:  ORM model for the `venues` table.
How:   A venue belongs to one city, lists the sports it supports through
       the `venue_sports` association, and keeps image/video paths as JSON
       arrays of paths relative to the storage root.

Natural key:
    (name, city_id) among live rows. Names are stored word-capitalised so
    "city stadium" and "City Stadium" collide.
"""

import uuid
from typing import List, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venue_admin.database import Base, TimestampMixin
from venue_admin.models.reference import venue_sports


class Venue(TimestampMixin, Base):
    __tablename__ = "venues"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    city_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("cities.id"), nullable=False)
    geo_location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    image: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    video: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    city = relationship("City", lazy="selectin")
    supported_sports = relationship("Sport", secondary=venue_sports, lazy="selectin")

    __table_args__ = (
        Index("idx_venues_city", "city_id"),
    )

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name='{self.name}', city_id={self.city_id})>"
