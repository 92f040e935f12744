"""
Venue Admin — VenueExpense Model
==================================

What:  Monthly expense sheet of a venue: a list of `{desc, amount}` items
       stored as JSON.
How:   One sheet per (month, year). Expense sheets are hard-deleted, so a
       plain unique constraint enforces the natural key.
"""

import uuid
from typing import Any, Dict, List

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venue_admin.database import Base, TimestampMixin


class VenueExpense(TimestampMixin, Base):
    __tablename__ = "venue_expenses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    city_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("cities.id"), nullable=False)
    venue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("venues.id"), nullable=False)
    month: Mapped[str] = mapped_column(String(20), nullable=False)
    year: Mapped[str] = mapped_column(String(4), nullable=False)
    expenses: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    city = relationship("City", lazy="selectin")
    venue = relationship("Venue", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("month", "year", name="uq_venue_expenses_month_year"),
    )

    @property
    def total(self) -> float:
        return sum(float(item.get("amount", 0)) for item in self.expenses or [])

    def __repr__(self) -> str:
        return f"<VenueExpense(id={self.id}, month='{self.month}', year='{self.year}')>"
