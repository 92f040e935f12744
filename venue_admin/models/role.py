"""
Venue Admin — Role Models
===========================

What:  `roles` and `role_permissions` tables.
How:   A Role is scoped to an optional city and venue and owns one
       RolePermission row per menu holding add/view/update/delete flags.
       Permission rows are replaced wholesale on update (delete-orphan).

Natural key:
    (upper(name), city_id, venue_id) among rows with soft_delete = false.
    city/venue are nullable, so uniqueness is enforced by the service-level
    conflict check rather than a unique index.
"""

import uuid
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venue_admin.database import Base, TimestampMixin


class Role(TimestampMixin, Base):
    """
    Employee role assigned by an admin.

    `added_by` records the tier of the creator (SA, AD or SUB); listings
    only show roles created by the requester's own tier.
    """

    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    city_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("cities.id"), nullable=True
    )
    venue_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("venues.id"), nullable=True
    )
    added_by: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    soft_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    city = relationship("City", lazy="selectin")
    venue = relationship("Venue", lazy="selectin")
    permissions: Mapped[List["RolePermission"]] = relationship(
        back_populates="role",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_roles_city_venue", "city_id", "venue_id"),
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name='{self.name}', added_by='{self.added_by}')>"


class RolePermission(Base):
    """Per-menu CRUD flags of a role."""

    __tablename__ = "role_permissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False
    )
    menu_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("menus.id"), nullable=False)
    add: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    update: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    role: Mapped[Role] = relationship(back_populates="permissions")
    menu = relationship("Menu", lazy="selectin")
