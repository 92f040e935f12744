"""
Venue Admin — Reference Checks
================================

What:  Loads referenced records and verifies they are usable before a
       mutation: exists → active → not soft-deleted, and for menus, that
       every requested menu exists.
How:   Each helper raises ValidationError (406) naming the request field on
       the first failure. Cross-reference checks (ground belongs to venue,
       venue belongs to city) stay in the entity services because their
       order differs per operation.
"""

import uuid
from typing import Iterable, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from venue_admin.exceptions import ValidationError
from venue_admin.models.reference import City, Ground, Menu
from venue_admin.models.venue import Venue

T = TypeVar("T")


async def get_live(
    db: AsyncSession,
    model: Type[T],
    entity_id: uuid.UUID,
    *,
    field: str,
    message: str,
) -> T:
    entity = await db.get(model, entity_id)
    if entity is None or not entity.is_active or entity.soft_delete:
        raise ValidationError(message=message, field=field)
    return entity


async def live_city(db: AsyncSession, city_id: uuid.UUID, field: str = "city") -> City:
    return await get_live(
        db, City, city_id, field=field, message="City does not exist or is disabled"
    )


async def live_venue(db: AsyncSession, venue_id: uuid.UUID, field: str = "venue") -> Venue:
    return await get_live(
        db, Venue, venue_id, field=field, message="Venue does not exist or is disabled"
    )


async def live_ground(db: AsyncSession, ground_id: uuid.UUID, field: str = "ground") -> Ground:
    return await get_live(
        db, Ground, ground_id, field=field, message="Ground does not exist or is disabled"
    )


async def ensure_menus_exist(db: AsyncSession, menu_ids: Iterable[uuid.UUID]) -> None:
    wanted = set(menu_ids)
    if not wanted:
        return
    found = await db.scalar(
        select(func.count(Menu.id)).where(
            Menu.id.in_(list(wanted)),
            Menu.soft_delete.is_(False),
        )
    )
    if found != len(wanted):
        raise ValidationError(message="Menu does not exist", field="menu")
