"""
Venue Admin — Venue Service
=============================

What:  Create, list, update (including images) and soft-delete venues,
       plus the `{id, name}` lists used by admin pickers and the public site.
How:   Stateless service. Visibility uses the requester's scope with the
       venue's own id as the venue dimension, so a SubAdmin only sees the
       venues assigned to them. Scope always wins over query parameters.

Image update flow:
    validate every upload and check `deleted_files` belong to the venue →
    flush the row → delete files → store uploads as `<venue_id>-<name>` →
    recompute `image` from the directory. Listings read images from the
    directory too.
"""

import logging
import uuid
from typing import List, NamedTuple, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_admin.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from venue_admin.models.reference import Sport
from venue_admin.models.venue import Venue
from venue_admin.schemas.common import CreatedData, Reference
from venue_admin.schemas.venue import AddVenueRequest, UpdateVenueRequest, VenueListData, VenueOut
from venue_admin.services import references
from venue_admin.services.file_service import file_service
from venue_admin.services.filters import compact, in_condition, order, paginate, search_condition
from venue_admin.services.requester import Requester
from venue_admin.services.scope import Scope, resolve_scope, scope_conditions

logger = logging.getLogger(__name__)

# orderBy values accepted by get-venues
SORTABLE_COLUMNS = {
    "name": Venue.name,
    "address": Venue.address,
    "type": Venue.type,
    "is_active": Venue.is_active,
    "created_at": Venue.created_at,
    "createdAt": Venue.created_at,
    "updated_at": Venue.updated_at,
    "updatedAt": Venue.updated_at,
}


class UploadedImage(NamedTuple):
    filename: str
    content: bytes


def capitalize_words(value: str) -> str:
    """'city  STADIUM' → 'City  Stadium' (spacing preserved)."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split(" "))


def _visibility(scope: Scope):
    return scope_conditions(scope, city_column=Venue.city_id, venue_column=Venue.id)


class VenueService:
    """Business logic for the venue endpoints."""

    async def _ensure_unique(
        self,
        db: AsyncSession,
        name: str,
        city_id: uuid.UUID,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        conditions = [
            Venue.name == name,
            Venue.city_id == city_id,
            Venue.soft_delete.is_(False),
        ]
        if exclude_id is not None:
            conditions.append(Venue.id != exclude_id)
        if await db.scalar(select(func.count(Venue.id)).where(*conditions)):
            raise ConflictError(message="Venue already exists")

    async def _load_sports(self, db: AsyncSession, sport_ids: Sequence[uuid.UUID]) -> List[Sport]:
        wanted = list(dict.fromkeys(sport_ids))
        if not wanted:
            return []
        sports = (
            await db.scalars(
                select(Sport).where(Sport.id.in_(wanted), Sport.soft_delete.is_(False))
            )
        ).all()
        if len(sports) != len(wanted):
            raise ValidationError(
                message="Sport does not exist or is disabled", field="supported_sports"
            )
        return list(sports)

    async def add_venue(
        self, db: AsyncSession, requester: Requester, data: AddVenueRequest
    ) -> CreatedData:
        await references.live_city(db, data.city)
        if not resolve_scope(requester).allows_city(data.city):
            raise PermissionDeniedError()

        name = capitalize_words(data.name)
        await self._ensure_unique(db, name, data.city)

        venue = Venue(
            name=name,
            address=data.address,
            city_id=data.city,
            geo_location=data.geo_location,
            supported_sports=await self._load_sports(db, data.supported_sports),
        )
        try:
            db.add(venue)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to create venue '%s': %s", name, str(e))
            raise DatabaseError(context={"operation": "add_venue"})

        logger.info("Venue %s created (%s)", venue.id, name)
        return CreatedData(id=venue.id)

    async def list_venues(
        self,
        db: AsyncSession,
        requester: Requester,
        *,
        search: Optional[str] = None,
        is_active: Optional[List[bool]] = None,
        venue_ids: Optional[List[uuid.UUID]] = None,
        city_id: Optional[uuid.UUID] = None,
        order_by: Optional[str] = None,
        sort: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> VenueListData:
        """
        Scoped venue listing.

        Sorting: without `order_by` the list is oldest first; with it,
        `sort=asc` sorts ascending and anything else descending.
        """
        scope = resolve_scope(requester)
        if scope.city_id is not None:
            city_id = None  # the requester's own city applies through the scope

        conditions = [Venue.soft_delete.is_(False), *_visibility(scope)]
        conditions += compact(
            search_condition(search, [Venue.name]),
            in_condition(Venue.is_active, is_active),
            in_condition(Venue.id, venue_ids),
            Venue.city_id == city_id if city_id is not None else None,
        )

        if order_by:
            column = SORTABLE_COLUMNS.get(order_by)
            if column is None:
                raise ValidationError(
                    message=f'"orderBy" must be one of {sorted(set(SORTABLE_COLUMNS))}',
                    field="orderBy",
                )
            direction = "asc" if sort == "asc" else "desc"
        else:
            column, direction = Venue.created_at, "asc"

        stmt = order(
            select(Venue).where(*conditions).execution_options(populate_existing=True),
            column,
            direction,
        )
        venues = (await db.scalars(paginate(stmt, offset, limit))).all()
        count = await db.scalar(select(func.count(Venue.id)).where(*conditions))

        return VenueListData(
            count=count or 0,
            venues=[self._out(v) for v in venues],
        )

    def _out(self, venue: Venue) -> VenueOut:
        # the image directory is authoritative over the stored list
        out = VenueOut.model_validate(venue)
        return out.model_copy(update={"image": file_service.list_venue_images(venue.id)})

    async def update_venue(
        self,
        db: AsyncSession,
        requester: Requester,
        data: UpdateVenueRequest,
        images: Sequence[UploadedImage] = (),
    ) -> None:
        scope = resolve_scope(requester)
        venue = await db.scalar(
            select(Venue).where(
                Venue.id == data.id,
                Venue.soft_delete.is_(False),
                *_visibility(scope),
            )
            .execution_options(populate_existing=True)
        )
        if venue is None:
            raise NotFoundError(resource="venue", resource_id=str(data.id))

        await references.live_city(db, data.city)
        if not scope.allows_city(data.city):
            raise PermissionDeniedError()

        for image in images:
            file_service.validate_image(image.filename, image.content)

        name = capitalize_words(data.name) if data.name is not None else venue.name
        if (name, data.city) != (venue.name, venue.city_id):
            await self._ensure_unique(db, name, data.city, exclude_id=venue.id)

        sports = None
        if data.supported_sports is not None:
            sports = await self._load_sports(db, data.supported_sports)

        deleted_files = file_service.check_venue_image_paths(venue.id, data.deleted_files or [])

        venue.name = name
        venue.city_id = data.city
        if data.address is not None:
            venue.address = data.address
        if data.geo_location is not None:
            venue.geo_location = data.geo_location
        if data.is_active is not None:
            venue.is_active = data.is_active
        if sports is not None:
            venue.supported_sports = sports
        await self._flush(db, venue)

        # disk changes only after the row update is accepted
        if deleted_files:
            await file_service.remove_files(deleted_files)
        for image in images:
            await file_service.store_venue_image(venue.id, image.filename, image.content)
        venue.image = file_service.list_venue_images(venue.id)
        await self._flush(db, venue)
        logger.info("Venue %s updated (%d images)", venue.id, len(venue.image))

    async def _flush(self, db: AsyncSession, venue: Venue) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update venue %s: %s", venue.id, str(e))
            raise DatabaseError(context={"operation": "update_venue"})

    async def remove_venues(
        self, db: AsyncSession, requester: Requester, venue_ids: List[uuid.UUID]
    ) -> int:
        scope = resolve_scope(requester)
        result = await db.execute(
            update(Venue)
            .where(Venue.id.in_(venue_ids), Venue.soft_delete.is_(False), *_visibility(scope))
            .values(soft_delete=True)
            .execution_options(synchronize_session=False)
        )
        logger.info("Soft-deleted %d of %d venues", result.rowcount, len(venue_ids))
        return result.rowcount

    async def fetch_venues(
        self,
        db: AsyncSession,
        requester: Requester,
        *,
        city_id: Optional[uuid.UUID] = None,
    ) -> List[Reference]:
        """Active venues inside the requester's scope, for admin pickers."""
        scope = resolve_scope(requester)
        conditions = [
            Venue.soft_delete.is_(False),
            Venue.is_active.is_(True),
            *_visibility(scope),
        ]
        if city_id is not None:
            conditions.append(Venue.city_id == city_id)
        return await self._options(db, conditions)

    async def public_venues(
        self, db: AsyncSession, *, city_id: Optional[uuid.UUID] = None
    ) -> List[Reference]:
        """Active venues for the customer-facing site."""
        conditions = [Venue.soft_delete.is_(False), Venue.is_active.is_(True)]
        if city_id is not None:
            conditions.append(Venue.city_id == city_id)
        return await self._options(db, conditions)

    async def _options(self, db: AsyncSession, conditions) -> List[Reference]:
        rows = (
            await db.execute(select(Venue.id, Venue.name).where(*conditions).order_by(Venue.name))
        ).all()
        return [Reference(id=row.id, name=row.name) for row in rows]


# ── Singleton Instance ────────────────────────────────────────────────────
venue_service = VenueService()
