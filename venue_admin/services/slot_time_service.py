"""
Venue Admin — SlotTime Service
================================

What:  Create, list, update and soft-delete slot times, and the two public
       availability views (academy/membership occupancy and event
       occupancy of a ground's slots).
How:   A slot time is written with the city and venue of its ground, so
       listings are scoped on plain columns. Updates and removals go
       through the usage guard first: a slot still referenced by live
       schedules or future bookings cannot change.

Usage guard order:
    upcoming event → academy → membership → booking dated today or later
"""

import logging
import uuid
from datetime import date, datetime, time, timezone
from typing import List, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_admin.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from venue_admin.models.reference import (
    Academy,
    BookingStatus,
    Event,
    EventStatus,
    Membership,
    SlotBooking,
    academy_slots,
    event_grounds,
    event_slots,
    membership_slots,
    slot_booking_slots,
)
from venue_admin.models.slot_time import SlotTime
from venue_admin.schemas.common import CreatedData
from venue_admin.schemas.slot_time import (
    AddSlotTimeRequest,
    AvailableSlotOut,
    EventSlotOut,
    SlotTimeListData,
    SlotTimeOut,
    UpdateSlotTimeRequest,
)
from venue_admin.services import references
from venue_admin.services.filters import compact, in_condition, paginate, search_condition
from venue_admin.services.requester import Requester
from venue_admin.services.scope import Scope, resolve_scope, scope_conditions

logger = logging.getLogger(__name__)

SLOT_EXISTS = "Slot already exists"


def _visibility(scope: Scope):
    return scope_conditions(
        scope,
        city_column=SlotTime.city_id,
        venue_column=SlotTime.venue_id,
        ground_column=SlotTime.ground_id,
    )


def _today() -> date:
    return datetime.now(timezone.utc).date()


class SlotTimeService:
    """Business logic for the slot-time endpoints."""

    # ── Guards ────────────────────────────────────────────────────────────

    async def _ensure_unique(
        self,
        db: AsyncSession,
        ground_id: uuid.UUID,
        slot: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        conditions = [
            SlotTime.ground_id == ground_id,
            SlotTime.slot == slot,
            SlotTime.soft_delete.is_(False),
        ]
        if exclude_id is not None:
            conditions.append(SlotTime.id != exclude_id)
        if await db.scalar(select(func.count(SlotTime.id)).where(*conditions)):
            raise ConflictError(message=SLOT_EXISTS)

    async def ensure_unused(self, db: AsyncSession, slot_ids: Sequence[uuid.UUID]) -> None:
        """
        Refuse to touch slots that live records still depend on.

        Raises:
            ValidationError naming the first kind of dependent found.
        """
        ids = list(slot_ids)

        events = await db.scalar(
            select(func.count(Event.id))
            .join(event_slots, event_slots.c.event_id == Event.id)
            .where(
                event_slots.c.slot_time_id.in_(ids),
                Event.event_status == EventStatus.UPCOMING,
                Event.is_active.is_(True),
                Event.soft_delete.is_(False),
            )
        )
        if events:
            raise ValidationError(message="The slot is used in event, please remove and try again")

        academies = await db.scalar(
            select(func.count(Academy.id))
            .join(academy_slots, academy_slots.c.academy_id == Academy.id)
            .where(
                academy_slots.c.slot_time_id.in_(ids),
                Academy.is_active.is_(True),
                Academy.soft_delete.is_(False),
            )
        )
        if academies:
            raise ValidationError(message="The slot is used in academy, please remove and try again")

        memberships = await db.scalar(
            select(func.count(Membership.id))
            .join(membership_slots, membership_slots.c.membership_id == Membership.id)
            .where(
                membership_slots.c.slot_time_id.in_(ids),
                Membership.is_active.is_(True),
                Membership.soft_delete.is_(False),
            )
        )
        if memberships:
            raise ValidationError(
                message="The slot is used in membership, please remove and try again"
            )

        bookings = await db.scalar(
            select(func.count(SlotBooking.id))
            .join(slot_booking_slots, slot_booking_slots.c.slot_booking_id == SlotBooking.id)
            .where(
                slot_booking_slots.c.slot_time_id.in_(ids),
                SlotBooking.booking_status == BookingStatus.BOOKED,
                SlotBooking.booking_date >= _today(),
                SlotBooking.is_active.is_(True),
                SlotBooking.soft_delete.is_(False),
            )
        )
        if bookings:
            raise ValidationError(
                message="The slot is booked, please cancel the booking and try again"
            )

    async def _flush(self, db: AsyncSession, operation: str) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Slot uniqueness violated during %s: %s", operation, str(e.orig))
            raise ConflictError(message=SLOT_EXISTS)
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, str(e))
            raise DatabaseError(context={"operation": operation})

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def add_slot_time(
        self, db: AsyncSession, requester: Requester, data: AddSlotTimeRequest
    ) -> CreatedData:
        """
        Create a slot time.

        Check order:
            1. requester's ground assignment covers the ground (403)
            2. no live slot with the same ground and slot text (409)
            3. ground and venue live, ground belongs to venue (406)
            4. venue lies in the requester's city, when it has one (406)
            5. venue is one of the requester's assigned venues, for sub-admins (403)
        """
        scope = resolve_scope(requester)
        if not scope.allows_ground(data.ground):
            raise PermissionDeniedError()

        await self._ensure_unique(db, data.ground, data.slot)

        ground = await references.live_ground(db, data.ground)
        venue = await references.live_venue(db, data.venue)
        if ground.venue_id != venue.id:
            raise ValidationError(
                message="The venue doesn't have the ground you selected", field="ground"
            )
        if not scope.allows_city(venue.city_id):
            raise ValidationError(
                message="The city doesn't have the venue you selected", field="venue"
            )
        if not scope.allows_venue(venue.id):
            raise PermissionDeniedError()

        slot_time = SlotTime(
            city_id=venue.city_id,
            venue_id=venue.id,
            ground_id=ground.id,
            slot=data.slot,
            price=data.price.model_dump(),
        )
        db.add(slot_time)
        await self._flush(db, "add_slot_time")

        logger.info("Slot time %s created on ground %s (%s)", slot_time.id, ground.id, data.slot)
        return CreatedData(id=slot_time.id)

    async def list_slot_times(
        self,
        db: AsyncSession,
        requester: Requester,
        *,
        search: Optional[str] = None,
        is_active: Optional[List[bool]] = None,
        slot_ids: Optional[List[uuid.UUID]] = None,
        ground_ids: Optional[List[uuid.UUID]] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> SlotTimeListData:
        scope = resolve_scope(requester)
        if scope.ground_ids is not None:
            ground_ids = None  # assigned grounds apply through the scope

        conditions = [SlotTime.soft_delete.is_(False), *_visibility(scope)]
        conditions += compact(
            search_condition(search, [SlotTime.slot]),
            in_condition(SlotTime.is_active, is_active),
            in_condition(SlotTime.id, slot_ids),
            in_condition(SlotTime.ground_id, ground_ids),
        )

        stmt = (
            select(SlotTime)
            .where(*conditions)
            .order_by(SlotTime.created_at)
            .execution_options(populate_existing=True)
        )
        slots = (await db.scalars(paginate(stmt, offset, limit))).all()
        count = await db.scalar(select(func.count(SlotTime.id)).where(*conditions))

        return SlotTimeListData(
            count=count or 0,
            slots=[SlotTimeOut.model_validate(s) for s in slots],
        )

    async def update_slot_time(
        self, db: AsyncSession, requester: Requester, data: UpdateSlotTimeRequest
    ) -> None:
        scope = resolve_scope(requester)
        slot_time = await db.scalar(
            select(SlotTime).where(
                SlotTime.id == data.id,
                SlotTime.soft_delete.is_(False),
                *_visibility(scope),
            )
        )
        if slot_time is None:
            raise NotFoundError(resource="slot time", resource_id=str(data.id))

        await self.ensure_unused(db, [slot_time.id])

        ground_id = slot_time.ground_id
        if data.ground is not None and data.ground != slot_time.ground_id:
            if not scope.allows_ground(data.ground):
                raise PermissionDeniedError()
            ground = await references.live_ground(db, data.ground)
            venue = await references.live_venue(db, ground.venue_id)
            if not scope.allows_city(venue.city_id):
                raise ValidationError(
                    message="The city doesn't have the venue you selected", field="venue"
                )
            if not scope.allows_venue(venue.id):
                raise PermissionDeniedError()
            ground_id = ground.id
            slot_time.venue_id = venue.id
            slot_time.city_id = venue.city_id

        slot = data.slot if data.slot is not None else slot_time.slot
        if (ground_id, slot) != (slot_time.ground_id, slot_time.slot):
            await self._ensure_unique(db, ground_id, slot, exclude_id=slot_time.id)

        slot_time.ground_id = ground_id
        slot_time.slot = slot
        if data.price is not None:
            slot_time.price = data.price.model_dump()
        if data.is_active is not None:
            slot_time.is_active = data.is_active

        await self._flush(db, "update_slot_time")
        logger.info("Slot time %s updated", slot_time.id)

    async def remove_slot_times(
        self, db: AsyncSession, requester: Requester, slot_ids: List[uuid.UUID]
    ) -> int:
        """
        Soft-delete the listed slots the requester can see.

        Ids outside the requester's scope are ignored; nothing is removed if
        any of the remaining slots is still in use.
        """
        scope = resolve_scope(requester)
        visible_ids = (await db.scalars(
            select(SlotTime.id).where(
                SlotTime.id.in_(slot_ids),
                SlotTime.soft_delete.is_(False),
                *_visibility(scope),
            )
        )).all()
        if not visible_ids:
            return 0

        await self.ensure_unused(db, visible_ids)

        result = await db.execute(
            update(SlotTime)
            .where(SlotTime.id.in_(visible_ids))
            .values(soft_delete=True)
            .execution_options(synchronize_session=False)
        )
        logger.info("Soft-deleted %d of %d slot times", result.rowcount, len(slot_ids))
        return result.rowcount

    # ── Availability ──────────────────────────────────────────────────────

    async def _live_slots(self, db: AsyncSession, *conditions) -> Sequence[SlotTime]:
        stmt = (
            select(SlotTime)
            .where(SlotTime.soft_delete.is_(False), SlotTime.is_active.is_(True), *conditions)
            .order_by(SlotTime.created_at)
        )
        return (await db.scalars(stmt)).all()

    async def available_slots(
        self, db: AsyncSession, ground_id: uuid.UUID, city_id: uuid.UUID
    ) -> List[AvailableSlotOut]:
        """Live slots of a ground, flagged `booked` when an academy or membership holds them."""
        academy_held = (
            select(academy_slots.c.slot_time_id)
            .join(Academy, Academy.id == academy_slots.c.academy_id)
            .where(
                Academy.ground_id == ground_id,
                Academy.city_id == city_id,
                Academy.is_active.is_(True),
                Academy.soft_delete.is_(False),
            )
        )
        membership_held = (
            select(membership_slots.c.slot_time_id)
            .join(Membership, Membership.id == membership_slots.c.membership_id)
            .where(
                Membership.ground_id == ground_id,
                Membership.city_id == city_id,
                Membership.is_active.is_(True),
                Membership.soft_delete.is_(False),
            )
        )
        held = set((await db.scalars(academy_held)).all())
        held.update((await db.scalars(membership_held)).all())

        slots = await self._live_slots(
            db, SlotTime.ground_id == ground_id, SlotTime.city_id == city_id
        )
        return [
            AvailableSlotOut(id=s.id, slot=s.slot, booked=s.id in held, price=s.price)
            for s in slots
        ]

    async def available_slots_for_event(
        self,
        db: AsyncSession,
        ground_id: uuid.UUID,
        start: datetime,
        end: datetime,
    ) -> List[EventSlotOut]:
        """
        Live slots of a ground, flagged `booked` when an event on that ground
        covers the whole requested window.

        The window is widened to whole days: start at 00:00:00.000 and end
        at 23:59:59.999, both UTC.
        """
        if start > end:
            raise ValidationError(message="Invalid dates")

        window_start = datetime.combine(start.astimezone(timezone.utc).date(), time.min, timezone.utc)
        window_end = datetime.combine(
            end.astimezone(timezone.utc).date(), time(23, 59, 59, 999000), timezone.utc
        )

        held_stmt = (
            select(event_slots.c.slot_time_id)
            .join(Event, Event.id == event_slots.c.event_id)
            .join(event_grounds, event_grounds.c.event_id == Event.id)
            .where(
                event_grounds.c.ground_id == ground_id,
                Event.start_date <= window_start,
                Event.end_date >= window_end,
                Event.is_active.is_(True),
                Event.soft_delete.is_(False),
            )
        )
        held = set((await db.scalars(held_stmt)).all())

        slots = await self._live_slots(db, SlotTime.ground_id == ground_id)
        return [EventSlotOut(id=s.id, slot=s.slot, booked=s.id in held) for s in slots]


# ── Singleton Instance ────────────────────────────────────────────────────
slot_time_service = SlotTimeService()
