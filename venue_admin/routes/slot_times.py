"""
Venue Admin — SlotTime Route Handlers
=======================================

What:  Slot-time administration plus the two public availability views.
How:   Thin handlers over SlotTimeService. `ground`, `is_active` and `id`
       listing filters accept a single value or a JSON array.
"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from venue_admin.database import get_db_session
from venue_admin.dependencies import require
from venue_admin.exceptions import ValidationError
from venue_admin.models.slot_time import WEEKDAYS
from venue_admin.schemas.common import ApiResponse, CreatedData, Empty, ErrorResponse
from venue_admin.schemas.slot_time import (
    AddSlotTimeRequest,
    AvailableSlotOut,
    EventSlotOut,
    RemoveSlotTimesRequest,
    SlotTimeListData,
    UpdateSlotTimeRequest,
)
from venue_admin.services.filters import (
    parse_bool_list,
    parse_datetime,
    parse_uuid,
    parse_uuid_list,
)
from venue_admin.services.permissions import Action, Menus
from venue_admin.services.requester import Requester
from venue_admin.services.slot_time_service import slot_time_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Slot Times"])

ERRORS = {
    403: {"description": "Permission denied", "model": ErrorResponse},
    406: {"description": "Invalid input, token, or slot still in use", "model": ErrorResponse},
}


def _check_active_days(raw: Optional[str]) -> None:
    """`active_days` must be a JSON array of weekday keys (sun..sat)."""
    if raw is None or raw.strip() == "":
        return
    try:
        days = json.loads(raw)
    except json.JSONDecodeError:
        days = None
    if not isinstance(days, list) or any(day not in WEEKDAYS for day in days):
        raise ValidationError(
            message=f'"active_days" must be an array of {", ".join(WEEKDAYS)}',
            field="active_days",
        )


@router.post(
    "/add-slot-time",
    response_model=ApiResponse[CreatedData],
    responses={**ERRORS, 409: {"description": "Slot already exists", "model": ErrorResponse}},
    summary="Create a slot time on a ground",
)
async def add_slot_time(
    body: AddSlotTimeRequest,
    requester: Requester = Depends(require(Menus.SLOT_TIMES, Action.ADD)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CreatedData]:
    created = await slot_time_service.add_slot_time(db, requester, body)
    return ApiResponse(message="Slot added successfully", data=created)


@router.get(
    "/get-slot-times",
    response_model=ApiResponse[SlotTimeListData],
    responses=ERRORS,
    summary="List the slot times visible to the requester",
)
async def get_slot_times(
    search: Optional[str] = Query(default=None),
    is_active: Optional[str] = Query(default=None),
    id: Optional[str] = Query(default=None),
    ground: Optional[str] = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: Optional[int] = Query(default=None, ge=1),
    requester: Requester = Depends(require(Menus.SLOT_TIMES, Action.VIEW)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[SlotTimeListData]:
    data = await slot_time_service.list_slot_times(
        db,
        requester,
        search=search,
        is_active=parse_bool_list(is_active, "is_active"),
        slot_ids=parse_uuid_list(id, "id"),
        ground_ids=parse_uuid_list(ground, "ground"),
        offset=offset,
        limit=limit,
    )
    return ApiResponse(message="Slots fetched successfully", data=data)


@router.post(
    "/update-slot-time",
    response_model=ApiResponse[Empty],
    responses={
        **ERRORS,
        404: {"description": "Slot time not found", "model": ErrorResponse},
        409: {"description": "Slot already exists", "model": ErrorResponse},
    },
    summary="Update a slot time that nothing depends on",
)
async def update_slot_time(
    body: UpdateSlotTimeRequest,
    requester: Requester = Depends(require(Menus.SLOT_TIMES, Action.UPDATE)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Empty]:
    await slot_time_service.update_slot_time(db, requester, body)
    return ApiResponse(message="Slot time updated successfully", data=Empty())


@router.post(
    "/remove-slot-times",
    response_model=ApiResponse[Empty],
    responses=ERRORS,
    summary="Soft-delete slot times that nothing depends on",
)
async def remove_slot_times(
    body: RemoveSlotTimesRequest,
    requester: Requester = Depends(require(Menus.SLOT_TIMES, Action.REMOVE)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Empty]:
    await slot_time_service.remove_slot_times(db, requester, body.slotIds)
    return ApiResponse(message="Slot removed successfully", data=Empty())


# ── Public Availability ───────────────────────────────────────────────────

@router.get(
    "/get-available-slots",
    response_model=ApiResponse[List[AvailableSlotOut]],
    responses={406: ERRORS[406]},
    summary="Slots of a ground, flagged when held by an academy or membership",
)
async def get_available_slots(
    ground: Optional[str] = Query(default=None),
    city: Optional[str] = Query(default=None),
    active_days: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[AvailableSlotOut]]:
    if not ground:
        raise ValidationError(message='"ground" is required', field="ground")
    if not city:
        raise ValidationError(message='"city" is required', field="city")
    _check_active_days(active_days)

    slots = await slot_time_service.available_slots(
        db, parse_uuid(ground, "ground"), parse_uuid(city, "city")
    )
    return ApiResponse(message="Available slots fetched successfully", data=slots)


@router.get(
    "/available-slots-for-event",
    response_model=ApiResponse[List[EventSlotOut]],
    responses={406: ERRORS[406]},
    summary="Slots of a ground, flagged when an event covers the date range",
)
async def available_slots_for_event(
    ground: Optional[str] = Query(default=None),
    start_date: Optional[str] = Query(default=None),
    end_date: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[EventSlotOut]]:
    if not ground:
        raise ValidationError(message='"ground" is required', field="ground")
    slots = await slot_time_service.available_slots_for_event(
        db,
        parse_uuid(ground, "ground"),
        parse_datetime(start_date, "start_date"),
        parse_datetime(end_date, "end_date"),
    )
    return ApiResponse(message="Available slots for event fetched successfully", data=slots)
