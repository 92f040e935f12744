"""
Venue Admin — Venue Route Handlers
====================================

What:  /add-venue, /get-venues, /update-venue, /remove-venues,
       /fetch-venues and the public /venues list.
How:   Thin handlers over VenueService. /update-venue is multipart/form-data
       because it carries image uploads; array fields (`supported_sports`,
       `deleted_files`) arrive JSON-encoded inside form fields.

Request Flow (/update-venue):
    1. FastAPI parses the form and the `images` file parts
    2. Array form fields are JSON-decoded, then validated by UpdateVenueRequest
    3. Every upload is read into memory (each is bounded to 1MB by validation)
    4. VenueService validates → deletes → stores → updates the record
"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from venue_admin.database import get_db_session
from venue_admin.dependencies import get_requester, require
from venue_admin.exceptions import ValidationError
from venue_admin.schemas.common import ApiResponse, CreatedData, Empty, ErrorResponse, Reference
from venue_admin.schemas.venue import (
    AddVenueRequest,
    RemoveVenuesRequest,
    UpdateVenueRequest,
    VenueListData,
)
from venue_admin.services.filters import parse_bool_list, parse_optional_uuid, parse_uuid_list
from venue_admin.services.permissions import Action, Menus
from venue_admin.services.requester import Requester
from venue_admin.services.venue_service import UploadedImage, venue_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Venues"])

ERRORS = {
    403: {"description": "Permission denied", "model": ErrorResponse},
    406: {"description": "Invalid input or token", "model": ErrorResponse},
}


def _json_field(raw: Optional[str], field: str):
    if raw is None or raw.strip() == "":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError(message=f'"{field}" must be a JSON array', field=field)


@router.post(
    "/add-venue",
    response_model=ApiResponse[CreatedData],
    responses={**ERRORS, 409: {"description": "Venue already exists", "model": ErrorResponse}},
    summary="Create a venue",
)
async def add_venue(
    body: AddVenueRequest,
    requester: Requester = Depends(require(Menus.VENUES, Action.ADD)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CreatedData]:
    created = await venue_service.add_venue(db, requester, body)
    return ApiResponse(message="Venue added successfully", data=created)


@router.get(
    "/get-venues",
    response_model=ApiResponse[VenueListData],
    responses=ERRORS,
    summary="List the venues visible to the requester",
    description=(
        "Supports `search` (name, case-insensitive), `is_active` "
        "(`true` or a JSON array such as `[true,false]`), `city`, `id`, "
        "`orderBy` + `sort` (`asc` or `desc`) and `offset`/`limit`."
    ),
)
async def get_venues(
    search: Optional[str] = Query(default=None),
    is_active: Optional[str] = Query(default=None),
    city: Optional[str] = Query(default=None),
    id: Optional[str] = Query(default=None),
    orderBy: Optional[str] = Query(default=None),
    sort: Optional[str] = Query(default=None, pattern="^(asc|desc)$"),
    offset: int = Query(default=0, ge=0),
    limit: Optional[int] = Query(default=None, ge=1),
    requester: Requester = Depends(require(Menus.VENUES, Action.VIEW)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[VenueListData]:
    data = await venue_service.list_venues(
        db,
        requester,
        search=search,
        is_active=parse_bool_list(is_active, "is_active"),
        venue_ids=parse_uuid_list(id, "id"),
        city_id=parse_optional_uuid(city, "city"),
        order_by=orderBy,
        sort=sort,
        offset=offset,
        limit=limit,
    )
    return ApiResponse(message="All venues fetched successfully", data=data)


@router.post(
    "/update-venue",
    response_model=ApiResponse[Empty],
    responses={
        **ERRORS,
        404: {"description": "Venue not found", "model": ErrorResponse},
        409: {"description": "Venue already exists", "model": ErrorResponse},
    },
    summary="Update a venue, its images included",
)
async def update_venue(
    id: str = Form(...),
    city: str = Form(...),
    name: Optional[str] = Form(default=None),
    address: Optional[str] = Form(default=None),
    geo_location: Optional[str] = Form(default=None),
    is_active: Optional[str] = Form(default=None),
    supported_sports: Optional[str] = Form(default=None),
    deleted_files: Optional[str] = Form(default=None),
    images: Optional[List[UploadFile]] = File(default=None),
    requester: Requester = Depends(require(Menus.VENUES, Action.UPDATE)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Empty]:
    data = UpdateVenueRequest(
        id=id,
        city=city,
        name=name,
        address=address,
        geo_location=geo_location,
        is_active=is_active,
        supported_sports=_json_field(supported_sports, "supported_sports"),
        deleted_files=_json_field(deleted_files, "deleted_files"),
    )

    uploads: List[UploadedImage] = []
    for upload in images or []:
        try:
            uploads.append(UploadedImage(upload.filename or "image", await upload.read()))
        finally:
            await upload.close()

    logger.info("Venue update request: id=%s, %d image(s)", data.id, len(uploads))
    await venue_service.update_venue(db, requester, data, uploads)
    return ApiResponse(message="Venue updated successfully", data=Empty())


@router.post(
    "/remove-venues",
    response_model=ApiResponse[Empty],
    responses=ERRORS,
    summary="Soft-delete venues",
)
async def remove_venues(
    body: RemoveVenuesRequest,
    requester: Requester = Depends(require(Menus.VENUES, Action.REMOVE)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Empty]:
    await venue_service.remove_venues(db, requester, body.venueIds)
    return ApiResponse(message="Venue removed successfully", data=Empty())


@router.get(
    "/fetch-venues",
    response_model=ApiResponse[List[Reference]],
    responses=ERRORS,
    summary="Active venues in the requester's scope as {id, name}",
)
async def fetch_venues(
    city: Optional[str] = Query(default=None),
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[Reference]]:
    venues = await venue_service.fetch_venues(
        db, requester, city_id=parse_optional_uuid(city, "city")
    )
    return ApiResponse(message="Venues fetched successfully", data=venues)


@router.get(
    "/venues",
    response_model=ApiResponse[List[Reference]],
    summary="Active venues for the customer site",
)
async def public_venues(
    city: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[Reference]]:
    venues = await venue_service.public_venues(db, city_id=parse_optional_uuid(city, "city"))
    return ApiResponse(message="", data=venues)
