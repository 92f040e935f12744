"""
Venue Admin — Role Route Handlers
===================================

What:  /add-role, /get-all-roles, /update-role, /remove-roles, /fetch-roles
How:   Thin handlers: authenticate + permission check via dependencies,
       parse query strings, delegate to RoleService, wrap the result in
       the success envelope.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from venue_admin.database import get_db_session
from venue_admin.dependencies import get_requester, require
from venue_admin.schemas.common import ApiResponse, CreatedData, Empty, ErrorResponse
from venue_admin.schemas.role import (
    AddRoleRequest,
    RemoveRolesRequest,
    RoleListData,
    RoleOptionsData,
    UpdateRoleRequest,
)
from venue_admin.services.filters import parse_bool, parse_optional_uuid, parse_uuid_list
from venue_admin.services.permissions import Action, Menus
from venue_admin.services.requester import Requester
from venue_admin.services.role_service import role_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Roles"])

ERRORS = {
    403: {"description": "Permission denied", "model": ErrorResponse},
    406: {"description": "Invalid input or token", "model": ErrorResponse},
}


@router.post(
    "/add-role",
    response_model=ApiResponse[CreatedData],
    responses={**ERRORS, 409: {"description": "Role already exists", "model": ErrorResponse}},
    summary="Create a role with per-menu permissions",
)
async def add_role(
    body: AddRoleRequest,
    requester: Requester = Depends(require(Menus.ROLES, Action.ADD)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CreatedData]:
    created = await role_service.add_role(db, requester, body)
    return ApiResponse(message="Role created successfully", data=created)


@router.get(
    "/get-all-roles",
    response_model=ApiResponse[RoleListData],
    responses=ERRORS,
    summary="List the roles visible to the requester",
)
async def get_all_roles(
    search: Optional[str] = Query(default=None),
    is_active: Optional[str] = Query(default=None),
    id: Optional[str] = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: Optional[int] = Query(default=None, ge=1),
    requester: Requester = Depends(require(Menus.ROLES, Action.VIEW)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RoleListData]:
    data = await role_service.list_roles(
        db,
        requester,
        search=search,
        is_active=parse_bool(is_active, "is_active") if is_active else None,
        role_id=parse_optional_uuid(id, "id"),
        offset=offset,
        limit=limit,
    )
    return ApiResponse(message="Roles fetched successfully", data=data)


@router.post(
    "/update-role",
    response_model=ApiResponse[Empty],
    responses={
        **ERRORS,
        404: {"description": "Role not found", "model": ErrorResponse},
        409: {"description": "Role already exists", "model": ErrorResponse},
    },
    summary="Update a role",
)
async def update_role(
    body: UpdateRoleRequest,
    requester: Requester = Depends(require(Menus.ROLES, Action.UPDATE)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Empty]:
    await role_service.update_role(db, requester, body)
    return ApiResponse(message="Role updated successfully", data=Empty())


@router.post(
    "/remove-roles",
    response_model=ApiResponse[Empty],
    responses=ERRORS,
    summary="Soft-delete roles",
)
async def remove_roles(
    body: RemoveRolesRequest,
    requester: Requester = Depends(require(Menus.ROLES, Action.REMOVE)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Empty]:
    await role_service.remove_roles(db, requester, body.roleIds)
    return ApiResponse(message="Role removed successfully", data=Empty())


@router.get(
    "/fetch-roles",
    response_model=ApiResponse[RoleOptionsData],
    responses=ERRORS,
    summary="Active roles as {id, name} for selection lists",
)
async def fetch_roles(
    venue: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    id: Optional[str] = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: Optional[int] = Query(default=None, ge=1),
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RoleOptionsData]:
    data = await role_service.fetch_roles(
        db,
        requester,
        venue_ids=parse_uuid_list(venue, "venue"),
        search=search,
        role_id=parse_optional_uuid(id, "id"),
        offset=offset,
        limit=limit,
    )
    return ApiResponse(message="Roles fetched successfully", data=data)
