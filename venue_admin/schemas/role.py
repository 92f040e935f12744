"""
Venue Admin — Role Schemas
============================

Request and response models for the role endpoints.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from venue_admin.schemas.common import Reference, RequestModel


class PermissionIn(RequestModel):
    menu: uuid.UUID
    add: bool
    view: bool
    update: bool
    delete: bool


def _unique_menus(permissions: Optional[List[PermissionIn]]) -> Optional[List[PermissionIn]]:
    if permissions is None:
        return None
    menus = [p.menu for p in permissions]
    if len(menus) != len(set(menus)):
        raise ValueError("each menu may appear only once")
    return permissions


class AddRoleRequest(RequestModel):
    name: str = Field(min_length=2, max_length=20)
    city: Optional[uuid.UUID] = None
    venue: Optional[uuid.UUID] = None
    permissions: List[PermissionIn]

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v):
        return _unique_menus(v)


class UpdateRoleRequest(RequestModel):
    id: uuid.UUID
    name: str = Field(min_length=2, max_length=20)
    city: Optional[uuid.UUID] = None
    venue: Optional[uuid.UUID] = None
    is_active: Optional[bool] = None
    permissions: Optional[List[PermissionIn]] = None

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v):
        return _unique_menus(v)


class RemoveRolesRequest(RequestModel):
    roleIds: List[uuid.UUID] = Field(min_length=1)


class PermissionOut(BaseModel):
    menu: Reference
    add: bool
    view: bool
    update: bool
    delete: bool

    model_config = ConfigDict(from_attributes=True)


class RoleOut(BaseModel):
    id: uuid.UUID
    name: str
    city: Optional[Reference] = None
    venue: Optional[Reference] = None
    permissions: List[PermissionOut]
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class RoleListData(BaseModel):
    count: int
    roles: List[RoleOut]


class RoleOptionsData(BaseModel):
    roles: List[Reference]
