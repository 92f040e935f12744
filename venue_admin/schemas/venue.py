"""
Venue Admin — Venue Schemas
=============================

Request and response models for the venue endpoints. The update endpoint is
multipart (it carries image uploads), so its form fields are collected by
the route and validated through `UpdateVenueRequest` here.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from venue_admin.schemas.common import Reference, RequestModel


class AddVenueRequest(RequestModel):
    city: uuid.UUID
    name: str = Field(min_length=2, max_length=150)
    address: str = Field(min_length=5)
    geo_location: str = Field(default="", max_length=255)
    supported_sports: List[uuid.UUID]


class UpdateVenueRequest(RequestModel):
    id: uuid.UUID
    city: uuid.UUID
    name: Optional[str] = Field(default=None, min_length=2, max_length=150)
    address: Optional[str] = Field(default=None, min_length=5)
    geo_location: Optional[str] = Field(default=None, max_length=255)
    is_active: Optional[bool] = None
    supported_sports: Optional[List[uuid.UUID]] = None
    deleted_files: Optional[List[str]] = None


class RemoveVenuesRequest(RequestModel):
    venueIds: List[uuid.UUID] = Field(min_length=1)


class SportOut(BaseModel):
    id: uuid.UUID
    name: str
    icon: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VenueOut(BaseModel):
    id: uuid.UUID
    name: str
    address: str
    city: Reference
    geo_location: str
    supported_sports: List[SportOut]
    image: List[str]
    video: List[str]
    type: Optional[str] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class VenueListData(BaseModel):
    count: int
    venues: List[VenueOut]
