"""
Venue Admin — SlotTime Schemas
================================

Request and response models for the slot-time endpoints.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from venue_admin.schemas.common import Reference, RequestModel

class Price(RequestModel):
    """Price of the slot for each weekday; every day must be priced."""

    sun: float = Field(ge=0)
    mon: float = Field(ge=0)
    tue: float = Field(ge=0)
    wed: float = Field(ge=0)
    thu: float = Field(ge=0)
    fri: float = Field(ge=0)
    sat: float = Field(ge=0)


class AddSlotTimeRequest(RequestModel):
    ground: uuid.UUID
    venue: uuid.UUID
    slot: str = Field(min_length=10, max_length=50)
    price: Price


class UpdateSlotTimeRequest(RequestModel):
    id: uuid.UUID
    ground: Optional[uuid.UUID] = None
    slot: Optional[str] = Field(default=None, min_length=10, max_length=50)
    price: Optional[Price] = None
    is_active: Optional[bool] = None


class RemoveSlotTimesRequest(RequestModel):
    slotIds: List[uuid.UUID] = Field(min_length=1)


class SlotGroundOut(BaseModel):
    id: uuid.UUID
    name: str
    venue: Reference

    model_config = ConfigDict(from_attributes=True)


class SlotTimeOut(BaseModel):
    id: uuid.UUID
    slot: str
    price: Price
    ground: SlotGroundOut
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class SlotTimeListData(BaseModel):
    count: int
    slots: List[SlotTimeOut]


class AvailableSlotOut(BaseModel):
    id: uuid.UUID
    slot: str
    booked: bool
    price: Price


class EventSlotOut(BaseModel):
    id: uuid.UUID
    slot: str
    booked: bool
