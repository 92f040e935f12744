"""
Venue Admin — VenueExpense Schemas
====================================

Request and response models for the venue expense endpoints.
"""

import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from venue_admin.schemas.common import Reference, RequestModel

Month = Literal[
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


class ExpenseItem(RequestModel):
    desc: str = Field(min_length=1)
    amount: float = Field(ge=0)


class AddVenueExpenseRequest(RequestModel):
    city: uuid.UUID
    venue: uuid.UUID
    month: Month
    year: str = Field(pattern=r"^\d{4}$")
    expenses: List[ExpenseItem]


class UpdateVenueExpenseRequest(RequestModel):
    id: uuid.UUID
    city: uuid.UUID
    venue: uuid.UUID
    month: Optional[Month] = None
    year: Optional[str] = Field(default=None, pattern=r"^\d{4}$")
    expenses: List[ExpenseItem]


class RemoveVenueExpensesRequest(RequestModel):
    expenseIds: List[uuid.UUID] = Field(min_length=1)


class ExpenseItemOut(BaseModel):
    desc: str
    amount: float


class VenueExpenseOut(BaseModel):
    id: uuid.UUID
    city: Reference
    venue: Reference
    month: str
    year: str
    expenses: List[ExpenseItemOut]
    total_exp: float

    model_config = ConfigDict(from_attributes=True)


class VenueExpenseListData(BaseModel):
    count: int
    outlays: List[VenueExpenseOut]
