"""
Venue Admin — Shared Pydantic Schemas
=======================================

What:  Response envelopes and small building blocks reused by every
       entity's request/response models.
How:   Every success is wrapped in `ApiResponse[T]` as
       `{"status": "success", "message": ..., "data": ...}`; every failure
       produced by the exception handlers matches `ErrorResponse`.
       Request bodies derive from `RequestModel`, which rejects unknown keys.
"""

import uuid
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class RequestModel(BaseModel):
    """Base for request bodies: unknown keys are a validation error."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class ApiResponse(BaseModel, Generic[T]):
    status: str = Field(default="success", description="Always 'success' for 2xx responses")
    message: str = Field(description="Human-readable outcome")
    data: Optional[T] = Field(default=None, description="Endpoint-specific payload")


class ErrorResponse(BaseModel):
    """
    What:  Body of every non-2xx response.
    Who:   Produced by the exception handlers registered in main.py.
    """

    status: str = Field(default="fail")
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable explanation")
    key: Optional[str] = Field(default=None, description="Request field the error refers to")
    request_id: str = Field(default="", description="Correlation id, also in X-Request-ID")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy, degraded or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    storage: str = Field(description="writable or unwritable (image and report directories)")
    uptime_seconds: float


class Reference(BaseModel):
    """`{id, name}` view of a related record."""

    id: uuid.UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class CreatedData(BaseModel):
    id: uuid.UUID


class Empty(BaseModel):
    pass
