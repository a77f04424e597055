"""
Pydantic schemas for event registration requests and listings.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field

from lutonai.models.registration import RegistrationStatus
from lutonai.schemas.common import Pagination
from lutonai.schemas.event import EventAvailability, EventStatus


class RegistrationCreate(BaseModel):
    event_id: int
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, min_length=10, max_length=20)
    organization: Optional[str] = Field(None, min_length=1, max_length=100)
    dietary_requirements: Optional[str] = Field(None, max_length=500)
    special_requirements: Optional[str] = Field(None, max_length=500)


class RegistrationStatusUpdate(BaseModel):
    status: RegistrationStatus


class RegistrationQuery(BaseModel):
    event_id: int
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort_by: Literal["created_at", "name", "email"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    search: Optional[str] = Field(None, max_length=100)
    status: Optional[RegistrationStatus] = None


class RegistrationResponse(BaseModel):
    id: int
    event_id: int
    name: str
    email: str
    phone: Optional[str]
    organization: Optional[str]
    dietary_requirements: Optional[str]
    special_requirements: Optional[str]
    status: RegistrationStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class RegistrationCreatedResponse(BaseModel):
    message: str
    registration: RegistrationResponse
    availability: EventAvailability
    event_status: EventStatus


class RegistrationListResponse(BaseModel):
    registrations: list[RegistrationResponse]
    pagination: Pagination
    availability: EventAvailability
    event_status: EventStatus
