from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from lutonai.models.opportunity import (
    Commitment,
    OpportunityCategory,
    OpportunityLevel,
    OpportunityType,
)
from lutonai.schemas.common import Pagination, split_list


class OpportunityCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    type: OpportunityType
    category: OpportunityCategory
    level: OpportunityLevel
    commitment: Commitment
    skills: list[str] = Field(..., min_length=1)
    location: str = Field(..., min_length=1, max_length=255)
    application_url: str = Field(..., min_length=1, max_length=500)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    application_deadline: Optional[datetime] = None
    contact_name: Optional[str] = Field(None, max_length=100)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    remote_available: bool = False

    @field_validator("skills", mode="before")
    @classmethod
    def _parse_skills(cls, value):
        return split_list(value)


class OpportunityUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    type: Optional[OpportunityType] = None
    category: Optional[OpportunityCategory] = None
    level: Optional[OpportunityLevel] = None
    commitment: Optional[Commitment] = None
    skills: Optional[list[str]] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    application_url: Optional[str] = Field(None, min_length=1, max_length=500)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    application_deadline: Optional[datetime] = None
    contact_name: Optional[str] = Field(None, max_length=100)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    remote_available: Optional[bool] = None

    @field_validator("skills", mode="before")
    @classmethod
    def _parse_skills(cls, value):
        return split_list(value)


class OpportunityResponse(BaseModel):
    id: int
    title: str
    description: str
    type: OpportunityType
    category: OpportunityCategory
    level: OpportunityLevel
    commitment: Commitment
    skills: list[str]
    location: str
    company_logo: str
    application_url: str
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    application_deadline: Optional[datetime]
    contact_name: Optional[str]
    contact_email: Optional[str]
    contact_phone: Optional[str]
    remote_available: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class OpportunityListResponse(BaseModel):
    opportunities: list[OpportunityResponse]
    pagination: Pagination
