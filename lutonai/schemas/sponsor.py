from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from lutonai.models.sponsor import SponsorshipLevel
from lutonai.schemas.common import Pagination


class SponsorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    website: Optional[str] = Field(None, max_length=500)
    sponsorship_level: SponsorshipLevel


class SponsorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    website: Optional[str] = Field(None, max_length=500)
    sponsorship_level: Optional[SponsorshipLevel] = None


class SponsorResponse(BaseModel):
    id: int
    name: str
    description: str
    logo: str
    email: str
    phone: Optional[str]
    website: Optional[str]
    sponsorship_level: SponsorshipLevel
    created_at: datetime

    model_config = {"from_attributes": True}


class SponsorListResponse(BaseModel):
    sponsors: list[SponsorResponse]
    pagination: Pagination
