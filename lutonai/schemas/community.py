from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class CommunitySignup(BaseModel):
    first_name: str = Field(..., min_length=3, max_length=20)
    last_name: str = Field(..., min_length=3, max_length=20)
    email: EmailStr
    organization: Optional[str] = Field(None, min_length=3, max_length=50)
    area_of_interest: Optional[str] = Field(None, min_length=3, max_length=150)


class CommunityMemberResponse(BaseModel):
    id: int
    name: str
    email: str
    organization: str
    area_of_interest: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CommunitySignupResponse(BaseModel):
    message: str
    member: CommunityMemberResponse


class ContactCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)


class ContactResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    subject: str
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}
