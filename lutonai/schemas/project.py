from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from lutonai.schemas.common import Pagination, split_list


class Partner(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    logo: str = Field(..., min_length=1, max_length=500)


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1, max_length=50)
    partners: list[Partner] = []

    @field_validator("partners", mode="before")
    @classmethod
    def _parse_partners(cls, value):
        return split_list(value)


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    status: Optional[str] = Field(None, min_length=1, max_length=50)
    partners: Optional[list[Partner]] = None

    @field_validator("partners", mode="before")
    @classmethod
    def _parse_partners(cls, value):
        return split_list(value)


class ProjectResponse(BaseModel):
    id: int
    title: str
    description: str
    thumbnail: str
    status: str
    partners: list[Partner]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectListResponse(BaseModel):
    projects: list[ProjectResponse]
    pagination: Pagination
