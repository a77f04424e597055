from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from lutonai.models.post import PostCategory
from lutonai.schemas.common import Pagination, split_list


class PostCreate(BaseModel):
    title: str = Field(..., min_length=12, max_length=200)
    content: str = Field(..., min_length=400, max_length=10000)
    category: PostCategory
    tags: list[str] = []

    @field_validator("tags", mode="before")
    @classmethod
    def _parse_tags(cls, value):
        return split_list(value)


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=12, max_length=200)
    content: Optional[str] = Field(None, min_length=400, max_length=10000)
    category: Optional[PostCategory] = None
    tags: Optional[list[str]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _parse_tags(cls, value):
        return split_list(value)


class PostResponse(BaseModel):
    id: int
    title: str
    slug: str
    content: str
    category: PostCategory
    tags: list[str]
    thumbnail: str
    created_at: datetime

    model_config = {"from_attributes": True}


class PostListResponse(BaseModel):
    posts: list[PostResponse]
    pagination: Pagination
