"""
Community post model. `slug` is derived from the title and kept unique.
"""

import enum

from sqlalchemy import Column, Integer, String, Text, JSON

from lutonai.db.base import Base, TimestampMixin, enum_column


class PostCategory(str, enum.Enum):
    SCIENCE = "Science"
    TECHNOLOGY = "Technology"
    GENERAL = "General"
    ARTIFICIAL_INTELLIGENCE = "Artificial Intelligence"
    OTHER = "Other"


class Post(Base, TimestampMixin):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(220), unique=True, index=True, nullable=False)
    content = Column(Text, nullable=False)
    category = enum_column(PostCategory, nullable=False, index=True)
    tags = Column(JSON, nullable=False, default=list)
    thumbnail = Column(String(500), nullable=False)

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, slug={self.slug})>"
