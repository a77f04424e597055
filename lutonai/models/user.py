"""
User model with secure password storage and an admin/user role.
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean

from lutonai.db.base import Base, TimestampMixin, enum_column


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = enum_column(UserRole, nullable=False, default=UserRole.USER, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
