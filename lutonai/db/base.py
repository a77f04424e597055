"""
Declarative base and shared column mixins.
"""

from sqlalchemy import Column, DateTime, Enum as SAEnum, func
from sqlalchemy.orm import DeclarativeBase

from lutonai.core.timeutils import utcnow


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )


def enum_column(enum_cls, **kwargs) -> Column:
    """String-backed enum column storing member values."""
    return Column(
        SAEnum(
            enum_cls,
            native_enum=False,
            length=32,
            values_callable=lambda members: [m.value for m in members],
            validate_strings=True,
        ),
        **kwargs,
    )
