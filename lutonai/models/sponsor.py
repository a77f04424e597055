"""
Sponsor model. Logos are stored through the upload backend; only the URL lives here.
"""

import enum

from sqlalchemy import Column, Integer, String

from lutonai.db.base import Base, TimestampMixin, enum_column


class SponsorshipLevel(str, enum.Enum):
    PLATINUM = "Platinum"
    GOLD = "Gold"
    SILVER = "Silver"
    BRONZE = "Bronze"
    PARTNER = "Partner"


class Sponsor(Base, TimestampMixin):
    __tablename__ = "sponsors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(1000), nullable=False)
    logo = Column(String(500), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=True)
    website = Column(String(500), nullable=True)
    sponsorship_level = enum_column(SponsorshipLevel, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Sponsor(id={self.id}, name={self.name}, level={self.sponsorship_level})>"
