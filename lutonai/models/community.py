"""
Community sign-ups ("join us" list) and contact form messages.
"""

from sqlalchemy import Column, Integer, String, Text

from lutonai.db.base import Base, TimestampMixin


class CommunityMember(Base, TimestampMixin):
    __tablename__ = "community_members"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    organization = Column(String(100), nullable=False, default="")
    area_of_interest = Column(String(150), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<CommunityMember(id={self.id}, email={self.email})>"


class ContactMessage(Base, TimestampMixin):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    subject = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
