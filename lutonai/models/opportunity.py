"""
Opportunity model (jobs, internships, mentorships...).
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON

from lutonai.db.base import Base, TimestampMixin, enum_column


class OpportunityType(str, enum.Enum):
    JOB = "Job"
    INTERNSHIP = "Internship"
    PROJECT = "Project"
    MENTORSHIP = "Mentorship"
    RESEARCH = "Research"
    VOLUNTEER = "Volunteer"
    LEARNING = "Learning"


class OpportunityCategory(str, enum.Enum):
    AI_DEVELOPMENT = "AI Development"
    DATA_SCIENCE = "Data Science"
    BUSINESS = "Business"
    DESIGN = "Design"
    RESEARCH = "Research"
    EDUCATION = "Education"
    COMMUNITY = "Community"


class OpportunityLevel(str, enum.Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    ALL_LEVELS = "All Levels"


class Commitment(str, enum.Enum):
    FULL_TIME = "Full Time"
    PART_TIME = "Part Time"
    FLEXIBLE = "Flexible"


class Opportunity(Base, TimestampMixin):
    __tablename__ = "opportunities"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(String(1000), nullable=False)
    type = enum_column(OpportunityType, nullable=False, index=True)
    category = enum_column(OpportunityCategory, nullable=False)
    level = enum_column(OpportunityLevel, nullable=False)
    commitment = enum_column(Commitment, nullable=False)
    skills = Column(JSON, nullable=False, default=list)
    location = Column(String(255), nullable=False)
    company_logo = Column(String(500), nullable=False)
    application_url = Column(String(500), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    application_deadline = Column(DateTime(timezone=True), nullable=True)
    contact_name = Column(String(100), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(30), nullable=True)
    remote_available = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Opportunity(id={self.id}, title={self.title}, type={self.type})>"
