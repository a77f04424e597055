from sqlalchemy import Column, Integer, String, Text, JSON

from lutonai.db.base import Base, TimestampMixin


class Project(Base, TimestampMixin):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    thumbnail = Column(String(500), nullable=False)
    status = Column(String(50), nullable=False)
    # [{"name": ..., "logo": ...}]
    partners = Column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, title={self.title})>"
