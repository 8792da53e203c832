"""SQLAlchemy model for the community group table."""

from sqlalchemy import JSON, Column, DateTime, Integer, String, func

from app.infrastructure.database import Base


class GroupModel(Base):
    """Database representation of a group with its embedded lists."""

    __tablename__ = "groups"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    created_by = Column(String(36), nullable=True, index=True)
    group_password = Column(String(255), nullable=True)
    users = Column(JSON, nullable=False, default=list)
    requests = Column(JSON, nullable=False, default=list)
    events = Column(JSON, nullable=False, default=list)
    news = Column(JSON, nullable=False, default=list)
    reports = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    version = Column(Integer, nullable=False, default=1)
