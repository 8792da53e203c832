"""SQLAlchemy model for the user profile table."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.sql import expression

from app.infrastructure.database import Base


class ProfileModel(Base):
    """Database representation of a user account and its inbox."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    avatar_url = Column(String(512), nullable=True)
    group_id = Column(String(36), nullable=True, index=True)
    requestedgroupid = Column(String(36), nullable=True, index=True)
    is_group_creator = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    role = Column(String(20), nullable=False, default="Member")
    notifications = Column(JSON, nullable=False, default=list)
    attended_events = Column(JSON, nullable=False, default=list)
    receive_event_notifications = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    receive_news_notifications = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    receive_check_notifications = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    checked_in = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    check_in_time = Column(JSON, nullable=False, default=list)
    check_out_time = Column(JSON, nullable=False, default=list)
    push_token = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    version = Column(Integer, nullable=False, default=1)
