from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.datetime_utils import utcnow


class Announcement(Base):
    __tablename__ = "announcements"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    announcement_type = Column(String, nullable=False, default="announcement")
    priority = Column(String, nullable=False, default="medium")  # low, medium, high, urgent
    visibility = Column(String, nullable=False, default="all")  # all, atleti, maestri, admin
    expiry_date = Column(DateTime, nullable=True)
    is_published = Column(Boolean, default=True)
    is_pinned = Column(Boolean, default=False)
    view_count = Column(Integer, default=0)
    image_url = Column(String, nullable=True)
    link_url = Column(String, nullable=True)
    link_text = Column(String, nullable=True)
    author_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    author = relationship("Profile")
