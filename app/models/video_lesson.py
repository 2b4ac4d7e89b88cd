from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.datetime_utils import utcnow


class VideoLesson(Base):
    __tablename__ = "video_lessons"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    video_url = Column(String, nullable=False)
    thumbnail_url = Column(String, nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    category = Column(String, nullable=False, default="generale")
    level = Column(String, nullable=False, default="tutti")
    is_active = Column(Boolean, default=True)
    watch_count = Column(Integer, default=0)
    watched_at = Column(DateTime, nullable=True)
    created_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    assigned_to = Column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    creator = relationship("Profile", foreign_keys=[created_by])
    assignee = relationship("Profile", foreign_keys=[assigned_to])
