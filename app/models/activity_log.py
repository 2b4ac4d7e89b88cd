from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON

from app.database import Base
from app.utils.datetime_utils import utcnow


class ActivityLog(Base):
    """Registro append-only delle azioni degli utenti"""

    __tablename__ = "activity_log"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String, nullable=False, index=True)
    entity_type = Column(String, nullable=True)
    entity_id = Column(String, nullable=True)
    # "metadata" è riservato da declarative_base
    details = Column("metadata", JSON, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
