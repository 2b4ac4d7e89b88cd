from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.datetime_utils import utcnow


class CourtBlock(Base):
    """Fascia in cui il campo non è prenotabile (manutenzione, eventi...)"""

    __tablename__ = "court_blocks"
    __table_args__ = (
        Index("ix_court_blocks_court_interval", "court", "start_time", "end_time"),
        {"extend_existing": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    court = Column(String, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    reason = Column(String, nullable=False, default="Blocco manuale")
    created_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    creator = relationship("Profile", foreign_keys=[created_by])
