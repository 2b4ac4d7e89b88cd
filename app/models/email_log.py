from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Enum,
    JSON,
)

from app.database import Base
from app.enums.email_status import EmailStatus
from app.utils.datetime_utils import utcnow


class EmailLog(Base):
    __tablename__ = "email_logs"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    recipient_email = Column(String, nullable=False, index=True)
    recipient_name = Column(String, nullable=True)
    recipient_user_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    subject = Column(String, nullable=False)
    html_body = Column(Text, nullable=True)
    template_name = Column(String, nullable=False, default="system")
    category = Column(String, nullable=False, default="transactional")
    status = Column(
        Enum(
            EmailStatus,
            name="email_status",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=EmailStatus.QUEUED,
    )
    provider = Column(String, nullable=False, default="smtp")
    provider_message_id = Column(String, nullable=True, index=True)
    error_message = Column(Text, nullable=True)
    retry_count = Column(Integer, nullable=False, default=0)
    sent_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)
    opened_at = Column(DateTime, nullable=True)
    clicked_at = Column(DateTime, nullable=True)
    details = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class EmailUnsubscribe(Base):
    __tablename__ = "email_unsubscribes"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    category = Column(String, nullable=False, default="marketing")
    created_at = Column(DateTime, default=utcnow)


class EmailCampaign(Base):
    __tablename__ = "email_campaigns"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    recipient_type = Column(String, nullable=True)  # all, role, custom
    recipient_role = Column(String, nullable=True)
    recipient_count = Column(Integer, nullable=False, default=0)
    sent_count = Column(Integer, nullable=False, default=0)
    failed_count = Column(Integer, nullable=False, default=0)
    sent_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    status = Column(String, nullable=False, default="sent")
    created_at = Column(DateTime, default=utcnow)
