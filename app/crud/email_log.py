from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import timedelta
from typing import Dict, List, Optional, Set

from app.enums.email_status import EmailStatus
from app.models.email_log import EmailLog, EmailUnsubscribe, EmailCampaign
from app.utils.datetime_utils import utcnow

MAX_EMAIL_RETRIES = 3


def get_email_log(db: Session, email_log_id: int) -> Optional[EmailLog]:
    return db.query(EmailLog).filter(EmailLog.id == email_log_id).first()


def get_email_log_by_provider_id(db: Session, provider_message_id: str) -> Optional[EmailLog]:
    return (
        db.query(EmailLog)
        .filter(EmailLog.provider_message_id == provider_message_id)
        .first()
    )


def get_retryable_failed_emails(db: Session, hours: int = 24) -> List[EmailLog]:
    """Email fallite nelle ultime `hours` ore con meno di MAX_EMAIL_RETRIES tentativi"""
    since = utcnow() - timedelta(hours=hours)
    return (
        db.query(EmailLog)
        .filter(EmailLog.status == EmailStatus.FAILED)
        .filter(EmailLog.retry_count < MAX_EMAIL_RETRIES)
        .filter(EmailLog.created_at >= since)
        .order_by(EmailLog.created_at.asc())
        .all()
    )


def get_email_stats(db: Session) -> Dict[str, int]:
    rows = db.query(EmailLog.status, func.count(EmailLog.id)).group_by(EmailLog.status).all()
    counts = {status: count for status, count in rows}

    delivered = counts.get(EmailStatus.DELIVERED, 0)
    opened = counts.get(EmailStatus.OPENED, 0)
    clicked = counts.get(EmailStatus.CLICKED, 0)
    # Uno stato successivo implica quelli precedenti: cliccata => aperta => consegnata
    total_sent = counts.get(EmailStatus.SENT, 0) + delivered + opened + clicked
    return {
        "total_sent": total_sent,
        "total_delivered": delivered + opened + clicked,
        "total_opened": opened + clicked,
        "total_clicked": clicked,
        "total_failed": counts.get(EmailStatus.FAILED, 0)
        + counts.get(EmailStatus.BOUNCED, 0),
    }


def is_unsubscribed(db: Session, email: str) -> bool:
    return (
        db.query(EmailUnsubscribe)
        .filter(EmailUnsubscribe.email == email.strip().lower())
        .first()
        is not None
    )


def get_unsubscribed_emails(db: Session) -> Set[str]:
    return {row.email for row in db.query(EmailUnsubscribe.email).all()}


def add_unsubscribe(db: Session, email: str, category: str = "marketing") -> EmailUnsubscribe:
    email = email.strip().lower()
    existing = db.query(EmailUnsubscribe).filter(EmailUnsubscribe.email == email).first()
    if existing:
        return existing

    unsubscribe = EmailUnsubscribe(email=email, category=category)
    db.add(unsubscribe)
    db.commit()
    db.refresh(unsubscribe)
    return unsubscribe


def create_campaign(
    db: Session,
    name: str,
    subject: str,
    content: str,
    recipient_count: int,
    sent_by: Optional[int],
    recipient_type: Optional[str] = None,
    recipient_role: Optional[str] = None,
) -> EmailCampaign:
    campaign = EmailCampaign(
        name=name,
        subject=subject,
        content=content,
        recipient_type=recipient_type,
        recipient_role=recipient_role,
        recipient_count=recipient_count,
        sent_by=sent_by,
        status="sending",
    )
    db.add(campaign)
    db.commit()
    db.refresh(campaign)
    return campaign


def finish_campaign(db: Session, campaign: EmailCampaign, sent: int, failed: int) -> EmailCampaign:
    campaign.sent_count = sent
    campaign.failed_count = failed
    campaign.status = "sent" if sent > 0 else "failed"
    db.commit()
    db.refresh(campaign)
    return campaign
