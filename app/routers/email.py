from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response
from sqlalchemy.orm import Session
from svix.webhooks import Webhook, WebhookVerificationError
from datetime import timedelta
from typing import Optional
import logging
import os

from app.database import get_db
from app.crud import booking as booking_crud
from app.crud import email_log as email_log_crud
from app.crud import profile as profile_crud
from app.enums.email_status import EmailStatus
from app.models.profile import Profile
from app.schemas.email import (
    BulkEmailRequest,
    BulkEmailResponse,
    CampaignRequest,
    CampaignResponse,
    EmailStatsEnvelope,
    EmailWebhookEvent,
    SchedulerRequest,
)
from app.services import email_templates
from app.services.auth import require_admin_or_gestore
from app.services.email import email_service
from app.utils.activity import log_activity
from app.utils.datetime_utils import utcnow
from app.utils.rate_limiter import rate_limit
from app.utils.sanitize import sanitize_email

router = APIRouter()
logger = logging.getLogger(__name__)

BATCH_SIZE = 100
MAX_REPORTED_ERRORS = 10

WEBHOOK_STATUSES = {
    "email.sent": EmailStatus.SENT,
    "email.delivered": EmailStatus.DELIVERED,
    "email.delivery_delayed": EmailStatus.QUEUED,
    "email.bounced": EmailStatus.BOUNCED,
    "email.complained": EmailStatus.FAILED,
    "email.opened": EmailStatus.OPENED,
    "email.clicked": EmailStatus.CLICKED,
}


@router.post(
    "/send-email",
    response_model=CampaignResponse,
)
@rate_limit("EMAIL_SEND")
def send_campaign(
    campaign: CampaignRequest,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    """Campagna email verso una lista esplicita di destinatari"""
    recipients = sorted({email.lower() for email in campaign.recipient_emails})
    db_campaign = email_log_crud.create_campaign(
        db,
        name=campaign.campaign_name,
        subject=campaign.subject,
        content=campaign.message,
        recipient_count=len(recipients),
        sent_by=current_user.id,
        recipient_type=campaign.recipient_type,
        recipient_role=campaign.recipient_role.value if campaign.recipient_role else None,
    )

    html_body = email_templates.campaign(campaign.message)
    sent = 0
    for email in recipients:
        if email_service.send_email(
            db,
            email,
            campaign.subject,
            html_body,
            template_name=campaign.template or "campaign",
            category="marketing",
        ):
            sent += 1
    failed = len(recipients) - sent

    email_log_crud.finish_campaign(db, db_campaign, sent, failed)
    logger.info(
        f"📧 Campagna '{campaign.campaign_name}' inviata da {current_user.id}: {sent}/{len(recipients)}"
    )
    log_activity(
        db,
        current_user.id,
        "email.campaign",
        entity_type="email_campaign",
        entity_id=db_campaign.id,
        metadata={"recipients": len(recipients), "sent": sent, "failed": failed},
        request=request,
    )
    return {
        "success": sent > 0,
        "message": f"Email inviate: {sent}/{len(recipients)}",
        "campaign_id": db_campaign.id,
        "stats": {"total": len(recipients), "sent": sent, "failed": failed},
    }


@router.post(
    "/admin/send-email",
    response_model=BulkEmailResponse,
)
@rate_limit("EMAIL_SEND")
def send_bulk_email(
    body: BulkEmailRequest,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    """
    Invio massivo: a tutti (send_to_all), per ruolo (role) oppure a una
    lista di indirizzi (emails). Gli indirizzi disiscritti vengono esclusi.
    """
    if body.send_to_all:
        recipients = [(p.email, p.full_name, p.id) for p in profile_crud.get_profiles(db, limit=None)]
    elif body.role is not None:
        recipients = [
            (p.email, p.full_name, p.id)
            for p in profile_crud.get_profiles(db, role=body.role, limit=None)
        ]
    else:
        recipients = [(email.lower(), None, None) for email in body.emails]

    if not recipients:
        raise HTTPException(status_code=400, detail="Nessun destinatario trovato")

    unsubscribed = email_log_crud.get_unsubscribed_emails(db)
    recipients = [r for r in recipients if r[0].lower() not in unsubscribed]

    html_body = email_templates.campaign(body.message)
    sent_count = 0
    errors = []
    for start in range(0, len(recipients), BATCH_SIZE):
        batch = recipients[start : start + BATCH_SIZE]
        for email, name, user_id in batch:
            if email_service.send_email(
                db,
                email,
                body.subject,
                html_body,
                template_name="marketing",
                category="marketing",
                recipient_user_id=user_id,
                recipient_name=name,
            ):
                sent_count += 1
            else:
                errors.append({"email": email, "error": "Invio non riuscito"})
        logger.info(f"Batch email {start // BATCH_SIZE + 1}: {len(batch)} destinatari")

    logger.info(
        f"📧 Invio massivo di {current_user.id}: {sent_count} inviate, {len(errors)} fallite"
    )
    return {
        "success": True,
        "sent_count": sent_count,
        "failed_count": len(errors),
        "total_recipients": len(recipients),
        "errors": errors[:MAX_REPORTED_ERRORS],
    }


@router.get("/admin/email-stats", response_model=EmailStatsEnvelope)
def get_email_stats(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    return {"stats": email_log_crud.get_email_stats(db)}


@router.get("/email/unsubscribe")
def unsubscribe(email: Optional[str] = None, category: str = "marketing", db: Session = Depends(get_db)):
    email = sanitize_email(email) if email else ""
    if not email:
        raise HTTPException(status_code=400, detail="Email non valida")

    email_log_crud.add_unsubscribe(db, email, category=category)
    logger.info(f"{email} disiscritto dalle email {category}")
    return {"success": True, "message": "Disiscrizione completata"}


async def read_raw_body(request: Request) -> bytes:
    return await request.body()


def _verify_webhook_signature(
    payload: bytes,
    svix_id: Optional[str],
    svix_timestamp: Optional[str],
    svix_signature: Optional[str],
) -> None:
    """Con EMAIL_WEBHOOK_SECRET impostato le richieste senza firma svix valida sono rifiutate"""
    secret = os.getenv("EMAIL_WEBHOOK_SECRET")
    if not secret:
        return

    headers = {
        "svix-id": svix_id or "",
        "svix-timestamp": svix_timestamp or "",
        "svix-signature": svix_signature or "",
    }
    try:
        Webhook(secret).verify(payload, headers)
    except WebhookVerificationError as e:
        logger.warning(f"Webhook email rifiutato: {e}")
        raise HTTPException(status_code=401, detail="Firma webhook non valida")


@router.post("/webhooks/email")
def email_webhook(
    event: EmailWebhookEvent,
    payload: bytes = Depends(read_raw_body),
    svix_id: Optional[str] = Header(default=None),
    svix_timestamp: Optional[str] = Header(default=None),
    svix_signature: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
):
    """Aggiornamenti di stato di consegna inviati dal provider"""
    _verify_webhook_signature(payload, svix_id, svix_timestamp, svix_signature)

    status = WEBHOOK_STATUSES.get(event.type)
    if status is None:
        logger.info(f"Evento email ignorato: {event.type}")
        return {"received": True}

    details = {"bounce_type": event.data.bounce.get("type")} if event.data.bounce else None
    updated = email_service.update_status(db, event.data.email_id, status, details)
    if not updated:
        logger.warning(f"Webhook email per messaggio sconosciuto {event.data.email_id}")
    return {"received": True, "updated": updated}


def _check_cron_secret(authorization: Optional[str]) -> None:
    expected = os.getenv("CRON_SECRET", "development_secret")
    if authorization != f"Bearer {expected}":
        raise HTTPException(status_code=401, detail="Non autorizzato")


def send_booking_reminders(db: Session) -> dict:
    """Promemoria per le prenotazioni confermate nelle prossime 24 ore"""
    now = utcnow()
    bookings = booking_crud.get_upcoming_confirmed_bookings(db, now, now + timedelta(hours=24))
    sent = 0
    for booking in bookings:
        owner = booking.user
        hours_until = max(1, int((booking.start_time - now).total_seconds() // 3600))
        if email_service.send_email(
            db,
            owner.email,
            "Promemoria prenotazione - GST Tennis Academy",
            email_templates.booking_reminder(owner.full_name, booking, hours_until),
            template_name="booking_reminder",
            category="reminders",
            recipient_user_id=owner.id,
            recipient_name=owner.full_name,
        ):
            sent += 1
    logger.info(f"Promemoria prenotazioni: {sent}/{len(bookings)} inviati")
    return {"success": True, "total": len(bookings), "sent": sent}


def retry_failed_emails(db: Session) -> dict:
    failed = email_log_crud.get_retryable_failed_emails(db)
    retried = 0
    for email_log in failed:
        if email_service.retry_email(db, email_log):
            retried += 1
    logger.info(f"Nuovo tentativo email fallite: {retried}/{len(failed)} inviate")
    return {"success": True, "total": len(failed), "retried": retried}


@router.post("/email/scheduler")
def run_scheduler(
    body: Optional[SchedulerRequest] = None,
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
):
    """Invocato da un cron esterno con Authorization: Bearer CRON_SECRET"""
    _check_cron_secret(authorization)

    action = body.action if body else "booking_reminders"
    if action == "booking_reminders":
        return send_booking_reminders(db)
    if action == "retry_failed":
        return retry_failed_emails(db)
    raise HTTPException(status_code=400, detail="Azione non valida")
