"""
Email service for GST Tennis Academy
Handles SMTP delivery, logging of every send to email_logs and error reports
"""

import os
import smtplib
import logging
import traceback
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Optional

from sqlalchemy.orm import Session

from app.enums.email_status import EmailStatus
from app.models.email_log import EmailLog
from app.crud import email_log as email_log_crud
from app.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

TRANSACTIONAL = "transactional"


class EmailService:
    """Service for sending emails via SMTP"""

    def __init__(self):
        self.smtp_host = os.getenv("SMTP_HOST")
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_user = os.getenv("SMTP_USER")
        self.smtp_pass = os.getenv("SMTP_PASS")
        self.smtp_use_tls = os.getenv("SMTP_USE_TLS", "true").lower() in {
            "1",
            "true",
            "yes",
        }
        self.from_addr = os.getenv("EMAIL_FROM", "GST Tennis Academy <noreply@gst-tennis.it>")
        self.error_to_addrs = [
            addr.strip()
            for addr in os.getenv("ERROR_TO", "").split(",")
            if addr.strip()
        ]

    def is_configured(self) -> bool:
        """Check if SMTP delivery is configured"""
        return bool(self.smtp_host)

    def _deliver(self, to_addr: str, subject: str, html_body: str) -> str:
        """
        Invia il messaggio via SMTP e restituisce il Message-ID.
        Solleva l'eccezione di smtplib in caso di errore.
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_addr
        msg["To"] = to_addr
        message_id = make_msgid(domain="gst-tennis.it")
        msg["Message-ID"] = message_id
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30)
        try:
            if self.smtp_use_tls:
                server.starttls()
            if self.smtp_user and self.smtp_pass:
                server.login(self.smtp_user, self.smtp_pass)
            server.send_message(msg)
        finally:
            server.quit()
        return message_id.strip("<>")

    def _attempt(self, db: Session, email_log: EmailLog) -> bool:
        """Tenta l'invio di una riga di email_logs e ne aggiorna lo stato"""
        if not self.is_configured():
            email_log.status = EmailStatus.FAILED
            email_log.error_message = "SMTP non configurato"
            db.commit()
            logger.warning(
                f"Email non inviata a {email_log.recipient_email}: SMTP non configurato"
            )
            return False

        try:
            message_id = self._deliver(
                email_log.recipient_email, email_log.subject, email_log.html_body or ""
            )
        except Exception as e:
            email_log.status = EmailStatus.FAILED
            email_log.error_message = str(e)
            db.commit()
            logger.error(f"❌ Invio email a {email_log.recipient_email} fallito: {e}")
            return False

        email_log.status = EmailStatus.SENT
        email_log.provider_message_id = message_id
        email_log.error_message = None
        email_log.sent_at = utcnow()
        db.commit()
        logger.info(f"✅ Email '{email_log.subject}' inviata a {email_log.recipient_email}")
        return True

    def send_email(
        self,
        db: Session,
        to_email: str,
        subject: str,
        html_body: str,
        template_name: str = "system",
        category: str = TRANSACTIONAL,
        recipient_user_id: Optional[int] = None,
        recipient_name: Optional[str] = None,
    ) -> bool:
        """
        Invia una email e registra l'esito in email_logs.

        Le email non transazionali non vengono inviate agli indirizzi disiscritti.
        Non solleva eccezioni: restituisce True solo se l'invio è riuscito.
        """
        to_email = to_email.strip().lower()
        try:
            if category != TRANSACTIONAL and email_log_crud.is_unsubscribed(db, to_email):
                logger.info(f"{to_email} è disiscritto dalle email {category}")
                return False

            email_log = EmailLog(
                recipient_email=to_email,
                recipient_name=recipient_name,
                recipient_user_id=recipient_user_id,
                subject=subject,
                html_body=html_body,
                template_name=template_name,
                category=category,
                status=EmailStatus.QUEUED,
                details={"category": category},
            )
            db.add(email_log)
            db.commit()
            db.refresh(email_log)
            return self._attempt(db, email_log)
        except Exception as e:
            db.rollback()
            logger.error(f"Errore nel servizio email per {to_email}: {e}", exc_info=True)
            return False

    def retry_email(self, db: Session, email_log: EmailLog) -> bool:
        """Nuovo tentativo per una email fallita; incrementa retry_count"""
        try:
            email_log.retry_count = (email_log.retry_count or 0) + 1
            email_log.status = EmailStatus.QUEUED
            db.commit()
            return self._attempt(db, email_log)
        except Exception as e:
            db.rollback()
            logger.error(f"Errore nel nuovo tentativo email {email_log.id}: {e}", exc_info=True)
            return False

    def update_status(
        self, db: Session, provider_message_id: str, status: EmailStatus, details: Optional[dict] = None
    ) -> bool:
        """Aggiorna lo stato di consegna ricevuto dal provider"""
        email_log = email_log_crud.get_email_log_by_provider_id(db, provider_message_id)
        if not email_log:
            return False

        now = utcnow()
        email_log.status = status
        if status == EmailStatus.DELIVERED:
            email_log.delivered_at = now
        elif status == EmailStatus.OPENED:
            email_log.opened_at = now
        elif status == EmailStatus.CLICKED:
            email_log.clicked_at = now
        if details:
            email_log.details = {**(email_log.details or {}), **details}
        db.commit()
        return True

    def send_error_email(self, error_data: dict) -> bool:
        """
        Send error notification email to ERROR_TO

        Args:
            error_data: Dictionary containing error information
                - path: Request path
                - method: HTTP method
                - client: Client IP
                - user: User email (optional)
                - exception: Exception object
        """
        if not self.is_configured() or not self.error_to_addrs:
            logger.warning("Email service not configured, skipping error email")
            return False

        try:
            html_content = self._generate_error_html(error_data)
            subject = f"[GST Tennis][{os.getenv('ENV', 'development')}] ERROR"
            for addr in self.error_to_addrs:
                self._deliver(addr, subject, html_content)

            logger.info(f"Error email sent successfully to {', '.join(self.error_to_addrs)}")
            return True

        except Exception as e:
            logger.error(f"Failed to send error email: {e}")
            return False

    def _generate_error_html(self, error_data: dict) -> str:
        path = error_data.get("path", "Unknown")
        method = error_data.get("method", "Unknown")
        client = error_data.get("client", "Unknown")
        user = error_data.get("user", "Anonymous")
        exception = error_data.get("exception")
        timestamp = utcnow().strftime("%Y-%m-%d %H:%M:%S")

        if exception is not None:
            tb_lines = traceback.format_exception(
                type(exception), exception, exception.__traceback__
            )
            traceback_html = "".join(
                f"<div>{line.strip()}</div>" for line in tb_lines if line.strip()
            )
        else:
            traceback_html = "<div>No traceback available</div>"

        return f"""
        <!DOCTYPE html>
        <html>
        <body style="font-family: Arial, sans-serif;">
            <h1 style="color: #dc3545;">🚨 Error Report</h1>
            <p>GST Tennis Academy • {os.getenv('ENV', 'development').upper()} • {timestamp} UTC</p>
            <p><strong>Endpoint:</strong> {method} {path}</p>
            <p><strong>User:</strong> {user}</p>
            <p><strong>Client IP:</strong> {client}</p>
            <pre style="background: #1e1e1e; color: #d4d4d4; padding: 20px;">{traceback_html}</pre>
        </body>
        </html>
        """


# Global email service instance
email_service = EmailService()
