from typing import List, Optional
from sqlalchemy.orm import Session
from app.crud import notification as notification_crud
from app.crud import profile as profile_crud
from app.enums.notification_type import NotificationType
from app.models.notification import Notification
from app.schemas.notification import NotificationCreate
from app.services import email_templates
from app.services.email import email_service
import logging

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    user_id: int,
    notification_type: NotificationType,
    title: str,
    message: str,
    link: Optional[str] = None,
) -> Optional[Notification]:
    """
    Crea una notifica in-app e, se l'utente ha attivato le email, la invia
    anche per posta.

    Args:
        db: Sessione database
        user_id: Destinatario
        notification_type: message, tournament, announcement, booking, general
        title: Titolo della notifica
        message: Testo della notifica
        link: Percorso relativo dell'app (es. /dashboard/atleta/bookings)

    Returns:
        La notifica creata, oppure None se l'inserimento fallisce.
        Non solleva eccezioni.
    """
    try:
        notification = notification_crud.create_notification(
            db,
            NotificationCreate(
                user_id=user_id,
                title=title,
                message=message,
                type=notification_type,
                link=link,
            ),
        )
        logger.info(f"Notifica creata per l'utente {user_id}: {notification_type.value}")
    except Exception as e:
        db.rollback()
        logger.error(f"Errore creando la notifica per l'utente {user_id}: {e}")
        return None

    _send_notification_email(db, user_id, title, message, link)
    return notification


def _send_notification_email(
    db: Session, user_id: int, title: str, message: str, link: Optional[str]
) -> None:
    try:
        profile = profile_crud.get_profile(db, user_id)
        if not profile or not profile.email_notifications_enabled:
            return
        email_service.send_email(
            db,
            profile.email,
            title,
            email_templates.notification(title, message, link),
            template_name="notification",
            category="notifications",
            recipient_user_id=profile.id,
            recipient_name=profile.full_name,
        )
    except Exception as e:
        logger.warning(f"Email di notifica non inviata all'utente {user_id}: {e}")


def notify_admins(
    db: Session,
    notification_type: NotificationType,
    title: str,
    message: str,
    link: Optional[str] = None,
) -> List[Notification]:
    """Invia la stessa notifica a tutti i profili admin e gestore"""
    try:
        admins = profile_crud.get_admin_profiles(db)
    except Exception as e:
        logger.error(f"Errore caricando gli admin da notificare: {e}")
        return []

    created = []
    for admin in admins:
        notification = create_notification(
            db, admin.id, notification_type, title, message, link
        )
        if notification is not None:
            created.append(notification)
    logger.info(f"Notifica '{title}' inviata a {len(created)} admin/gestori")
    return created
