from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.services.auth import get_current_user
from app.models.profile import Profile
from app.crud import notification as notification_crud
from app.crud import profile as profile_crud
from app.schemas.notification import (
    NotificationCreate,
    NotificationMarkRead,
    AdminNotificationRequest,
    NotificationEnvelope,
    NotificationResponse,
    NotificationsListResponse,
    NotificationActionResponse,
)
from app.utils.notification_utils import create_notification, notify_admins
from app.utils.roles import is_staff

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=NotificationsListResponse)
def get_my_notifications(
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """Notifiche dell'utente corrente, dalla più recente"""
    notifications = notification_crud.get_user_notifications(
        db, current_user.id, unread_only=unread_only, skip=skip, limit=limit
    )
    unread_count = notification_crud.get_unread_notifications_count(db, current_user.id)
    return NotificationsListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=unread_count,
    )


@router.post(
    "",
    response_model=NotificationEnvelope,
    status_code=status.HTTP_201_CREATED,
)
def send_notification(
    notification: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """
    Crea una notifica per un utente. Lo staff può notificare chiunque,
    gli altri utenti solo sé stessi.
    """
    if notification.user_id != current_user.id and not is_staff(current_user.role):
        raise HTTPException(status_code=403, detail="Non autorizzato")

    if not profile_crud.get_profile(db, notification.user_id):
        raise HTTPException(status_code=404, detail="Utente non trovato")

    created = create_notification(
        db,
        notification.user_id,
        notification.type,
        notification.title,
        notification.message,
        notification.link,
    )
    if created is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Impossibile creare la notifica",
        )
    return NotificationEnvelope(notification=NotificationResponse.model_validate(created))


@router.patch("", response_model=NotificationActionResponse)
def mark_as_read(
    body: NotificationMarkRead,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    if body.mark_all_read:
        updated_count = notification_crud.mark_all_notifications_as_read(db, current_user.id)
        return NotificationActionResponse(
            success=True,
            message=f"{updated_count} notifiche segnate come lette",
        )

    if body.notification_id is None:
        raise HTTPException(status_code=400, detail="notification_id obbligatorio")

    if not notification_crud.mark_notification_as_read(db, body.notification_id, current_user.id):
        raise HTTPException(status_code=404, detail="Notifica non trovata")
    return NotificationActionResponse(success=True, message="Notifica segnata come letta")


@router.delete("", response_model=NotificationActionResponse)
def delete_notification(
    notification_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    if notification_id is None:
        raise HTTPException(status_code=400, detail="notification_id obbligatorio")

    if not notification_crud.delete_notification(db, notification_id, current_user.id):
        raise HTTPException(status_code=404, detail="Notifica non trovata")
    return NotificationActionResponse(success=True, message="Notifica eliminata")


@router.post("/notify-admins")
def send_admin_notification(
    body: AdminNotificationRequest,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """Invia una notifica a tutti gli admin e gestori"""
    created = notify_admins(db, body.type, body.title, body.message, body.link)
    logger.info(
        f"Utente {current_user.id} ha notificato {len(created)} admin: {body.title}"
    )
    return {"success": True, "count": len(created)}
