from sqlalchemy.orm import Session
from sqlalchemy import and_
from typing import List, Optional
from app.models.notification import Notification
from app.schemas.notification import NotificationCreate


def create_notification(
    db: Session, notification: NotificationCreate, commit: bool = True
) -> Notification:
    """Crea una nuova notifica"""
    db_notification = Notification(
        user_id=notification.user_id,
        title=notification.title,
        message=notification.message,
        type=notification.type,
        link=notification.link,
    )
    db.add(db_notification)
    if commit:
        db.commit()
        db.refresh(db_notification)
    return db_notification


def get_user_notifications(
    db: Session,
    user_id: int,
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 100,
) -> List[Notification]:
    """Notifiche di un utente, dalla più recente"""
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read == False)
    return (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_unread_notifications_count(db: Session, user_id: int) -> int:
    return (
        db.query(Notification)
        .filter(and_(Notification.user_id == user_id, Notification.is_read == False))
        .count()
    )


def get_notification(
    db: Session, notification_id: int, user_id: int
) -> Optional[Notification]:
    """Notifica specifica di un utente"""
    return (
        db.query(Notification)
        .filter(
            and_(Notification.id == notification_id, Notification.user_id == user_id)
        )
        .first()
    )


def mark_notification_as_read(db: Session, notification_id: int, user_id: int) -> bool:
    notification = get_notification(db, notification_id, user_id)
    if not notification:
        return False

    notification.is_read = True
    db.commit()
    return True


def mark_all_notifications_as_read(db: Session, user_id: int) -> int:
    updated_count = (
        db.query(Notification)
        .filter(and_(Notification.user_id == user_id, Notification.is_read == False))
        .update({"is_read": True}, synchronize_session=False)
    )

    db.commit()
    return updated_count


def delete_notification(db: Session, notification_id: int, user_id: int) -> bool:
    notification = get_notification(db, notification_id, user_id)
    if not notification:
        return False

    db.delete(notification)
    db.commit()
    return True
