"""
Test delle notifiche in-app
"""
import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.enums.email_status import EmailStatus
from app.enums.notification_type import NotificationType
from app.models.email_log import EmailLog
from app.models.notification import Notification
from app.routers.notifications import (
    delete_notification,
    get_my_notifications,
    mark_as_read,
    send_notification,
)
from app.schemas.notification import NotificationCreate, NotificationMarkRead
from app.utils.notification_utils import create_notification, notify_admins


def test_create_notification(db: Session, atleta):
    notification = create_notification(
        db, atleta.id, NotificationType.BOOKING, "Titolo", "Messaggio", link="/dashboard/atleta"
    )

    assert notification.id is not None
    assert notification.is_read is False
    assert notification.type == NotificationType.BOOKING
    # nessuna email se l'utente non l'ha attivata
    assert db.query(EmailLog).count() == 0


def test_create_notification_sends_email_when_enabled(db: Session, make_profile):
    profile = make_profile(email_notifications_enabled=True)

    create_notification(db, profile.id, NotificationType.GENERAL, "Avviso", "Campi chiusi domani")

    email_log = db.query(EmailLog).one()
    assert email_log.recipient_email == profile.email
    assert email_log.category == "notifications"
    # senza SMTP_HOST l'invio è registrato come fallito
    assert email_log.status == EmailStatus.FAILED
    assert email_log.error_message == "SMTP non configurato"


def test_create_notification_never_raises(db: Session, atleta, monkeypatch):
    from app.crud import notification as notification_crud

    def broken(*args, **kwargs):
        raise RuntimeError("database non disponibile")

    monkeypatch.setattr(notification_crud, "create_notification", broken)

    assert create_notification(db, atleta.id, NotificationType.GENERAL, "Titolo", "Messaggio") is None
    assert db.query(Notification).count() == 0


def test_notify_admins_reaches_admin_and_gestore(db: Session, admin, gestore, maestro, atleta):
    created = notify_admins(db, NotificationType.GENERAL, "Nuovo utente", "Si è registrato Mario")

    assert {n.user_id for n in created} == {admin.id, gestore.id}
    assert db.query(Notification).count() == 2


def test_list_and_mark_read(db: Session, atleta):
    for i in range(3):
        create_notification(db, atleta.id, NotificationType.GENERAL, f"Titolo {i}", "Messaggio")

    result = get_my_notifications(db=db, current_user=atleta)
    assert len(result.notifications) == 3
    assert result.unread_count == 3

    first_id = result.notifications[0].id
    mark_as_read(body=NotificationMarkRead(notification_id=first_id), db=db, current_user=atleta)
    assert get_my_notifications(db=db, current_user=atleta).unread_count == 2

    unread = get_my_notifications(unread_only=True, db=db, current_user=atleta)
    assert first_id not in [n.id for n in unread.notifications]

    response = mark_as_read(body=NotificationMarkRead(mark_all_read=True), db=db, current_user=atleta)
    assert response.message == "2 notifiche segnate come lette"
    assert get_my_notifications(db=db, current_user=atleta).unread_count == 0


def test_cannot_touch_other_users_notifications(db: Session, atleta, other_atleta):
    notification = create_notification(db, atleta.id, NotificationType.GENERAL, "Titolo", "Messaggio")

    with pytest.raises(HTTPException) as exc_info:
        mark_as_read(
            body=NotificationMarkRead(notification_id=notification.id), db=db, current_user=other_atleta
        )
    assert exc_info.value.status_code == 404

    with pytest.raises(HTTPException) as exc_info:
        delete_notification(notification_id=notification.id, db=db, current_user=other_atleta)
    assert exc_info.value.status_code == 404

    delete_notification(notification_id=notification.id, db=db, current_user=atleta)
    assert db.query(Notification).count() == 0


def test_only_staff_can_notify_others(db: Session, atleta, other_atleta, maestro):
    body = NotificationCreate(user_id=other_atleta.id, title="Ciao", message="Messaggio")
    with pytest.raises(HTTPException) as exc_info:
        send_notification(notification=body, db=db, current_user=atleta)
    assert exc_info.value.status_code == 403

    result = send_notification(notification=body, db=db, current_user=maestro)
    assert result.notification.user_id == other_atleta.id


def test_notification_text_is_sanitized():
    body = NotificationCreate(user_id=1, title=" <b>Titolo</b> ", message="<p>Testo</p>")
    assert body.title == "Titolo"
    assert body.message == "Testo"
