"""
Test della gestione utenti
"""
import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.enums.user_role import UserRole
from app.models.activity_log import ActivityLog
from app.routers.users import delete_user, list_users, update_user
from app.schemas.profile import ProfileAdminUpdate


def test_athletes_cannot_list_users(db: Session, atleta):
    with pytest.raises(HTTPException) as exc_info:
        list_users(db=db, current_user=atleta)
    assert exc_info.value.status_code == 403


def test_maestro_sees_only_athletes(db: Session, admin, maestro, atleta, other_atleta):
    result = list_users(db=db, current_user=maestro)
    assert {u.id for u in result["users"]} == {atleta.id, other_atleta.id}

    result = list_users(role=UserRole.ADMIN, db=db, current_user=maestro)
    assert all(u.role == UserRole.ATLETA for u in result["users"])


def test_search_by_name_or_email(db: Session, admin, atleta, other_atleta):
    result = list_users(search="rossi", db=db, current_user=admin)
    assert [u.id for u in result["users"]] == [other_atleta.id]

    # i caratteri jolly vengono trattati come testo
    assert list_users(search="%", db=db, current_user=admin)["users"] == []


def test_role_change_is_admin_only_and_logged(db: Session, admin, atleta):
    with pytest.raises(HTTPException) as exc_info:
        update_user(
            user_id=atleta.id, update=ProfileAdminUpdate(role=UserRole.ADMIN), db=db, current_user=atleta
        )
    assert exc_info.value.status_code == 403

    profile = update_user(
        user_id=atleta.id, update=ProfileAdminUpdate(role=UserRole.MAESTRO), db=db, current_user=admin
    )
    assert profile.role == UserRole.MAESTRO

    log = db.query(ActivityLog).filter(ActivityLog.action == "user.role_change").one()
    assert log.details == {"from": "atleta", "to": "maestro"}


def test_owner_updates_own_profile(db: Session, atleta, other_atleta):
    profile = update_user(
        user_id=atleta.id,
        update=ProfileAdminUpdate(bio="<i>Mancina</i>", email_notifications_enabled=True),
        db=db,
        current_user=atleta,
    )
    assert profile.bio == "Mancina"
    assert profile.email_notifications_enabled is True

    with pytest.raises(HTTPException) as exc_info:
        update_user(user_id=other_atleta.id, update=ProfileAdminUpdate(bio="x"), db=db, current_user=atleta)
    assert exc_info.value.status_code == 403


def test_admin_cannot_delete_self(db: Session, admin, atleta):
    with pytest.raises(HTTPException) as exc_info:
        delete_user(user_id=admin.id, db=db, current_user=admin)
    assert exc_info.value.status_code == 400

    assert delete_user(user_id=atleta.id, db=db, current_user=admin) == {"success": True}
    assert db.query(ActivityLog).filter(ActivityLog.action == "user.delete").count() == 1
