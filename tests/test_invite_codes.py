"""
Test dei codici invito: validazione, consumo e registrazione con codice
"""
from datetime import timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.enums.user_role import UserRole
from app.models.invite_code import InviteCode, InviteCodeUse
from app.models.profile import Profile
from app.routers.auth import register
from app.routers.invite_codes import create_code, use_code, validate_code
from app.schemas.invite_code import InviteCodeCreate, InviteCodeUseRequest
from app.schemas.profile import ProfileCreate
from app.utils.datetime_utils import utcnow
from app.utils.exceptions import InviteCodeError
from app.utils.invite_codes import consume_invite_code, validate_invite_code


def _code(db, code="COACH-2025", role=UserRole.MAESTRO, uses=1, expires_at=None):
    invite_code = InviteCode(
        code=code, role=role, max_uses=uses, uses_remaining=uses, expires_at=expires_at
    )
    db.add(invite_code)
    db.commit()
    db.refresh(invite_code)
    return invite_code


def test_validate_is_case_insensitive(db: Session):
    _code(db)
    assert validate_invite_code(db, "  coach-2025 ").role == UserRole.MAESTRO


@pytest.mark.parametrize(
    "code,status_code",
    [(None, 400), ("", 400), ("NON-ESISTE", 404)],
)
def test_validate_missing_or_unknown(db: Session, code, status_code):
    with pytest.raises(InviteCodeError) as exc_info:
        validate_invite_code(db, code)
    assert exc_info.value.status_code == status_code


def test_expired_code_returns_410(db: Session):
    _code(db, expires_at=utcnow() - timedelta(minutes=1))

    with pytest.raises(HTTPException) as exc_info:
        validate_code(code="COACH-2025", db=db)
    assert exc_info.value.status_code == 410
    assert exc_info.value.detail == "Codice invito scaduto"


def test_consume_decrements_and_records_use(db: Session, atleta, other_atleta):
    invite_code = _code(db, uses=2)

    consume_invite_code(db, "COACH-2025", atleta.id)
    db.refresh(invite_code)
    assert invite_code.uses_remaining == 1

    consume_invite_code(db, "COACH-2025", other_atleta.id)
    db.refresh(invite_code)
    assert invite_code.uses_remaining == 0
    assert db.query(InviteCodeUse).count() == 2


def test_exhausted_code_returns_410(db: Session, atleta, other_atleta):
    _code(db, uses=1)
    consume_invite_code(db, "COACH-2025", atleta.id)

    with pytest.raises(InviteCodeError) as exc_info:
        consume_invite_code(db, "COACH-2025", other_atleta.id)
    assert exc_info.value.status_code == 410
    assert db.query(InviteCodeUse).count() == 1


def test_unlimited_code_never_runs_out(db: Session, make_profile):
    invite_code = _code(db, code="SOCI", role=UserRole.ATLETA, uses=None)
    for _ in range(5):
        consume_invite_code(db, "soci", make_profile().id)

    db.refresh(invite_code)
    assert invite_code.uses_remaining is None
    assert db.query(InviteCodeUse).count() == 5


def test_use_code_assigns_role(db: Session, atleta):
    _code(db)

    result = use_code(
        body=InviteCodeUseRequest(code="coach-2025", user_id=atleta.id), db=db, current_user=atleta
    )
    assert result == {"success": True, "role": UserRole.MAESTRO}
    db.refresh(atleta)
    assert atleta.role == UserRole.MAESTRO


def test_use_code_for_someone_else_is_forbidden(db: Session, atleta, other_atleta):
    _code(db)
    with pytest.raises(HTTPException) as exc_info:
        use_code(
            body=InviteCodeUseRequest(code="COACH-2025", user_id=other_atleta.id),
            db=db,
            current_user=atleta,
        )
    assert exc_info.value.status_code == 403


def test_register_with_invite_code(db: Session, http_request):
    _code(db, code="GESTORI", role=UserRole.GESTORE)

    profile = register(
        request=http_request,
        profile=ProfileCreate(
            email="Nuovo.Gestore@gst-tennis.it",
            full_name="Nuovo Gestore",
            password="Password1!",
            invite_code="gestori",
        ),
        db=db,
    )
    assert profile.role == UserRole.GESTORE
    assert profile.email == "nuovo.gestore@gst-tennis.it"
    assert db.query(InviteCode).one().uses_remaining == 0


def test_register_with_exhausted_code_creates_nothing(db: Session, http_request):
    _code(db, uses=1).uses_remaining = 0
    db.commit()

    with pytest.raises(HTTPException) as exc_info:
        register(
            request=http_request,
            profile=ProfileCreate(
                email="mario@gst-tennis.it",
                full_name="Mario Bianchi",
                password="Password1!",
                invite_code="COACH-2025",
            ),
            db=db,
        )
    assert exc_info.value.status_code == 410
    assert db.query(Profile).count() == 0


def test_register_without_code_is_atleta(db: Session, http_request):
    profile = register(
        request=http_request,
        profile=ProfileCreate(
            email="giulia@gst-tennis.it", full_name="Giulia Verdi", password="Password1!"
        ),
        db=db,
    )
    assert profile.role == UserRole.ATLETA


def test_weak_password_is_rejected():
    with pytest.raises(ValueError):
        ProfileCreate(email="a@gst-tennis.it", full_name="Debole", password="password")


def test_duplicate_code_returns_409(db: Session, admin, http_request):
    body = InviteCodeCreate(code="estate-25", role=UserRole.ATLETA, max_uses=10)
    created = create_code(request=http_request, invite_code=body, db=db, current_user=admin)
    assert created.code == "ESTATE-25"
    assert created.uses_remaining == 10

    with pytest.raises(HTTPException) as exc_info:
        create_code(request=http_request, invite_code=body, db=db, current_user=admin)
    assert exc_info.value.status_code == 409
