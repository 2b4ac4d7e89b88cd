from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.crud import invite_code as crud
from app.crud import profile as profile_crud
from app.models.profile import Profile
from app.schemas.invite_code import (
    InviteCodeCreate,
    InviteCodeResponse,
    InviteCodesListResponse,
    InviteCodeValidation,
    InviteCodeUseRequest,
    InviteCodeUseResponse,
)
from app.services.auth import get_current_user, require_admin_or_gestore
from app.utils.activity import log_activity
from app.utils.exceptions import InviteCodeError, to_http_exception
from app.utils.invite_codes import consume_invite_code, validate_invite_code
from app.utils.rate_limiter import rate_limit
from app.utils.roles import is_admin_or_gestore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/validate", response_model=InviteCodeValidation)
def validate_code(code: Optional[str] = None, db: Session = Depends(get_db)):
    """400 codice mancante, 404 sconosciuto, 410 scaduto o esaurito"""
    try:
        invite_code = validate_invite_code(db, code)
    except InviteCodeError as e:
        raise to_http_exception(e)
    return {"valid": True, "role": invite_code.role, "code": invite_code.code}


@router.post("/use", response_model=InviteCodeUseResponse)
def use_code(
    body: InviteCodeUseRequest,
    request: Request = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """Consuma il codice e assegna all'utente il ruolo associato"""
    if body.user_id != current_user.id and not is_admin_or_gestore(current_user.role):
        raise HTTPException(status_code=403, detail="Non autorizzato")

    profile = profile_crud.get_profile(db, body.user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Utente non trovato")

    try:
        invite_code = consume_invite_code(db, body.code, profile.id, commit=False)
        profile.role = invite_code.role
        db.commit()
    except InviteCodeError as e:
        raise to_http_exception(e)

    logger.info(f"Codice {invite_code.code} usato: profilo {profile.id} ora {invite_code.role.value}")
    log_activity(
        db,
        current_user.id,
        "invite_code.use",
        entity_type="invite_code",
        entity_id=invite_code.id,
        metadata={"user_id": profile.id, "role": invite_code.role.value},
        request=request,
    )
    return {"success": True, "role": invite_code.role}


@router.get("", response_model=InviteCodesListResponse)
def list_codes(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    return {"invite_codes": crud.get_invite_codes(db)}


@router.post(
    "",
    response_model=InviteCodeResponse,
    status_code=status.HTTP_201_CREATED,
)
@rate_limit("API_WRITE")
def create_code(
    invite_code: InviteCodeCreate,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    if crud.get_invite_code_by_code(db, invite_code.code):
        raise HTTPException(status_code=409, detail="Codice già esistente")

    try:
        db_code = crud.create_invite_code(db, invite_code, created_by=current_user.id)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Codice già esistente")

    logger.info(f"Codice invito {db_code.code} ({db_code.role.value}) creato da {current_user.id}")
    log_activity(
        db,
        current_user.id,
        "invite_code.create",
        entity_type="invite_code",
        entity_id=db_code.id,
        metadata={"code": db_code.code, "role": db_code.role.value, "max_uses": db_code.max_uses},
        request=request,
    )
    return db_code


@router.delete("")
def delete_code(
    id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    db_code = crud.get_invite_code(db, id)
    if not db_code:
        raise HTTPException(status_code=404, detail="Codice non trovato")

    crud.delete_invite_code(db, db_code)
    logger.info(f"Codice invito {id} eliminato da {current_user.id}")
    return {"success": True}
