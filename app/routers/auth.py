from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.crud import profile as profile_crud
from app.enums.user_role import UserRole
from app.models.profile import Profile
from app.schemas.profile import (
    ProfileCreate,
    ProfileResponse,
    ProfileChangePassword,
    TokenResponse,
    RefreshRequest,
)
from app.services.auth import (
    authenticate_user,
    create_access_token,
    create_refresh_token,
    get_profile_from_refresh_token,
    get_password_hash,
    verify_password,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    get_current_user,
)
from app.utils.activity import log_activity
from app.utils.datetime_utils import utcnow
from app.utils.exceptions import InviteCodeError, to_http_exception
from app.utils.invite_codes import consume_invite_code
from app.utils.rate_limiter import rate_limit
from app.utils.roles import dashboard_for_role

router = APIRouter()
logger = logging.getLogger(__name__)


def _token_response(profile: Profile) -> dict:
    access_token = create_access_token(
        data={"sub": profile.email},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return {
        "access_token": access_token,
        "refresh_token": create_refresh_token(data={"sub": profile.email}),
        "token_type": "bearer",
        "role": profile.role,
        "redirect_to": dashboard_for_role(profile.role),
    }


@router.post(
    "/register",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
)
@rate_limit("AUTH_SIGNUP")
def register(
    profile: ProfileCreate,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
):
    """
    Registrazione di un nuovo profilo.

    Senza codice invito il ruolo è "atleta". Con un codice valido il ruolo
    viene preso dal codice, che viene consumato nella stessa transazione.
    """
    if profile_crud.get_profile_by_email(db, profile.email):
        raise HTTPException(status_code=400, detail="Email già registrata")

    try:
        db_profile = profile_crud.create_profile(
            db, profile, get_password_hash(profile.password), commit=False
        )
        if profile.invite_code:
            invite_code = consume_invite_code(
                db, profile.invite_code, db_profile.id, commit=False
            )
            db_profile.role = invite_code.role
        db.commit()
    except InviteCodeError as e:
        db.rollback()
        raise to_http_exception(e)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email già registrata")

    db.refresh(db_profile)
    logger.info(f"✅ Nuovo profilo {db_profile.id} ({db_profile.role.value}) registrato")
    log_activity(
        db,
        db_profile.id,
        "user.register",
        entity_type="profile",
        entity_id=db_profile.id,
        metadata={"role": db_profile.role.value, "invite_code": profile.invite_code},
        request=request,
    )
    return db_profile


@router.post(
    "/token",
    response_model=TokenResponse,
)
@rate_limit("AUTH_LOGIN")
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
):
    profile = authenticate_user(db, form_data.username, form_data.password)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email o password non corretti",
            headers={"WWW-Authenticate": "Bearer"},
        )
    profile.last_login = utcnow()
    db.commit()
    return _token_response(profile)


@router.post("/refresh", response_model=TokenResponse)
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    profile = get_profile_from_refresh_token(body.refresh_token, db)
    if not profile or not profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token non valido o scaduto",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_response(profile)


@router.get("/me", response_model=ProfileResponse)
def read_users_me(current_user: Profile = Depends(get_current_user)):
    return current_user


@router.post("/change-password", response_model=dict)
def change_password(
    password_data: ProfileChangePassword,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """La password attuale è richiesta per confermare il cambio."""
    if not verify_password(password_data.current_password, current_user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Password attuale non corretta",
            headers={"WWW-Authenticate": "Bearer"},
        )

    current_user.hashed_password = get_password_hash(password_data.new_password)
    db.commit()
    logger.info(f"Password aggiornata per il profilo {current_user.id}")
    return {"message": "Password aggiornata con successo"}
