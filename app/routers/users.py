from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.crud import profile as crud
from app.enums.user_role import UserRole
from app.models.profile import Profile
from app.schemas.profile import (
    ProfileResponse,
    ProfileAdminUpdate,
    ProfilesListResponse,
)
from app.services.auth import get_current_user, require_admin_or_gestore
from app.utils.activity import log_activity
from app.utils.roles import is_admin_or_gestore, is_staff

router = APIRouter()

logger = logging.getLogger(__name__)

ADMIN_ONLY_FIELDS = {"role", "is_active"}


@router.get("", response_model=ProfilesListResponse)
def list_users(
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """
    Lista profili. Admin e gestori vedono tutti; i maestri possono
    consultare solo gli atleti.
    """
    if not is_staff(current_user.role):
        raise HTTPException(status_code=403, detail="Non autorizzato")
    if not is_admin_or_gestore(current_user.role):
        role = UserRole.ATLETA

    users = crud.get_profiles(db, role=role, search=search, skip=skip, limit=min(limit, 500))
    return {"users": users}


@router.get("/{user_id}", response_model=ProfileResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    if current_user.id != user_id and not is_staff(current_user.role):
        raise HTTPException(status_code=403, detail="Non autorizzato")

    profile = crud.get_profile(db, user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Utente non trovato")
    return profile


@router.put("/{user_id}", response_model=ProfileResponse)
def update_user(
    user_id: int,
    update: ProfileAdminUpdate,
    request: Request = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """
    Il proprietario modifica i propri dati; solo admin e gestori possono
    modificare altri profili, il ruolo e lo stato di attivazione.
    """
    privileged = is_admin_or_gestore(current_user.role)
    if current_user.id != user_id and not privileged:
        raise HTTPException(status_code=403, detail="Non autorizzato")

    fields = update.model_dump(exclude_unset=True)
    if not privileged and ADMIN_ONLY_FIELDS & fields.keys():
        raise HTTPException(
            status_code=403, detail="Solo admin e gestori possono modificare il ruolo"
        )

    profile = crud.get_profile(db, user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Utente non trovato")

    previous_role = profile.role
    profile = crud.update_profile(db, profile, fields)
    logger.info(f"Profilo {user_id} aggiornato da {current_user.id}")

    if "role" in fields and fields["role"] != previous_role:
        log_activity(
            db,
            current_user.id,
            "user.role_change",
            entity_type="profile",
            entity_id=user_id,
            metadata={"from": previous_role.value, "to": profile.role.value},
            request=request,
        )
    return profile


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    request: Request = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    if current_user.id == user_id:
        raise HTTPException(status_code=400, detail="Non puoi eliminare il tuo profilo")

    profile = crud.get_profile(db, user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Utente non trovato")

    email = profile.email
    crud.delete_profile(db, profile)
    logger.info(f"Profilo {user_id} ({email}) eliminato da {current_user.id}")
    log_activity(
        db,
        current_user.id,
        "user.delete",
        entity_type="profile",
        entity_id=user_id,
        metadata={"email": email},
        request=request,
    )
    return {"success": True}
