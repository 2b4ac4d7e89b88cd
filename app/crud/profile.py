from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional

from app.enums.user_role import UserRole
from app.models.profile import Profile
from app.schemas.profile import ProfileCreate
from app.utils.datetime_utils import utcnow
from app.utils.roles import ADMIN_ROLES
from app.utils.sanitize import sanitize_search_query


def get_profile(db: Session, profile_id: int) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.id == profile_id).first()


def get_profile_by_email(db: Session, email: str) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.email == email.strip().lower()).first()


def get_profiles(
    db: Session,
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Profile]:
    """Lista profili con filtro per ruolo e ricerca per nome o email"""
    query = db.query(Profile)
    if role is not None:
        query = query.filter(Profile.role == role)

    search = sanitize_search_query(search) if search else ""
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Profile.full_name.ilike(pattern, escape="\\"),
                Profile.email.ilike(pattern, escape="\\"),
            )
        )

    return query.order_by(Profile.created_at.desc()).offset(skip).limit(limit).all()


def get_profiles_by_ids(db: Session, profile_ids) -> List[Profile]:
    ids = {profile_id for profile_id in profile_ids if profile_id is not None}
    if not ids:
        return []
    return db.query(Profile).filter(Profile.id.in_(ids)).all()


def get_admin_profiles(db: Session) -> List[Profile]:
    """Profili admin e gestore, destinatari delle notifiche di sistema"""
    return (
        db.query(Profile)
        .filter(Profile.role.in_(list(ADMIN_ROLES)))
        .filter(Profile.is_active == True)
        .all()
    )


def count_profiles(db: Session) -> int:
    return db.query(Profile).count()


def create_profile(
    db: Session,
    profile: ProfileCreate,
    hashed_password: str,
    role: UserRole = UserRole.ATLETA,
    commit: bool = True,
) -> Profile:
    db_profile = Profile(
        email=profile.email.strip().lower(),
        full_name=profile.full_name,
        phone=profile.phone,
        role=role,
        hashed_password=hashed_password,
    )
    db.add(db_profile)
    if commit:
        db.commit()
        db.refresh(db_profile)
    else:
        db.flush()
    return db_profile


def update_profile(db: Session, db_profile: Profile, fields: dict) -> Profile:
    for key, value in fields.items():
        setattr(db_profile, key, value)
    db_profile.updated_at = utcnow()
    db.commit()
    db.refresh(db_profile)
    return db_profile


def delete_profile(db: Session, db_profile: Profile) -> None:
    db.delete(db_profile)
    db.commit()
