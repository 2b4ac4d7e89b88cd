import re
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from typing import Optional, Dict, Any, List
from datetime import datetime

from app.enums.user_role import UserRole
from app.utils.sanitize import sanitize_text, sanitize_phone, sanitize_url

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


def validate_password_strength(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(
            f"La password deve contenere almeno {PASSWORD_MIN_LENGTH} caratteri"
        )
    if len(value) > PASSWORD_MAX_LENGTH:
        raise ValueError("Password troppo lunga")
    if not re.search(r"[A-Z]", value):
        raise ValueError("La password deve contenere almeno una lettera maiuscola")
    if not re.search(r"[a-z]", value):
        raise ValueError("La password deve contenere almeno una lettera minuscola")
    if not re.search(r"[0-9]", value):
        raise ValueError("La password deve contenere almeno un numero")
    if not re.search(r"[^A-Za-z0-9]", value):
        raise ValueError("La password deve contenere almeno un carattere speciale")
    return value


class ProfileBase(BaseModel):
    email: EmailStr
    full_name: str
    phone: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v):
        v = sanitize_text(v)
        if not v or len(v) < 3:
            raise ValueError("Nome troppo corto")
        if len(v) > 50:
            raise ValueError("Nome troppo lungo")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v is None:
            return v
        v = sanitize_phone(v)
        if not 10 <= len(v.lstrip("+")) <= 15:
            raise ValueError("Numero di telefono non valido")
        return v


class ProfileCreate(ProfileBase):
    password: str
    invite_code: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return validate_password_strength(v)

    @field_validator("invite_code")
    @classmethod
    def normalize_invite_code(cls, v):
        if v is None or not v.strip():
            return None
        return v.strip().upper()


class ProfileUpdate(BaseModel):
    """Campi modificabili dal proprietario del profilo"""

    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    subscription_type: Optional[str] = None
    email_notifications_enabled: Optional[bool] = None
    profile_metadata: Optional[Dict[str, Any]] = None

    @field_validator("full_name", "bio", "subscription_type")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)

    @field_validator("phone")
    @classmethod
    def clean_phone(cls, v):
        return sanitize_phone(v) if v is not None else None

    @field_validator("avatar_url")
    @classmethod
    def clean_avatar_url(cls, v):
        if v is None:
            return v
        url = sanitize_url(v)
        if url is None:
            raise ValueError("URL non valido")
        return url


class ProfileAdminUpdate(ProfileUpdate):
    """Campi aggiuntivi riservati ad admin/gestore"""

    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class ProfileResponse(BaseModel):
    id: int
    email: str
    full_name: str
    role: UserRole
    phone: Optional[str] = None
    subscription_type: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    profile_metadata: Optional[Dict[str, Any]] = None
    is_active: bool = True
    email_notifications_enabled: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileSummary(BaseModel):
    id: int
    full_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class ProfilesListResponse(BaseModel):
    users: List[ProfileResponse]


class ProfileChangePassword(BaseModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v):
        return validate_password_strength(v)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: UserRole
    redirect_to: str


class RefreshRequest(BaseModel):
    refresh_token: str
