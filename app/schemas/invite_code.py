from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List

from app.enums.user_role import UserRole
from app.utils.datetime_utils import to_naive_utc


class InviteCodeCreate(BaseModel):
    code: str = Field(min_length=4, max_length=64)
    role: UserRole
    max_uses: Optional[int] = Field(default=None, gt=0)
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v):
        v = v.strip().upper()
        if not v.replace("-", "").replace("_", "").isalnum():
            raise ValueError("Il codice può contenere solo lettere, numeri, '-' e '_'")
        return v

    @field_validator("expires_at")
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v) if v is not None else None


class InviteCodeResponse(BaseModel):
    id: int
    code: str
    role: UserRole
    max_uses: Optional[int] = None
    uses_remaining: Optional[int] = None
    expires_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InviteCodesListResponse(BaseModel):
    invite_codes: List[InviteCodeResponse]


class InviteCodeValidation(BaseModel):
    valid: bool
    role: Optional[UserRole] = None
    code: Optional[str] = None


class InviteCodeUseRequest(BaseModel):
    code: str
    user_id: int


class InviteCodeUseResponse(BaseModel):
    success: bool
    role: UserRole
