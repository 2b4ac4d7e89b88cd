from sqlalchemy.orm import Session
from typing import List, Optional

from app.models.invite_code import InviteCode
from app.schemas.invite_code import InviteCodeCreate


def get_invite_code(db: Session, invite_code_id: int) -> Optional[InviteCode]:
    return db.query(InviteCode).filter(InviteCode.id == invite_code_id).first()


def get_invite_code_by_code(db: Session, code: str) -> Optional[InviteCode]:
    return db.query(InviteCode).filter(InviteCode.code == code.strip().upper()).first()


def get_invite_codes(db: Session) -> List[InviteCode]:
    return db.query(InviteCode).order_by(InviteCode.created_at.desc()).all()


def create_invite_code(
    db: Session, invite_code: InviteCodeCreate, created_by: Optional[int] = None
) -> InviteCode:
    db_code = InviteCode(
        code=invite_code.code,
        role=invite_code.role,
        max_uses=invite_code.max_uses,
        uses_remaining=invite_code.max_uses,
        expires_at=invite_code.expires_at,
        created_by=created_by,
    )
    db.add(db_code)
    db.commit()
    db.refresh(db_code)
    return db_code


def delete_invite_code(db: Session, db_code: InviteCode) -> None:
    db.delete(db_code)
    db.commit()
