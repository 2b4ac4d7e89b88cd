from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Enum,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base
from app.enums.user_role import UserRole
from app.utils.datetime_utils import utcnow


class InviteCode(Base):
    __tablename__ = "invite_codes"
    __table_args__ = (
        CheckConstraint(
            "uses_remaining IS NULL OR uses_remaining >= 0",
            name="ck_invite_codes_uses_remaining",
        ),
        {"extend_existing": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, index=True, nullable=False)
    role = Column(
        Enum(
            UserRole,
            name="user_role",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
    )
    # NULL = usi illimitati
    max_uses = Column(Integer, nullable=True)
    uses_remaining = Column(Integer, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    created_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    uses = relationship(
        "InviteCodeUse", back_populates="invite_code", cascade="all, delete-orphan"
    )


class InviteCodeUse(Base):
    __tablename__ = "invite_code_uses"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    invite_code_id = Column(
        Integer, ForeignKey("invite_codes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    used_at = Column(DateTime, default=utcnow)

    invite_code = relationship("InviteCode", back_populates="uses")
