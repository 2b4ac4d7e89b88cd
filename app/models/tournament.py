from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Enum,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base
from app.enums.tournament import (
    TournamentStatus,
    TournamentType,
    ParticipantStatus,
    MatchStatus,
)
from app.utils.datetime_utils import utcnow


class Tournament(Base):
    __tablename__ = "tournaments"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    tournament_type = Column(
        Enum(
            TournamentType,
            name="tournament_type",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=TournamentType.ELIMINAZIONE_DIRETTA,
    )
    max_participants = Column(Integer, nullable=False)
    status = Column(
        Enum(
            TournamentStatus,
            name="tournament_status",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=TournamentStatus.BOZZA,
    )
    category = Column(String, nullable=True)
    level = Column(String, nullable=True)
    created_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    participants = relationship(
        "TournamentParticipant",
        back_populates="tournament",
        cascade="all, delete-orphan",
    )
    matches = relationship(
        "TournamentMatch",
        back_populates="tournament",
        cascade="all, delete-orphan",
        order_by="TournamentMatch.round_number",
    )


class TournamentParticipant(Base):
    __tablename__ = "tournament_participants"
    __table_args__ = (
        UniqueConstraint(
            "tournament_id", "user_id", name="uq_tournament_participant_user"
        ),
        {"extend_existing": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(
        Integer, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(
        Enum(
            ParticipantStatus,
            name="tournament_participant_status",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=ParticipantStatus.ISCRITTO,
    )
    created_at = Column(DateTime, default=utcnow)

    tournament = relationship("Tournament", back_populates="participants")
    user = relationship("Profile", back_populates="tournament_entries")


class TournamentMatch(Base):
    __tablename__ = "tournament_matches"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(
        Integer, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    round_number = Column(Integer, nullable=False, default=1)
    round_name = Column(String, nullable=True)
    player1_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    player2_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    winner_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    status = Column(
        Enum(
            MatchStatus,
            name="tournament_match_status",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=MatchStatus.SCHEDULED,
    )
    scheduled_time = Column(DateTime, nullable=True)
    court = Column(String, nullable=True)
    # Lista di set: [{"player1": 6, "player2": 4}, ...]
    sets = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    tournament = relationship("Tournament", back_populates="matches")
    player1 = relationship("Profile", foreign_keys=[player1_id])
    player2 = relationship("Profile", foreign_keys=[player2_id])
    winner = relationship("Profile", foreign_keys=[winner_id])
