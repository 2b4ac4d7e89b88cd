from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional, List, Dict, Any

from app.enums.tournament import (
    TournamentStatus,
    TournamentType,
    ParticipantStatus,
    MatchStatus,
)
from app.schemas.profile import ProfileSummary
from app.utils.datetime_utils import to_naive_utc
from app.utils.sanitize import sanitize_text

VALID_BRACKET_SIZES = (2, 4, 8, 16, 32, 64, 128)
MIN_GROUP_SIZE = 3


class TournamentBase(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    start_date: datetime
    end_date: Optional[datetime] = None
    tournament_type: TournamentType = TournamentType.ELIMINAZIONE_DIRETTA
    max_participants: int = Field(gt=0)
    status: TournamentStatus = TournamentStatus.BOZZA
    category: Optional[str] = None
    level: Optional[str] = None

    @field_validator("title", "description", "category", "level")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v) if v is not None else None


class TournamentCreate(TournamentBase):
    @model_validator(mode="after")
    def check_format_capacity(self):
        if (
            self.tournament_type == TournamentType.ELIMINAZIONE_DIRETTA
            and self.max_participants not in VALID_BRACKET_SIZES
        ):
            sizes = ", ".join(str(size) for size in VALID_BRACKET_SIZES)
            raise ValueError(
                f"Per eliminazione_diretta max_participants deve essere uno tra: {sizes}"
            )
        if (
            self.tournament_type
            in (TournamentType.GIRONE_ELIMINAZIONE, TournamentType.CAMPIONATO)
            and self.max_participants < MIN_GROUP_SIZE
        ):
            raise ValueError(
                f"Per gironi e campionati max_participants deve essere almeno {MIN_GROUP_SIZE}"
            )
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("La data di fine deve essere successiva alla data di inizio")
        return self


class TournamentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_participants: Optional[int] = Field(default=None, gt=0)
    status: Optional[TournamentStatus] = None
    category: Optional[str] = None
    level: Optional[str] = None

    @field_validator("title", "description", "category", "level")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v) if v is not None else None


class TournamentResponse(TournamentBase):
    id: int
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TournamentWithCount(TournamentResponse):
    current_participants: int = 0


class TournamentEnvelope(BaseModel):
    tournament: TournamentResponse
    current_participants: int = 0


class TournamentsListResponse(BaseModel):
    tournaments: List[TournamentWithCount]


class EnrollmentRequest(BaseModel):
    tournament_id: int
    user_id: int


class TournamentParticipantResponse(BaseModel):
    id: int
    tournament_id: int
    user_id: int
    status: ParticipantStatus
    created_at: datetime
    profiles: Optional[ProfileSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ParticipantEnvelope(BaseModel):
    participant: TournamentParticipantResponse


class ParticipantsListResponse(BaseModel):
    participants: List[TournamentParticipantResponse]


class MatchSet(BaseModel):
    player1: int = Field(ge=0)
    player2: int = Field(ge=0)


class TournamentMatchCreate(BaseModel):
    round_number: int = Field(default=1, ge=1)
    round_name: Optional[str] = None
    player1_id: Optional[int] = None
    player2_id: Optional[int] = None
    scheduled_time: Optional[datetime] = None
    court: Optional[str] = None

    @field_validator("scheduled_time")
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v) if v is not None else None

    @model_validator(mode="after")
    def check_players(self):
        if self.player1_id is not None and self.player1_id == self.player2_id:
            raise ValueError("Un giocatore non può affrontare sé stesso")
        return self


class TournamentMatchUpdate(BaseModel):
    status: Optional[MatchStatus] = None
    scheduled_time: Optional[datetime] = None
    court: Optional[str] = None
    sets: Optional[List[MatchSet]] = None
    winner_id: Optional[int] = None

    @field_validator("scheduled_time")
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v) if v is not None else None


class TournamentMatchResponse(BaseModel):
    id: int
    tournament_id: int
    round_number: int
    round_name: Optional[str] = None
    player1_id: Optional[int] = None
    player2_id: Optional[int] = None
    winner_id: Optional[int] = None
    status: MatchStatus
    scheduled_time: Optional[datetime] = None
    court: Optional[str] = None
    sets: Optional[List[Dict[str, Any]]] = None

    model_config = ConfigDict(from_attributes=True)


class MatchEnvelope(BaseModel):
    match: TournamentMatchResponse


class MatchesListResponse(BaseModel):
    matches: List[TournamentMatchResponse]
