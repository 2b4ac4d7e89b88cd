from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional, List

from app.enums.booking import BookingType, BookingStatus, ParticipantType
from app.utils.datetime_utils import to_naive_utc
from app.utils.sanitize import sanitize_text

MAX_BATCH_SIZE = 50


class ParticipantCreate(BaseModel):
    user_id: Optional[int] = None
    full_name: str
    email: Optional[EmailStr] = None
    is_registered: bool = False
    participant_type: ParticipantType = ParticipantType.ATLETA

    @field_validator("full_name")
    @classmethod
    def clean_full_name(cls, v):
        v = sanitize_text(v)
        if not v:
            raise ValueError("Nome partecipante obbligatorio")
        return v


class ParticipantResponse(BaseModel):
    id: int
    booking_id: int
    user_id: Optional[int] = None
    full_name: str
    email: Optional[str] = None
    is_registered: bool
    participant_type: ParticipantType
    order_index: int

    model_config = ConfigDict(from_attributes=True)


class BookingBase(BaseModel):
    user_id: int
    coach_id: Optional[int] = None
    court: str
    type: BookingType = BookingType.CAMPO
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("court")
    @classmethod
    def clean_court(cls, v):
        v = sanitize_text(v)
        if not v:
            raise ValueError("Campo obbligatorio")
        return v

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v):
        return sanitize_text(v) or None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v)


class BookingCreate(BookingBase):
    # Solo admin/gestore possono impostarli; per gli altri vengono ignorati
    status: Optional[BookingStatus] = None
    coach_confirmed: Optional[bool] = None
    manager_confirmed: Optional[bool] = None
    participants: List[ParticipantCreate] = []

    @model_validator(mode="after")
    def check_interval(self):
        if self.end_time <= self.start_time:
            raise ValueError(
                "La data di fine deve essere successiva alla data di inizio"
            )
        return self


class BookingUpdate(BaseModel):
    coach_id: Optional[int] = None
    court: Optional[str] = None
    type: Optional[BookingType] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[BookingStatus] = None
    coach_confirmed: Optional[bool] = None
    manager_confirmed: Optional[bool] = None
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("court", "notes")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v) if v is not None else None


class BookingResponse(BaseModel):
    id: int
    user_id: int
    coach_id: Optional[int] = None
    court: str
    type: BookingType
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    coach_confirmed: bool
    manager_confirmed: bool
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    participants: List[ParticipantResponse] = []

    model_config = ConfigDict(from_attributes=True)


class BookingEnvelope(BaseModel):
    booking: BookingResponse


class BookingsListResponse(BaseModel):
    bookings: List[BookingResponse]


class BookingBatchCreate(BaseModel):
    bookings: List[BookingCreate] = Field(min_length=1, max_length=MAX_BATCH_SIZE)


class BookingBatchResponse(BaseModel):
    success: bool = True
    bookings: List[BookingResponse]
    count: int


class BusyInterval(BaseModel):
    start_time: datetime
    end_time: datetime


class CourtAvailabilityResponse(BaseModel):
    court: str
    date: str
    busy: List[BusyInterval]
