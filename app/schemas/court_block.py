from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional, List

from app.utils.datetime_utils import to_naive_utc
from app.utils.sanitize import sanitize_text


class CourtBlockCreate(BaseModel):
    court: str
    start_time: datetime
    end_time: datetime
    reason: Optional[str] = Field(default=None, max_length=200)

    @field_validator("court")
    @classmethod
    def clean_court(cls, v):
        v = sanitize_text(v)
        if not v:
            raise ValueError("Campo obbligatorio")
        return v

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, v):
        return sanitize_text(v) or None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_interval(self):
        if self.end_time <= self.start_time:
            raise ValueError("La data di fine deve essere successiva alla data di inizio")
        return self


class CourtBlockResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    court: str
    start_time: datetime
    end_time: datetime
    reason: str
    created_by: Optional[int] = None
    created_by_name: Optional[str] = None
    created_at: datetime


class CourtBlockEnvelope(BaseModel):
    block: CourtBlockResponse


class CourtBlocksListResponse(BaseModel):
    blocks: List[CourtBlockResponse]
