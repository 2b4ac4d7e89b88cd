from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.utils.datetime_utils import to_naive_utc
from app.utils.sanitize import sanitize_text, sanitize_url


def _clean_url(value):
    if value is None:
        return None
    url = sanitize_url(value)
    if url is None:
        raise ValueError("URL non valido")
    return url


# ---------------------------------------------------------------- annunci


class AnnouncementBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    announcement_type: str = "announcement"
    priority: str = Field(default="medium", pattern="^(low|medium|high|urgent)$")
    visibility: str = Field(default="all", pattern="^(all|atleti|maestri|admin)$")
    expiry_date: Optional[datetime] = None
    is_published: bool = True
    is_pinned: bool = False
    image_url: Optional[str] = None
    link_url: Optional[str] = None
    link_text: Optional[str] = None

    @field_validator("title", "content", "link_text")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)

    @field_validator("image_url", "link_url")
    @classmethod
    def clean_url(cls, v):
        return _clean_url(v)

    @field_validator("expiry_date")
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v) if v is not None else None


class AnnouncementCreate(AnnouncementBase):
    pass


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = None
    announcement_type: Optional[str] = None
    priority: Optional[str] = Field(default=None, pattern="^(low|medium|high|urgent)$")
    visibility: Optional[str] = Field(default=None, pattern="^(all|atleti|maestri|admin)$")
    expiry_date: Optional[datetime] = None
    is_published: Optional[bool] = None
    is_pinned: Optional[bool] = None
    image_url: Optional[str] = None
    link_url: Optional[str] = None
    link_text: Optional[str] = None

    @field_validator("title", "content", "link_text")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)

    @field_validator("image_url", "link_url")
    @classmethod
    def clean_url(cls, v):
        return _clean_url(v)

    @field_validator("expiry_date")
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v) if v is not None else None


class AnnouncementResponse(AnnouncementBase):
    id: int
    author_id: Optional[int] = None
    view_count: int = 0
    days_until_expiry: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AnnouncementEnvelope(BaseModel):
    announcement: AnnouncementResponse


class AnnouncementsListResponse(BaseModel):
    announcements: List[AnnouncementResponse]


# ---------------------------------------------------------------- news


class NewsBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    category: str = Field(
        default="generale", pattern="^(generale|torneo|allenamento|evento|comunicato)$"
    )
    summary: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    published: bool = True

    @field_validator("title", "summary", "content")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)

    @field_validator("image_url")
    @classmethod
    def clean_url(cls, v):
        return _clean_url(v)


class NewsCreate(NewsBase):
    pass


class NewsUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[str] = Field(
        default=None, pattern="^(generale|torneo|allenamento|evento|comunicato)$"
    )
    summary: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    published: Optional[bool] = None

    @field_validator("title", "summary", "content")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)

    @field_validator("image_url")
    @classmethod
    def clean_url(cls, v):
        return _clean_url(v)


class NewsResponse(NewsBase):
    id: int
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NewsListResponse(BaseModel):
    news: List[NewsResponse]


# ---------------------------------------------------------------- video lezioni


class VideoLessonCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    video_url: str
    thumbnail_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    assigned_to: int
    category: str = "generale"
    level: str = "tutti"

    @field_validator("title", "description")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)

    @field_validator("video_url", "thumbnail_url")
    @classmethod
    def clean_url(cls, v):
        return _clean_url(v)


class VideoLessonUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    assigned_to: Optional[int] = None
    category: Optional[str] = None
    level: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("title", "description")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)

    @field_validator("video_url", "thumbnail_url")
    @classmethod
    def clean_url(cls, v):
        return _clean_url(v)


class VideoLessonResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    video_url: str
    thumbnail_url: Optional[str] = None
    duration_minutes: Optional[int] = None
    category: str
    level: str
    is_active: bool
    watch_count: int = 0
    watched_at: Optional[datetime] = None
    created_by: Optional[int] = None
    assigned_to: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VideoLessonEnvelope(BaseModel):
    video: VideoLessonResponse


class VideoLessonsListResponse(BaseModel):
    videos: List[VideoLessonResponse]
