from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.enums.notification_type import NotificationType
from app.utils.sanitize import sanitize_text


class NotificationBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    type: NotificationType = NotificationType.GENERAL
    link: Optional[str] = None

    @field_validator("title", "message")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v)


class NotificationCreate(NotificationBase):
    user_id: int


class AdminNotificationRequest(NotificationBase):
    pass


class NotificationMarkRead(BaseModel):
    notification_id: Optional[int] = None
    mark_all_read: bool = False


class NotificationResponse(NotificationBase):
    id: int
    user_id: int
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationEnvelope(BaseModel):
    notification: NotificationResponse


class NotificationsListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class NotificationActionResponse(BaseModel):
    success: bool
    message: str
