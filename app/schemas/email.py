from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional, List, Dict, Any

from app.enums.user_role import UserRole


class CampaignRequest(BaseModel):
    """Campagna email verso una lista esplicita di destinatari"""

    campaign_name: str = Field(min_length=1, max_length=200)
    subject: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)
    recipient_emails: List[EmailStr] = Field(min_length=1)
    recipient_type: Optional[str] = None
    recipient_role: Optional[UserRole] = None
    template: Optional[str] = None


class CampaignStats(BaseModel):
    total: int
    sent: int
    failed: int


class CampaignResponse(BaseModel):
    success: bool
    message: str
    campaign_id: int
    stats: CampaignStats


class BulkEmailRequest(BaseModel):
    subject: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)
    send_to_all: bool = False
    role: Optional[UserRole] = None
    emails: Optional[List[EmailStr]] = None

    @model_validator(mode="after")
    def check_recipients(self):
        if not self.send_to_all and self.role is None and not self.emails:
            raise ValueError("Specificare i destinatari")
        return self


class BulkEmailResponse(BaseModel):
    success: bool
    sent_count: int
    failed_count: int
    total_recipients: int
    errors: List[Dict[str, Any]] = []


class EmailStatsResponse(BaseModel):
    total_sent: int
    total_delivered: int
    total_opened: int
    total_clicked: int
    total_failed: int


class EmailStatsEnvelope(BaseModel):
    stats: EmailStatsResponse


class EmailWebhookData(BaseModel):
    email_id: str
    opened_at: Optional[str] = None
    clicked_at: Optional[str] = None
    bounce: Optional[Dict[str, Any]] = None


class EmailWebhookEvent(BaseModel):
    type: str
    data: EmailWebhookData


class SchedulerRequest(BaseModel):
    action: str = "booking_reminders"
