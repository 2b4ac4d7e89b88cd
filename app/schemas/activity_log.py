from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, Any, List
from datetime import datetime

from app.schemas.profile import ProfileSummary


class ActivityLogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime
    profiles: Optional[ProfileSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ActivityLogsListResponse(BaseModel):
    logs: List[ActivityLogResponse]
