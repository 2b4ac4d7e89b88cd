from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.crud import activity_log as crud
from app.crud import profile as profile_crud
from app.models.profile import Profile
from app.schemas.activity_log import ActivityLogResponse, ActivityLogsListResponse
from app.schemas.profile import ProfileSummary
from app.services.auth import require_admin_or_gestore

router = APIRouter()


@router.get("", response_model=ActivityLogsListResponse)
def get_activity_logs(
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    """Ultime attività, con nome ed email dell'autore"""
    logs = crud.get_activity_logs(db, limit=limit)
    profiles = {
        p.id: p for p in profile_crud.get_profiles_by_ids(db, [log.user_id for log in logs])
    }

    result = []
    for log in logs:
        item = ActivityLogResponse.model_validate(log)
        if log.user_id in profiles:
            item.profiles = ProfileSummary.model_validate(profiles[log.user_id])
        result.append(item)
    return {"logs": result}
