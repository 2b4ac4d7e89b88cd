from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.crud import content as crud
from app.crud import profile as profile_crud
from app.enums.notification_type import NotificationType
from app.models.profile import Profile
from app.schemas.content import (
    VideoLessonCreate,
    VideoLessonUpdate,
    VideoLessonResponse,
    VideoLessonEnvelope,
    VideoLessonsListResponse,
)
from app.services.auth import get_current_user, require_admin_or_gestore, require_staff
from app.utils.activity import log_activity
from app.utils.notification_utils import create_notification
from app.utils.roles import is_staff

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=VideoLessonsListResponse)
def get_video_lessons(
    assigned_to: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """Lo staff vede tutte le video lezioni, gli atleti solo le proprie attive"""
    if is_staff(current_user.role):
        videos = crud.get_video_lessons(db, assigned_to=assigned_to)
    else:
        videos = crud.get_video_lessons(db, assigned_to=current_user.id, only_active=True)
    return {"videos": [VideoLessonResponse.model_validate(v) for v in videos]}


@router.post(
    "",
    response_model=VideoLessonEnvelope,
    status_code=status.HTTP_201_CREATED,
)
def create_video_lesson(
    video: VideoLessonCreate,
    request: Request = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_staff),
):
    assignee = profile_crud.get_profile(db, video.assigned_to)
    if not assignee:
        raise HTTPException(status_code=404, detail="Atleta non trovato")

    db_video = crud.create_video_lesson(db, video.model_dump(), created_by=current_user.id)
    logger.info(
        f"🎬 Video lezione {db_video.id} assegnata a {assignee.id} da {current_user.id}"
    )
    log_activity(
        db,
        current_user.id,
        "video_lesson.create",
        entity_type="video_lesson",
        entity_id=db_video.id,
        metadata={"title": db_video.title, "assigned_to": assignee.id},
        request=request,
    )
    create_notification(
        db,
        assignee.id,
        NotificationType.GENERAL,
        "Nuova video lezione",
        f"Ti è stata assegnata la video lezione \"{db_video.title}\"",
        link="/dashboard/atleta/videos",
    )
    return {"video": VideoLessonResponse.model_validate(db_video)}


@router.put("/{video_id}", response_model=VideoLessonEnvelope)
def update_video_lesson(
    video_id: int,
    update: VideoLessonUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_staff),
):
    db_video = crud.get_video_lesson(db, video_id)
    if not db_video:
        raise HTTPException(status_code=404, detail="Video lezione non trovata")

    fields = update.model_dump(exclude_unset=True)
    if "assigned_to" in fields and not profile_crud.get_profile(db, fields["assigned_to"]):
        raise HTTPException(status_code=404, detail="Atleta non trovato")

    db_video = crud.update_video_lesson(db, db_video, fields)
    return {"video": VideoLessonResponse.model_validate(db_video)}


@router.post("/{video_id}/watched", response_model=VideoLessonEnvelope)
def mark_watched(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    db_video = crud.get_video_lesson(db, video_id)
    if not db_video or (db_video.assigned_to != current_user.id and not is_staff(current_user.role)):
        raise HTTPException(status_code=404, detail="Video lezione non trovata")

    db_video = crud.mark_video_watched(db, db_video)
    return {"video": VideoLessonResponse.model_validate(db_video)}


@router.delete("/{video_id}")
def delete_video_lesson(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    db_video = crud.get_video_lesson(db, video_id)
    if not db_video:
        raise HTTPException(status_code=404, detail="Video lezione non trovata")

    crud.delete_video_lesson(db, db_video)
    logger.info(f"Video lezione {video_id} eliminata da {current_user.id}")
    return {"success": True}
