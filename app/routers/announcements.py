from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.crud import content as crud
from app.models.profile import Profile
from app.schemas.content import (
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
    AnnouncementEnvelope,
    AnnouncementsListResponse,
)
from app.services.auth import require_admin_or_gestore
from app.utils.activity import log_activity
from app.utils.datetime_utils import utcnow
from app.utils.rate_limiter import rate_limit

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_response(announcement) -> AnnouncementResponse:
    response = AnnouncementResponse.model_validate(announcement)
    if announcement.expiry_date is not None:
        response.days_until_expiry = (announcement.expiry_date - utcnow()).days
    return response


@router.get("", response_model=AnnouncementsListResponse)
def get_announcements(
    include_expired: bool = False,
    announcement_type: Optional[str] = None,
    visibility: Optional[str] = None,
    priority: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Annunci pubblicati, quelli in evidenza per primi"""
    announcements = crud.get_announcements(
        db,
        include_expired=include_expired,
        announcement_type=announcement_type,
        visibility=visibility,
        priority=priority,
    )
    return {"announcements": [_to_response(a) for a in announcements]}


@router.get("/{announcement_id}", response_model=AnnouncementEnvelope)
def get_announcement(announcement_id: int, db: Session = Depends(get_db)):
    announcement = crud.get_announcement(db, announcement_id)
    if not announcement or not announcement.is_published:
        raise HTTPException(status_code=404, detail="Annuncio non trovato")

    announcement.view_count = (announcement.view_count or 0) + 1
    db.commit()
    db.refresh(announcement)
    return {"announcement": _to_response(announcement)}


@router.post(
    "",
    response_model=AnnouncementEnvelope,
    status_code=status.HTTP_201_CREATED,
)
@rate_limit("API_WRITE")
def create_announcement(
    announcement: AnnouncementCreate,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    db_announcement = crud.create_announcement(
        db, announcement.model_dump(), author_id=current_user.id
    )
    logger.info(f"📢 Annuncio {db_announcement.id} creato da {current_user.id}")
    log_activity(
        db,
        current_user.id,
        "announcement.create",
        entity_type="announcement",
        entity_id=db_announcement.id,
        metadata={"title": db_announcement.title, "priority": db_announcement.priority},
        request=request,
    )
    return {"announcement": _to_response(db_announcement)}


@router.put("/{announcement_id}", response_model=AnnouncementEnvelope)
def update_announcement(
    announcement_id: int,
    update: AnnouncementUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    announcement = crud.get_announcement(db, announcement_id)
    if not announcement:
        raise HTTPException(status_code=404, detail="Annuncio non trovato")

    announcement = crud.update_announcement(db, announcement, update.model_dump(exclude_unset=True))
    logger.info(f"Annuncio {announcement_id} aggiornato da {current_user.id}")
    return {"announcement": _to_response(announcement)}


@router.delete("/{announcement_id}")
def delete_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    announcement = crud.get_announcement(db, announcement_id)
    if not announcement:
        raise HTTPException(status_code=404, detail="Annuncio non trovato")

    crud.delete_announcement(db, announcement)
    logger.info(f"Annuncio {announcement_id} eliminato da {current_user.id}")
    return {"success": True}
