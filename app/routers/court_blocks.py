from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
import logging

from app.database import get_db
from app.crud import court_block as crud
from app.crud import profile as profile_crud
from app.models.profile import Profile
from app.schemas.court_block import (
    CourtBlockCreate,
    CourtBlockEnvelope,
    CourtBlockResponse,
    CourtBlocksListResponse,
)
from app.services.auth import get_current_user, require_admin_or_gestore
from app.utils.activity import log_activity
from app.utils.datetime_utils import to_naive_utc
from app.utils.exceptions import AcademyError, to_http_exception
from app.utils.rate_limiter import rate_limit
from app.utils.sanitize import sanitize_text

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=CourtBlocksListResponse)
def get_court_blocks(
    court: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """Blocchi dei campi, filtrabili per campo e intervallo, con il nome di chi li ha creati"""
    blocks = crud.get_court_blocks(
        db,
        court=sanitize_text(court),
        date_from=to_naive_utc(date_from) if date_from else None,
        date_to=to_naive_utc(date_to) if date_to else None,
    )
    creators = {
        profile.id: profile.full_name
        for profile in profile_crud.get_profiles_by_ids(db, [block.created_by for block in blocks])
    }

    result = []
    for block in blocks:
        item = CourtBlockResponse.model_validate(block)
        item.created_by_name = creators.get(block.created_by)
        result.append(item)
    return CourtBlocksListResponse(blocks=result)


@router.post(
    "",
    response_model=CourtBlockEnvelope,
    status_code=status.HTTP_201_CREATED,
)
@rate_limit("API_WRITE")
def create_court_block(
    block: CourtBlockCreate,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    """Blocca un campo; 409 se nella fascia ci sono prenotazioni non cancellate"""
    try:
        db_block = crud.create_court_block(db, block, created_by=current_user.id)
    except AcademyError as e:
        raise to_http_exception(e)

    logger.info(
        f"Campo {db_block.court} bloccato {db_block.start_time:%Y-%m-%d %H:%M}-"
        f"{db_block.end_time:%Y-%m-%d %H:%M} da {current_user.id}: {db_block.reason}"
    )
    log_activity(
        db,
        current_user.id,
        "court_block.create",
        entity_type="court_block",
        entity_id=db_block.id,
        metadata={"court": db_block.court, "reason": db_block.reason},
        request=request,
    )
    item = CourtBlockResponse.model_validate(db_block)
    item.created_by_name = current_user.full_name
    return CourtBlockEnvelope(block=item)


@router.delete("")
def delete_court_block(
    id: int,
    request: Request = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    db_block = crud.get_court_block(db, id)
    if not db_block:
        raise HTTPException(status_code=404, detail="Blocco non trovato")

    crud.delete_court_block(db, db_block)
    logger.info(f"Blocco campo {id} rimosso da {current_user.id}")
    log_activity(
        db,
        current_user.id,
        "court_block.delete",
        entity_type="court_block",
        entity_id=id,
        request=request,
    )
    return {"success": True}
