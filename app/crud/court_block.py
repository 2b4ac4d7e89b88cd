from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional

from app.enums.booking import BookingStatus
from app.models.booking import Booking
from app.models.court_block import CourtBlock
from app.schemas.court_block import CourtBlockCreate
from app.utils.exceptions import BookingConflictError


def get_court_block(db: Session, block_id: int) -> Optional[CourtBlock]:
    return db.query(CourtBlock).filter(CourtBlock.id == block_id).first()


def get_court_blocks(
    db: Session,
    court: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> List[CourtBlock]:
    query = db.query(CourtBlock)
    if court:
        query = query.filter(CourtBlock.court == court)
    if date_from is not None:
        query = query.filter(CourtBlock.end_time >= date_from)
    if date_to is not None:
        query = query.filter(CourtBlock.start_time <= date_to)
    return query.order_by(CourtBlock.start_time.asc()).all()


def create_court_block(db: Session, block: CourtBlockCreate, created_by: int) -> CourtBlock:
    """
    Blocca il campo nella fascia indicata.

    Raises:
        BookingConflictError: esistono prenotazioni non cancellate nella fascia
    """
    overlapping = (
        db.query(Booking.id)
        .filter(Booking.court == block.court)
        .filter(Booking.status != BookingStatus.CANCELLED)
        .filter(Booking.start_time < block.end_time)
        .filter(Booking.end_time > block.start_time)
        .with_for_update()
        .all()
    )
    if overlapping:
        db.rollback()
        raise BookingConflictError(
            "Esistono prenotazioni in questo slot. Annullarle prima di bloccare il campo.",
            conflicting_ids=[row.id for row in overlapping],
        )

    db_block = CourtBlock(
        court=block.court,
        start_time=block.start_time,
        end_time=block.end_time,
        reason=block.reason or "Blocco manuale",
        created_by=created_by,
    )
    db.add(db_block)
    db.commit()
    db.refresh(db_block)
    return db_block


def delete_court_block(db: Session, db_block: CourtBlock) -> None:
    db.delete(db_block)
    db.commit()
