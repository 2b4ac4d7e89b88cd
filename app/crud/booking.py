from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value
from sqlalchemy.exc import IntegrityError
from collections import defaultdict
from typing import List, Optional
import logging

from app.enums.booking import BookingStatus
from app.models.booking import Booking, BookingParticipant
from app.schemas.booking import BookingCreate
from app.utils.booking_conflicts import (
    ensure_court_not_blocked,
    ensure_slot_available,
    intervals_overlap,
)
from app.utils.datetime_utils import utcnow
from app.utils.exceptions import (
    AcademyError,
    BookingBatchConflictError,
    BookingConflictError,
    BookingReferenceError,
)

logger = logging.getLogger(__name__)

# Vincolo di esclusione PostgreSQL sulle prenotazioni confermate
OVERLAP_CONSTRAINT = "excl_bookings_confirmed_court_overlap"


def get_booking(db: Session, booking_id: int) -> Optional[Booking]:
    return db.query(Booking).filter(Booking.id == booking_id).first()


def get_bookings(
    db: Session,
    user_id: Optional[int] = None,
    coach_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 200,
) -> List[Booking]:
    """
    Lista prenotazioni ordinate per orario di inizio.
    I partecipanti vengono caricati con un'unica query IN.
    """
    query = db.query(Booking)
    if user_id is not None:
        query = query.filter(Booking.user_id == user_id)
    if coach_id is not None:
        query = query.filter(Booking.coach_id == coach_id)

    bookings = query.order_by(Booking.start_time.asc()).offset(skip).limit(limit).all()
    attach_participants(db, bookings)
    return bookings


def attach_participants(db: Session, bookings: List[Booking]) -> None:
    if not bookings:
        return

    booking_ids = [booking.id for booking in bookings]
    rows = (
        db.query(BookingParticipant)
        .filter(BookingParticipant.booking_id.in_(booking_ids))
        .order_by(BookingParticipant.order_index.asc())
        .all()
    )
    by_booking = defaultdict(list)
    for row in rows:
        by_booking[row.booking_id].append(row)

    for booking in bookings:
        set_committed_value(booking, "participants", by_booking.get(booking.id, []))


def _integrity_error_to_domain(e: IntegrityError):
    """Solo la violazione del vincolo di esclusione è un conflitto di fascia"""
    if OVERLAP_CONSTRAINT in str(e.orig):
        return BookingConflictError()
    return BookingReferenceError("Maestro o partecipante non valido")


def _build_booking(booking: BookingCreate, privileged: bool) -> Booking:
    db_booking = Booking(
        user_id=booking.user_id,
        coach_id=booking.coach_id,
        court=booking.court,
        type=booking.type,
        start_time=booking.start_time,
        end_time=booking.end_time,
        notes=booking.notes,
        status=BookingStatus.PENDING,
        coach_confirmed=False,
        manager_confirmed=False,
    )
    if privileged:
        if booking.status is not None:
            db_booking.status = booking.status
        if booking.coach_confirmed is not None:
            db_booking.coach_confirmed = booking.coach_confirmed
        if booking.manager_confirmed is not None:
            db_booking.manager_confirmed = booking.manager_confirmed

    for index, participant in enumerate(booking.participants):
        db_booking.participants.append(
            BookingParticipant(
                user_id=participant.user_id,
                full_name=participant.full_name,
                email=participant.email,
                is_registered=participant.is_registered,
                participant_type=participant.participant_type,
                order_index=index,
            )
        )
    return db_booking


def _blocks_slot(db_booking: Booking) -> bool:
    return db_booking.manager_confirmed and db_booking.status != BookingStatus.CANCELLED


def create_booking(
    db: Session, booking: BookingCreate, privileged: bool = False
) -> Booking:
    """
    Crea la prenotazione e i partecipanti in un'unica transazione.

    Le prenotazioni sovrapposte dello stesso campo vengono bloccate prima
    della verifica dei conflitti; su PostgreSQL il vincolo di esclusione
    rifiuta comunque un inserimento concorrente.

    Raises:
        CourtBlockedError: campo bloccato nella fascia richiesta
        BookingConflictError: fascia oraria già occupata
        BookingReferenceError: maestro o partecipante inesistente
    """
    try:
        ensure_slot_available(
            db, booking.court, booking.start_time, booking.end_time, lock=True
        )
        db_booking = _build_booking(booking, privileged)
        db.add(db_booking)
        db.commit()
    except AcademyError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Prenotazione rifiutata dal database: {e.orig}")
        raise _integrity_error_to_domain(e)

    db.refresh(db_booking)
    return db_booking


def create_bookings_batch(
    db: Session, bookings: List[BookingCreate], privileged: bool = False
) -> List[Booking]:
    """
    Crea più prenotazioni in una transazione: tutte o nessuna.

    Ogni fascia viene verificata contro blocchi e prenotazioni confermate;
    le prenotazioni del lotto che nascono già confermate non possono
    sovrapporsi tra loro sullo stesso campo.

    Raises:
        BookingBatchConflictError: elenco delle fasce non disponibili
    """
    conflicts = []
    db_bookings = [_build_booking(booking, privileged) for booking in bookings]
    try:
        for index, db_booking in enumerate(db_bookings):
            try:
                ensure_slot_available(
                    db, db_booking.court, db_booking.start_time, db_booking.end_time, lock=True
                )
            except BookingConflictError as e:
                conflicts.append(
                    {
                        "index": index,
                        "court": db_booking.court,
                        "start_time": db_booking.start_time.isoformat(),
                        "error": e.message,
                        "conflicting_ids": e.conflicting_ids,
                    }
                )
                continue

            if not _blocks_slot(db_booking):
                continue
            overlapping = [
                other_index
                for other_index, other in enumerate(db_bookings[:index])
                if _blocks_slot(other)
                and other.court == db_booking.court
                and intervals_overlap(
                    db_booking.start_time, db_booking.end_time, other.start_time, other.end_time
                )
            ]
            if overlapping:
                conflicts.append(
                    {
                        "index": index,
                        "court": db_booking.court,
                        "start_time": db_booking.start_time.isoformat(),
                        "error": f"Si sovrappone alla prenotazione {overlapping[0]} del lotto",
                        "conflicting_ids": [],
                    }
                )

        if conflicts:
            raise BookingBatchConflictError(conflicts)

        db.add_all(db_bookings)
        db.commit()
    except AcademyError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Lotto di prenotazioni rifiutato dal database: {e.orig}")
        raise _integrity_error_to_domain(e)

    for db_booking in db_bookings:
        db.refresh(db_booking)
    return db_bookings


def update_booking(db: Session, db_booking: Booking, fields: dict) -> Booking:
    """
    Aggiorna la prenotazione. La fascia viene ricontrollata, escludendo la
    prenotazione stessa, quando la prenotazione occupa il campo e cambiano
    campo o orari, viene confermata dal gestore oppure torna attiva dopo
    una cancellazione.
    """
    court = fields.get("court", db_booking.court)
    start_time = fields.get("start_time", db_booking.start_time)
    end_time = fields.get("end_time", db_booking.end_time)
    status = fields.get("status", db_booking.status)
    manager_confirmed = fields.get("manager_confirmed", db_booking.manager_confirmed)

    slot_changed = (
        court != db_booking.court
        or start_time != db_booking.start_time
        or end_time != db_booking.end_time
    )
    confirming = manager_confirmed and not db_booking.manager_confirmed
    reactivating = (
        db_booking.status == BookingStatus.CANCELLED and status != BookingStatus.CANCELLED
    )
    active = status != BookingStatus.CANCELLED
    blocks_slot = manager_confirmed and active

    try:
        if blocks_slot and (slot_changed or confirming or reactivating):
            ensure_slot_available(
                db,
                court,
                start_time,
                end_time,
                exclude_booking_id=db_booking.id,
                lock=True,
            )
        elif active and (slot_changed or reactivating):
            ensure_court_not_blocked(db, court, start_time, end_time)

        for key, value in fields.items():
            setattr(db_booking, key, value)
        db_booking.updated_at = utcnow()
        db.commit()
    except AcademyError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Aggiornamento prenotazione rifiutato dal database: {e.orig}")
        raise _integrity_error_to_domain(e)

    db.refresh(db_booking)
    return db_booking



def delete_booking(db: Session, db_booking: Booking) -> None:
    db.delete(db_booking)
    db.commit()


def get_upcoming_confirmed_bookings(db: Session, start, end) -> List[Booking]:
    """Prenotazioni confermate che iniziano nell'intervallo [start, end)"""
    return (
        db.query(Booking)
        .filter(Booking.status == BookingStatus.CONFIRMED)
        .filter(Booking.start_time >= start)
        .filter(Booking.start_time < end)
        .order_by(Booking.start_time.asc())
        .all()
    )
