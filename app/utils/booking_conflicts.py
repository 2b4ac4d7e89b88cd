"""
Utilità per la verifica dei conflitti tra prenotazioni.

Gli intervalli sono semiaperti [start_time, end_time): due prenotazioni
adiacenti (una finisce alle 15:00, l'altra inizia alle 15:00) non sono in
conflitto. Solo le prenotazioni non cancellate e confermate dal gestore
bloccano la fascia oraria.
"""

from datetime import datetime, date, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.enums.booking import BookingStatus
from app.models.booking import Booking
from app.models.court_block import CourtBlock
from app.utils.datetime_utils import utcnow
from app.utils.exceptions import (
    BookingConflictError,
    BookingWindowError,
    CourtBlockedError,
)

BOOKING_ADVANCE_HOURS = 24


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """True se [start_a, end_a) e [start_b, end_b) si sovrappongono."""
    return start_a < end_b and end_a > start_b


def validate_booking_window(
    start_time: datetime,
    end_time: datetime,
    privileged: bool,
    now: Optional[datetime] = None,
) -> None:
    """
    Verifica la finestra temporale di una prenotazione.

    Args:
        start_time: Inizio della prenotazione (UTC naive)
        end_time: Fine della prenotazione (UTC naive)
        privileged: True per admin/gestore, che non hanno il vincolo delle 24 ore
        now: Ora di riferimento, utile nei test

    Raises:
        BookingWindowError: se l'intervallo è vuoto o manca l'anticipo minimo
    """
    if end_time <= start_time:
        raise BookingWindowError(
            "La data di fine deve essere successiva alla data di inizio"
        )

    if privileged:
        return

    now = now or utcnow()
    if start_time < now + timedelta(hours=BOOKING_ADVANCE_HOURS):
        raise BookingWindowError(
            "Le prenotazioni devono essere effettuate con almeno 24 ore di anticipo"
        )


def find_conflicting_bookings(
    db: Session,
    court: str,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: Optional[int] = None,
    lock: bool = False,
) -> List[Booking]:
    """
    Restituisce le prenotazioni confermate dal gestore che bloccano la fascia.

    La query seleziona le prenotazioni non cancellate dello stesso campo che
    si sovrappongono all'intervallo; tra queste contano solo quelle con
    manager_confirmed = True. Con lock=True le righe vengono bloccate
    (SELECT ... FOR UPDATE) fino al commit della transazione corrente.
    """
    query = (
        db.query(Booking)
        .filter(Booking.court == court)
        .filter(Booking.status != BookingStatus.CANCELLED)
        .filter(Booking.start_time < end_time)
        .filter(Booking.end_time > start_time)
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)
    if lock:
        query = query.with_for_update()

    overlapping = query.all()
    return [booking for booking in overlapping if booking.manager_confirmed]


def find_court_blocks(
    db: Session, court: str, start_time: datetime, end_time: datetime
) -> List[CourtBlock]:
    """Blocchi del campo che si sovrappongono a [start_time, end_time)"""
    return (
        db.query(CourtBlock)
        .filter(CourtBlock.court == court)
        .filter(CourtBlock.start_time < end_time)
        .filter(CourtBlock.end_time > start_time)
        .order_by(CourtBlock.start_time.asc())
        .all()
    )


def ensure_court_not_blocked(
    db: Session, court: str, start_time: datetime, end_time: datetime
) -> None:
    """Solleva CourtBlockedError se la fascia cade in un blocco del campo."""
    blocks = find_court_blocks(db, court, start_time, end_time)
    if blocks:
        raise CourtBlockedError(
            f"Campo non disponibile: {blocks[0].reason}",
            blocked_ids=[block.id for block in blocks],
        )


def ensure_slot_available(
    db: Session,
    court: str,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: Optional[int] = None,
    lock: bool = False,
) -> None:
    """
    Solleva CourtBlockedError se il campo è bloccato, BookingConflictError
    se la fascia è già occupata da una prenotazione confermata.
    """
    ensure_court_not_blocked(db, court, start_time, end_time)
    conflicts = find_conflicting_bookings(
        db,
        court,
        start_time,
        end_time,
        exclude_booking_id=exclude_booking_id,
        lock=lock,
    )
    if conflicts:
        raise BookingConflictError(
            "Fascia oraria non disponibile",
            conflicting_ids=[booking.id for booking in conflicts],
        )


def get_court_busy_intervals(
    db: Session, court: str, target_date: date
) -> List[Tuple[datetime, datetime]]:
    """
    Intervalli occupati di un campo per una giornata, ordinati per inizio:
    prenotazioni confermate dal gestore e blocchi del campo.
    """
    day_start = datetime.combine(target_date, datetime.min.time())
    day_end = day_start + timedelta(days=1)

    bookings = (
        db.query(Booking)
        .filter(Booking.court == court)
        .filter(Booking.status != BookingStatus.CANCELLED)
        .filter(Booking.manager_confirmed == True)
        .filter(Booking.start_time < day_end)
        .filter(Booking.end_time > day_start)
        .order_by(Booking.start_time.asc())
        .all()
    )
    blocks = find_court_blocks(db, court, day_start, day_end)

    intervals = [(booking.start_time, booking.end_time) for booking in bookings]
    intervals.extend((block.start_time, block.end_time) for block in blocks)
    return sorted(intervals)
