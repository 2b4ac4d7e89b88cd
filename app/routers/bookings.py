from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
import logging

from app.database import get_db
from app.crud import booking as crud
from app.crud import profile as profile_crud
from app.enums.booking import BookingStatus
from app.enums.notification_type import NotificationType
from app.models.profile import Profile
from app.schemas.booking import (
    BookingBatchCreate,
    BookingBatchResponse,
    BookingCreate,
    BookingUpdate,
    BookingEnvelope,
    BookingResponse,
    BookingsListResponse,
    CourtAvailabilityResponse,
)
from app.services import email_templates
from app.services.auth import get_current_user
from app.services.email import email_service
from app.utils.activity import log_activity
from app.utils.booking_conflicts import get_court_busy_intervals, validate_booking_window
from app.utils.exceptions import AcademyError, to_http_exception
from app.utils.notification_utils import create_notification, notify_admins
from app.utils.rate_limiter import rate_limit
from app.utils.roles import is_admin_or_gestore, is_coach, is_staff
from app.utils.sanitize import sanitize_text

router = APIRouter()
logger = logging.getLogger(__name__)

# Campi che il maestro assegnato può modificare
COACH_EDITABLE_FIELDS = {"coach_confirmed", "notes"}


def _can_view(current_user: Profile, booking) -> bool:
    return (
        is_staff(current_user.role)
        or booking.user_id == current_user.id
        or booking.coach_id == current_user.id
    )


def _check_references(db: Session, coach_id=None, participant_user_ids=()) -> None:
    """Maestro e partecipanti registrati devono esistere: 400 altrimenti"""
    if coach_id is not None:
        coach = profile_crud.get_profile(db, coach_id)
        if not coach or not is_coach(coach.role):
            raise HTTPException(status_code=400, detail="Maestro non valido")

    user_ids = {user_id for user_id in participant_user_ids if user_id is not None}
    if user_ids:
        found = {profile.id for profile in profile_crud.get_profiles_by_ids(db, user_ids)}
        missing = sorted(user_ids - found)
        if missing:
            raise HTTPException(
                status_code=400,
                detail=f"Partecipanti non trovati: {', '.join(str(user_id) for user_id in missing)}",
            )


@router.get("/availability", response_model=CourtAvailabilityResponse)
def get_court_availability(
    court: str,
    date: date,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """Fasce occupate (prenotazioni confermate) di un campo in una giornata"""
    court = sanitize_text(court)
    if not court:
        raise HTTPException(status_code=400, detail="Campo obbligatorio")

    busy = get_court_busy_intervals(db, court, date)
    return {
        "court": court,
        "date": date.isoformat(),
        "busy": [{"start_time": start, "end_time": end} for start, end in busy],
    }


@router.get("")
def get_bookings(
    id: Optional[int] = None,
    user_id: Optional[int] = None,
    coach_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """
    Con ?id= restituisce {"booking": ...}, altrimenti {"bookings": [...]}
    filtrati per user_id e coach_id. Gli atleti vedono solo le proprie
    prenotazioni.
    """
    if id is not None:
        booking = crud.get_booking(db, id)
        if not booking:
            raise HTTPException(status_code=404, detail="Prenotazione non trovata")
        if not _can_view(current_user, booking):
            raise HTTPException(status_code=403, detail="Non autorizzato")
        return BookingEnvelope(booking=BookingResponse.model_validate(booking))

    if not is_staff(current_user.role):
        if user_id is not None and user_id != current_user.id:
            raise HTTPException(status_code=403, detail="Non autorizzato")
        user_id = current_user.id

    bookings = crud.get_bookings(db, user_id=user_id, coach_id=coach_id)
    return BookingsListResponse(
        bookings=[BookingResponse.model_validate(booking) for booking in bookings]
    )


@router.post(
    "",
    response_model=BookingEnvelope,
    status_code=status.HTTP_201_CREATED,
)
@rate_limit("API_WRITE")
def create_booking(
    booking: BookingCreate,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """
    Crea una prenotazione.

    - l'utente può prenotare solo per sé, admin/gestore per chiunque
    - senza privilegi serve almeno 24 ore di anticipo
    - una fascia già confermata dal gestore sullo stesso campo restituisce 409
    """
    privileged = is_admin_or_gestore(current_user.role)
    if booking.user_id != current_user.id and not privileged:
        raise HTTPException(
            status_code=403, detail="Non puoi creare prenotazioni per altri utenti"
        )

    owner = current_user if booking.user_id == current_user.id else profile_crud.get_profile(db, booking.user_id)
    if not owner:
        raise HTTPException(status_code=404, detail="Utente non trovato")

    _check_references(db, booking.coach_id, [p.user_id for p in booking.participants])

    try:
        validate_booking_window(booking.start_time, booking.end_time, privileged)
        db_booking = crud.create_booking(db, booking, privileged=privileged)
    except AcademyError as e:
        logger.info(f"Prenotazione rifiutata per l'utente {booking.user_id}: {e.message}")
        raise to_http_exception(e)

    logger.info(
        f"✅ Prenotazione {db_booking.id} creata: {db_booking.court} "
        f"{db_booking.start_time:%Y-%m-%d %H:%M}-{db_booking.end_time:%H:%M} (utente {db_booking.user_id})"
    )

    notify_admins(
        db,
        NotificationType.BOOKING,
        "Nuova prenotazione",
        f"{owner.full_name} ha prenotato {db_booking.court} il "
        f"{db_booking.start_time:%d/%m/%Y} alle {db_booking.start_time:%H:%M}",
        link="/dashboard/admin/bookings",
    )
    log_activity(
        db,
        current_user.id,
        "booking.create",
        entity_type="booking",
        entity_id=db_booking.id,
        metadata={
            "court": db_booking.court,
            "type": db_booking.type.value,
            "start_time": db_booking.start_time.isoformat(),
        },
        request=request,
    )
    email_service.send_email(
        db,
        owner.email,
        "Prenotazione ricevuta - GST Tennis Academy",
        email_templates.booking_confirmation(owner.full_name, db_booking),
        template_name="booking_confirmation",
        recipient_user_id=owner.id,
        recipient_name=owner.full_name,
    )

    return BookingEnvelope(booking=BookingResponse.model_validate(db_booking))


@router.post(
    "/batch",
    response_model=BookingBatchResponse,
    status_code=status.HTTP_201_CREATED,
)
@rate_limit("API_WRITE")
def create_bookings_batch(
    body: BookingBatchCreate,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """
    Crea più prenotazioni (es. una serie settimanale) in modo atomico.
    Se anche una sola fascia non è disponibile restituisce 409 con l'elenco
    dei conflitti e non crea nulla.
    """
    privileged = is_admin_or_gestore(current_user.role)
    owner_ids = {booking.user_id for booking in body.bookings}
    if not privileged and owner_ids != {current_user.id}:
        raise HTTPException(
            status_code=403, detail="Non puoi creare prenotazioni per altri utenti"
        )

    owners = {profile.id: profile for profile in profile_crud.get_profiles_by_ids(db, owner_ids)}
    if len(owners) != len(owner_ids):
        raise HTTPException(status_code=404, detail="Utente non trovato")
    for booking in body.bookings:
        _check_references(db, booking.coach_id, [p.user_id for p in booking.participants])

    try:
        for booking in body.bookings:
            validate_booking_window(booking.start_time, booking.end_time, privileged)
        db_bookings = crud.create_bookings_batch(db, body.bookings, privileged=privileged)
    except AcademyError as e:
        logger.info(f"Lotto di prenotazioni rifiutato per {current_user.id}: {e.message}")
        raise to_http_exception(e)

    ids = [db_booking.id for db_booking in db_bookings]
    logger.info(f"✅ {len(ids)} prenotazioni create in lotto da {current_user.id}: {ids}")

    notify_admins(
        db,
        NotificationType.BOOKING,
        "Nuove prenotazioni",
        f"{current_user.full_name} ha creato {len(ids)} prenotazioni",
        link="/dashboard/admin/bookings",
    )
    log_activity(
        db,
        current_user.id,
        "booking.batch_create",
        entity_type="booking",
        metadata={"booking_ids": ids},
        request=request,
    )

    crud.attach_participants(db, db_bookings)
    return BookingBatchResponse(
        bookings=[BookingResponse.model_validate(db_booking) for db_booking in db_bookings],
        count=len(db_bookings),
    )


@router.put(
    "",
    response_model=BookingEnvelope,
)
@rate_limit("API_WRITE")
def update_booking(
    id: int,
    update: BookingUpdate,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    booking = crud.get_booking(db, id)
    if not booking:
        raise HTTPException(status_code=404, detail="Prenotazione non trovata")

    fields = update.model_dump(exclude_unset=True)
    privileged = is_admin_or_gestore(current_user.role)
    is_owner = booking.user_id == current_user.id
    is_assigned_coach = booking.coach_id is not None and booking.coach_id == current_user.id

    if not (privileged or is_owner or is_assigned_coach):
        raise HTTPException(status_code=403, detail="Non autorizzato")
    if not privileged:
        if is_owner:
            # Il proprietario non può confermare la propria prenotazione
            forbidden = fields.keys() & {"manager_confirmed", "coach_confirmed"}
            if fields.get("status") not in (None, BookingStatus.CANCELLED):
                forbidden = forbidden | {"status"}
            if is_assigned_coach:
                forbidden = forbidden - {"coach_confirmed"}
        else:
            forbidden = fields.keys() - COACH_EDITABLE_FIELDS
        if forbidden:
            raise HTTPException(
                status_code=403,
                detail=f"Non puoi modificare: {', '.join(sorted(forbidden))}",
            )

    for key in ("court", "start_time", "end_time", "type"):
        if key in fields and fields[key] is None:
            raise HTTPException(status_code=400, detail=f"{key} non può essere vuoto")
    if fields.get("coach_id") is not None:
        _check_references(db, coach_id=fields["coach_id"])

    start_time = fields.get("start_time", booking.start_time)
    end_time = fields.get("end_time", booking.end_time)
    try:
        if "start_time" in fields or "end_time" in fields:
            validate_booking_window(start_time, end_time, privileged)
        was_confirmed = booking.manager_confirmed
        previous_status = booking.status
        booking = crud.update_booking(db, booking, fields)
    except AcademyError as e:
        raise to_http_exception(e)

    logger.info(f"Prenotazione {booking.id} aggiornata da {current_user.id}: {sorted(fields)}")

    if booking.status == BookingStatus.CANCELLED and previous_status != BookingStatus.CANCELLED:
        log_activity(
            db,
            current_user.id,
            "booking.cancel",
            entity_type="booking",
            entity_id=booking.id,
            request=request,
        )
    if booking.manager_confirmed and not was_confirmed:
        log_activity(
            db,
            current_user.id,
            "booking.confirm",
            entity_type="booking",
            entity_id=booking.id,
            request=request,
        )
        create_notification(
            db,
            booking.user_id,
            NotificationType.BOOKING,
            "Prenotazione confermata",
            f"La tua prenotazione su {booking.court} del "
            f"{booking.start_time:%d/%m/%Y} alle {booking.start_time:%H:%M} è stata confermata",
            link="/dashboard/atleta/bookings",
        )

    return BookingEnvelope(booking=BookingResponse.model_validate(booking))


@router.delete("")
@rate_limit("API_WRITE")
def delete_booking(
    id: int,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    booking = crud.get_booking(db, id)
    if not booking:
        raise HTTPException(status_code=404, detail="Prenotazione non trovata")
    if booking.user_id != current_user.id and not is_admin_or_gestore(current_user.role):
        raise HTTPException(status_code=403, detail="Non autorizzato")

    crud.delete_booking(db, booking)
    logger.info(f"Prenotazione {id} eliminata da {current_user.id}")
    log_activity(
        db,
        current_user.id,
        "booking.delete",
        entity_type="booking",
        entity_id=id,
        request=request,
    )
    return {"success": True}
