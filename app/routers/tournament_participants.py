from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.crud import profile as profile_crud
from app.crud import tournament as tournament_crud
from app.enums.notification_type import NotificationType
from app.models.profile import Profile
from app.schemas.profile import ProfileSummary
from app.schemas.tournament import (
    EnrollmentRequest,
    ParticipantEnvelope,
    ParticipantsListResponse,
    TournamentParticipantResponse,
)
from app.services.auth import get_current_user
from app.utils.activity import log_activity
from app.utils.exceptions import AcademyError, to_http_exception
from app.utils.notification_utils import create_notification
from app.utils.rate_limiter import rate_limit
from app.utils.roles import can_act_for, is_admin_or_gestore
from app.utils.tournament_enrollment import enroll, unenroll

router = APIRouter()
logger = logging.getLogger(__name__)


def _check_can_act_for(db: Session, current_user: Profile, user_id: int) -> Optional[Profile]:
    target = current_user if user_id == current_user.id else profile_crud.get_profile(db, user_id)
    if not target:
        raise HTTPException(status_code=404, detail="Utente non trovato")
    if not can_act_for(current_user.role, current_user.id, user_id, target.role):
        raise HTTPException(status_code=403, detail="Non autorizzato")
    return target


@router.get("", response_model=ParticipantsListResponse)
def get_participants(
    tournament_id: Optional[int] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """Iscritti con nome ed email del profilo, caricati con un'unica query"""
    participants = tournament_crud.get_participants(db, tournament_id=tournament_id, user_id=user_id)
    profiles = {
        p.id: p
        for p in profile_crud.get_profiles_by_ids(db, [row.user_id for row in participants])
    }

    result = []
    for row in participants:
        item = TournamentParticipantResponse.model_validate(row)
        profile = profiles.get(row.user_id)
        if profile is not None:
            item.profiles = ProfileSummary.model_validate(profile)
        result.append(item)
    return ParticipantsListResponse(participants=result)


@router.post(
    "",
    response_model=ParticipantEnvelope,
    status_code=status.HTTP_201_CREATED,
)
@rate_limit("API_WRITE")
def enroll_participant(
    body: EnrollmentRequest,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """
    Iscrizione a un torneo. Ognuno può iscrivere sé stesso, admin e gestori
    chiunque, un maestro solo gli atleti.
    """
    target = _check_can_act_for(db, current_user, body.user_id)

    try:
        participant = enroll(
            db,
            body.tournament_id,
            body.user_id,
            privileged=is_admin_or_gestore(current_user.role),
        )
    except AcademyError as e:
        logger.info(
            f"Iscrizione di {body.user_id} al torneo {body.tournament_id} rifiutata: {e.message}"
        )
        raise to_http_exception(e)

    tournament = tournament_crud.get_tournament(db, body.tournament_id)
    log_activity(
        db,
        current_user.id,
        "tournament.join",
        entity_type="tournament",
        entity_id=body.tournament_id,
        metadata={"user_id": body.user_id, "participant_id": participant.id},
        request=request,
    )
    create_notification(
        db,
        body.user_id,
        NotificationType.TOURNAMENT,
        "Iscrizione confermata",
        f"Sei iscritto al torneo {tournament.title}",
        link=f"/tournaments/{body.tournament_id}",
    )

    item = TournamentParticipantResponse.model_validate(participant)
    item.profiles = ProfileSummary.model_validate(target)
    return ParticipantEnvelope(participant=item)


@router.delete("")
@rate_limit("API_WRITE")
def unenroll_participant(
    id: Optional[int] = None,
    tournament_id: Optional[int] = None,
    user_id: Optional[int] = None,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """Disiscrizione per ?id= oppure ?tournament_id=&user_id="""
    if id is not None:
        participant = tournament_crud.get_participant(db, id)
    elif tournament_id is not None and user_id is not None:
        participant = tournament_crud.get_participant_by_user(db, tournament_id, user_id)
    else:
        raise HTTPException(
            status_code=400, detail="Specificare id oppure tournament_id e user_id"
        )

    if not participant:
        raise HTTPException(status_code=404, detail="Iscrizione non trovata")

    _check_can_act_for(db, current_user, participant.user_id)

    tournament_id, user_id = participant.tournament_id, participant.user_id
    try:
        unenroll(db, participant, privileged=is_admin_or_gestore(current_user.role))
    except AcademyError as e:
        raise to_http_exception(e)

    log_activity(
        db,
        current_user.id,
        "tournament.leave",
        entity_type="tournament",
        entity_id=tournament_id,
        metadata={"user_id": user_id},
        request=request,
    )
    return {"success": True}
