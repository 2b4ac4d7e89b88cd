"""
Iscrizione e disiscrizione ai tornei.

La riga del torneo viene bloccata (SELECT ... FOR UPDATE) prima di contare
gli iscritti, così due iscrizioni concorrenti non superano max_participants.
Il vincolo unico (tournament_id, user_id) impedisce i duplicati.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud import tournament as tournament_crud
from app.enums.tournament import TournamentStatus, ParticipantStatus
from app.models.tournament import TournamentParticipant
from app.utils.exceptions import (
    AlreadyEnrolledError,
    TournamentClosedError,
    TournamentFullError,
    TournamentNotFoundError,
)

logger = logging.getLogger(__name__)

# Stati in cui admin e gestori possono ancora gestire gli iscritti
STAFF_EDITABLE_STATUSES = (
    TournamentStatus.BOZZA,
    TournamentStatus.APERTO,
    TournamentStatus.CHIUSO,
)


def _check_status(tournament, privileged: bool) -> None:
    if tournament.status == TournamentStatus.APERTO:
        return
    if privileged and tournament.status in STAFF_EDITABLE_STATUSES:
        return
    raise TournamentClosedError("Le iscrizioni per questo torneo non sono aperte")


def enroll(
    db: Session, tournament_id: int, user_id: int, privileged: bool = False
) -> TournamentParticipant:
    """
    Iscrive user_id al torneo.

    Raises:
        TournamentNotFoundError: torneo inesistente
        TournamentClosedError: iscrizioni non aperte
        TournamentFullError: posti esauriti
        AlreadyEnrolledError: utente già iscritto
    """
    try:
        tournament = tournament_crud.get_tournament(db, tournament_id, lock=True)
        if not tournament:
            raise TournamentNotFoundError("Torneo non trovato")

        _check_status(tournament, privileged)

        if tournament_crud.get_participant_by_user(db, tournament_id, user_id):
            raise AlreadyEnrolledError("Utente già iscritto a questo torneo")

        current = tournament_crud.count_participants(db, tournament_id)
        if current >= tournament.max_participants:
            raise TournamentFullError("Torneo al completo")

        participant = TournamentParticipant(
            tournament_id=tournament_id,
            user_id=user_id,
            status=ParticipantStatus.ISCRITTO,
        )
        db.add(participant)
        db.commit()
    except (TournamentNotFoundError, TournamentClosedError, TournamentFullError, AlreadyEnrolledError):
        db.rollback()
        raise
    except IntegrityError:
        db.rollback()
        raise AlreadyEnrolledError("Utente già iscritto a questo torneo")

    db.refresh(participant)
    logger.info(
        f"Utente {user_id} iscritto al torneo {tournament_id} ({current + 1}/{tournament.max_participants})"
    )
    return participant


def unenroll(
    db: Session, participant: TournamentParticipant, privileged: bool = False
) -> None:
    """
    Raises:
        TournamentClosedError: iscrizioni non più modificabili
    """
    tournament = tournament_crud.get_tournament(db, participant.tournament_id)
    if tournament is not None:
        _check_status(tournament, privileged)

    tournament_id, user_id = participant.tournament_id, participant.user_id
    tournament_crud.delete_participant(db, participant)
    logger.info(f"Utente {user_id} disiscritto dal torneo {tournament_id}")
