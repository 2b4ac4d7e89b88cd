from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.crud import tournament as crud
from app.enums.tournament import TournamentStatus, TournamentType
from app.models.profile import Profile
from app.schemas.tournament import (
    TournamentCreate,
    TournamentUpdate,
    TournamentResponse,
    TournamentWithCount,
    TournamentEnvelope,
    TournamentsListResponse,
    TournamentMatchCreate,
    TournamentMatchUpdate,
    TournamentMatchResponse,
    MatchEnvelope,
    MatchesListResponse,
    VALID_BRACKET_SIZES,
    MIN_GROUP_SIZE,
)
from app.services.auth import get_current_user, require_admin_or_gestore
from app.utils.activity import log_activity
from app.utils.rate_limiter import rate_limit

router = APIRouter()
logger = logging.getLogger(__name__)

# Colonne NOT NULL: un null esplicito nel PUT è rifiutato
NON_NULLABLE_FIELDS = ("title", "start_date", "max_participants", "status")


def _get_tournament_or_404(db: Session, tournament_id: int):
    tournament = crud.get_tournament(db, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Torneo non trovato")
    return tournament


@router.get("")
def get_tournaments(
    id: Optional[int] = None,
    upcoming: bool = False,
    tournament_type: Optional[TournamentType] = None,
    db: Session = Depends(get_db),
):
    """
    Con ?id= restituisce il torneo e il numero di iscritti,
    altrimenti la lista ordinata per data di inizio.
    """
    if id is not None:
        tournament = _get_tournament_or_404(db, id)
        return TournamentEnvelope(
            tournament=TournamentResponse.model_validate(tournament),
            current_participants=crud.count_participants(db, id),
        )

    tournaments = crud.get_tournaments(db, upcoming=upcoming, tournament_type=tournament_type)
    counts = crud.count_participants_by_tournament(db, [t.id for t in tournaments])
    return TournamentsListResponse(
        tournaments=[
            TournamentWithCount(
                **TournamentResponse.model_validate(t).model_dump(),
                current_participants=counts.get(t.id, 0),
            )
            for t in tournaments
        ]
    )


@router.post(
    "",
    response_model=TournamentEnvelope,
    status_code=status.HTTP_201_CREATED,
)
@rate_limit("API_WRITE")
def create_tournament(
    tournament: TournamentCreate,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    db_tournament = crud.create_tournament(db, tournament, created_by=current_user.id)
    logger.info(
        f"🏆 Torneo {db_tournament.id} '{db_tournament.title}' creato da {current_user.id}"
    )
    log_activity(
        db,
        current_user.id,
        "tournament.create",
        entity_type="tournament",
        entity_id=db_tournament.id,
        metadata={"title": db_tournament.title, "type": db_tournament.tournament_type.value},
        request=request,
    )
    return TournamentEnvelope(
        tournament=TournamentResponse.model_validate(db_tournament),
        current_participants=0,
    )


@router.put(
    "",
    response_model=TournamentEnvelope,
)
@rate_limit("API_WRITE")
def update_tournament(
    id: int,
    update: TournamentUpdate,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    tournament = _get_tournament_or_404(db, id)
    fields = update.model_dump(exclude_unset=True)

    for key in NON_NULLABLE_FIELDS:
        if key in fields and fields[key] in (None, ""):
            raise HTTPException(status_code=400, detail=f"{key} non può essere vuoto")

    if "max_participants" in fields:
        max_participants = fields["max_participants"]
        current = crud.count_participants(db, id)
        if max_participants < current:
            raise HTTPException(
                status_code=400,
                detail=f"Ci sono già {current} iscritti, impossibile ridurre i posti a {max_participants}",
            )
        if (
            tournament.tournament_type == TournamentType.ELIMINAZIONE_DIRETTA
            and max_participants not in VALID_BRACKET_SIZES
        ):
            raise HTTPException(
                status_code=400,
                detail="Numero di partecipanti non valido per eliminazione diretta",
            )
        if (
            tournament.tournament_type != TournamentType.ELIMINAZIONE_DIRETTA
            and max_participants < MIN_GROUP_SIZE
        ):
            raise HTTPException(
                status_code=400,
                detail=f"Servono almeno {MIN_GROUP_SIZE} partecipanti",
            )

    previous_status = tournament.status
    tournament = crud.update_tournament(db, tournament, fields)
    logger.info(f"Torneo {id} aggiornato da {current_user.id}: {sorted(fields)}")

    if tournament.status != previous_status:
        log_activity(
            db,
            current_user.id,
            "tournament.status_change",
            entity_type="tournament",
            entity_id=id,
            metadata={"from": previous_status.value, "to": tournament.status.value},
            request=request,
        )

    return TournamentEnvelope(
        tournament=TournamentResponse.model_validate(tournament),
        current_participants=crud.count_participants(db, id),
    )


@router.delete("")
@rate_limit("API_WRITE")
def delete_tournament(
    id: int,
    request: Request = None,
    response: Response = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    tournament = _get_tournament_or_404(db, id)
    title = tournament.title
    crud.delete_tournament(db, tournament)
    logger.info(f"Torneo {id} eliminato da {current_user.id}")
    log_activity(
        db,
        current_user.id,
        "tournament.delete",
        entity_type="tournament",
        entity_id=id,
        metadata={"title": title},
        request=request,
    )
    return {"success": True}


# ---------------------------------------------------------------- partite


@router.get("/{tournament_id}/matches", response_model=MatchesListResponse)
def get_matches(tournament_id: int, db: Session = Depends(get_db)):
    _get_tournament_or_404(db, tournament_id)
    matches = crud.get_matches(db, tournament_id)
    return MatchesListResponse(
        matches=[TournamentMatchResponse.model_validate(m) for m in matches]
    )


@router.post(
    "/{tournament_id}/matches",
    response_model=MatchEnvelope,
    status_code=status.HTTP_201_CREATED,
)
def create_match(
    tournament_id: int,
    match: TournamentMatchCreate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    """Registra una partita; il tabellone viene composto da admin e gestori."""
    _get_tournament_or_404(db, tournament_id)

    for player_id in (match.player1_id, match.player2_id):
        if player_id is not None and not crud.get_participant_by_user(
            db, tournament_id, player_id
        ):
            raise HTTPException(
                status_code=400,
                detail=f"L'utente {player_id} non è iscritto al torneo",
            )

    db_match = crud.create_match(db, tournament_id, match)
    logger.info(f"Partita {db_match.id} creata nel torneo {tournament_id}")
    return MatchEnvelope(match=TournamentMatchResponse.model_validate(db_match))


@router.put("/matches/{match_id}", response_model=MatchEnvelope)
def update_match(
    match_id: int,
    update: TournamentMatchUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    db_match = crud.get_match(db, match_id)
    if not db_match:
        raise HTTPException(status_code=404, detail="Partita non trovata")

    fields = update.model_dump(exclude_unset=True)
    winner_id = fields.get("winner_id")
    if winner_id is not None and winner_id not in (db_match.player1_id, db_match.player2_id):
        raise HTTPException(
            status_code=400, detail="Il vincitore deve essere uno dei due giocatori"
        )

    db_match = crud.update_match(db, db_match, fields)
    logger.info(f"Partita {match_id} aggiornata da {current_user.id}: {sorted(fields)}")
    return MatchEnvelope(match=TournamentMatchResponse.model_validate(db_match))
