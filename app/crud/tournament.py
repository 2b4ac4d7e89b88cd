from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Dict, List, Optional

from app.enums.tournament import TournamentType
from app.models.tournament import Tournament, TournamentParticipant, TournamentMatch
from app.schemas.tournament import TournamentCreate, TournamentMatchCreate
from app.utils.datetime_utils import utcnow


def get_tournament(db: Session, tournament_id: int, lock: bool = False) -> Optional[Tournament]:
    query = db.query(Tournament).filter(Tournament.id == tournament_id)
    if lock:
        query = query.with_for_update()
    return query.first()


def get_tournaments(
    db: Session,
    upcoming: bool = False,
    tournament_type: Optional[TournamentType] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Tournament]:
    query = db.query(Tournament)
    if upcoming:
        query = query.filter(Tournament.start_date >= utcnow())
    if tournament_type is not None:
        query = query.filter(Tournament.tournament_type == tournament_type)
    return query.order_by(Tournament.start_date.asc()).offset(skip).limit(limit).all()


def create_tournament(
    db: Session, tournament: TournamentCreate, created_by: Optional[int] = None
) -> Tournament:
    db_tournament = Tournament(**tournament.model_dump(), created_by=created_by)
    db.add(db_tournament)
    db.commit()
    db.refresh(db_tournament)
    return db_tournament


def update_tournament(db: Session, db_tournament: Tournament, fields: dict) -> Tournament:
    for key, value in fields.items():
        setattr(db_tournament, key, value)
    db_tournament.updated_at = utcnow()
    db.commit()
    db.refresh(db_tournament)
    return db_tournament


def delete_tournament(db: Session, db_tournament: Tournament) -> None:
    db.delete(db_tournament)
    db.commit()


def count_participants(db: Session, tournament_id: int) -> int:
    return (
        db.query(TournamentParticipant)
        .filter(TournamentParticipant.tournament_id == tournament_id)
        .count()
    )


def count_participants_by_tournament(db: Session, tournament_ids) -> Dict[int, int]:
    """Numero di iscritti per torneo, con un'unica query aggregata"""
    ids = list(tournament_ids)
    if not ids:
        return {}
    rows = (
        db.query(TournamentParticipant.tournament_id, func.count(TournamentParticipant.id))
        .filter(TournamentParticipant.tournament_id.in_(ids))
        .group_by(TournamentParticipant.tournament_id)
        .all()
    )
    return {tournament_id: count for tournament_id, count in rows}


# ---------------------------------------------------------------- iscrizioni


def get_participant(db: Session, participant_id: int) -> Optional[TournamentParticipant]:
    return (
        db.query(TournamentParticipant)
        .filter(TournamentParticipant.id == participant_id)
        .first()
    )


def get_participant_by_user(
    db: Session, tournament_id: int, user_id: int
) -> Optional[TournamentParticipant]:
    return (
        db.query(TournamentParticipant)
        .filter(TournamentParticipant.tournament_id == tournament_id)
        .filter(TournamentParticipant.user_id == user_id)
        .first()
    )


def get_participants(
    db: Session, tournament_id: Optional[int] = None, user_id: Optional[int] = None
) -> List[TournamentParticipant]:
    query = db.query(TournamentParticipant)
    if tournament_id is not None:
        query = query.filter(TournamentParticipant.tournament_id == tournament_id)
    if user_id is not None:
        query = query.filter(TournamentParticipant.user_id == user_id)
    return query.order_by(TournamentParticipant.created_at.asc()).all()


def delete_participant(db: Session, participant: TournamentParticipant) -> None:
    db.delete(participant)
    db.commit()


# ---------------------------------------------------------------- partite


def get_match(db: Session, match_id: int) -> Optional[TournamentMatch]:
    return db.query(TournamentMatch).filter(TournamentMatch.id == match_id).first()


def get_matches(db: Session, tournament_id: int) -> List[TournamentMatch]:
    return (
        db.query(TournamentMatch)
        .filter(TournamentMatch.tournament_id == tournament_id)
        .order_by(TournamentMatch.round_number.asc(), TournamentMatch.id.asc())
        .all()
    )


def create_match(
    db: Session, tournament_id: int, match: TournamentMatchCreate
) -> TournamentMatch:
    db_match = TournamentMatch(tournament_id=tournament_id, **match.model_dump())
    db.add(db_match)
    db.commit()
    db.refresh(db_match)
    return db_match


def update_match(db: Session, db_match: TournamentMatch, fields: dict) -> TournamentMatch:
    for key, value in fields.items():
        setattr(db_match, key, value)
    db_match.updated_at = utcnow()
    db.commit()
    db.refresh(db_match)
    return db_match
