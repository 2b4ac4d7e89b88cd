"""
Test delle iscrizioni ai tornei e della gestione delle partite
"""
from datetime import timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.crud import tournament as tournament_crud
from app.enums.tournament import TournamentStatus, TournamentType
from app.enums.user_role import UserRole
from app.models.activity_log import ActivityLog
from app.models.notification import Notification
from app.routers.tournament_participants import (
    enroll_participant,
    get_participants,
    unenroll_participant,
)
from app.routers.tournaments import (
    create_match,
    get_tournaments,
    update_match,
    update_tournament,
)
from app.schemas.tournament import (
    EnrollmentRequest,
    TournamentCreate,
    TournamentMatchCreate,
    TournamentMatchUpdate,
    TournamentUpdate,
)
from app.utils.datetime_utils import utcnow
from app.utils.exceptions import (
    AlreadyEnrolledError,
    TournamentClosedError,
    TournamentFullError,
    TournamentNotFoundError,
)
from app.utils.tournament_enrollment import enroll, unenroll


def test_enroll_and_count(db: Session, open_tournament, atleta):
    participant = enroll(db, open_tournament.id, atleta.id)

    assert participant.user_id == atleta.id
    assert tournament_crud.count_participants(db, open_tournament.id) == 1


def test_duplicate_enrollment_is_rejected(db: Session, open_tournament, atleta):
    enroll(db, open_tournament.id, atleta.id)

    with pytest.raises(AlreadyEnrolledError):
        enroll(db, open_tournament.id, atleta.id)
    assert tournament_crud.count_participants(db, open_tournament.id) == 1


def test_full_tournament_rejects_ninth_player(db: Session, open_tournament, make_profile):
    for _ in range(8):
        enroll(db, open_tournament.id, make_profile().id)
    assert tournament_crud.count_participants(db, open_tournament.id) == 8

    with pytest.raises(TournamentFullError):
        enroll(db, open_tournament.id, make_profile().id)
    assert tournament_crud.count_participants(db, open_tournament.id) == 8


def test_closed_tournament_rejects_athletes(db: Session, open_tournament, atleta):
    open_tournament.status = TournamentStatus.CHIUSO
    db.commit()

    with pytest.raises(TournamentClosedError):
        enroll(db, open_tournament.id, atleta.id)


def test_staff_can_still_enroll_in_closed_tournament(db: Session, open_tournament, atleta):
    open_tournament.status = TournamentStatus.CHIUSO
    db.commit()

    participant = enroll(db, open_tournament.id, atleta.id, privileged=True)
    assert participant.tournament_id == open_tournament.id


@pytest.mark.parametrize(
    "status", [TournamentStatus.IN_CORSO, TournamentStatus.COMPLETATO, TournamentStatus.ANNULLATO]
)
def test_nobody_enrolls_once_tournament_started(db: Session, open_tournament, atleta, status):
    open_tournament.status = status
    db.commit()

    with pytest.raises(TournamentClosedError):
        enroll(db, open_tournament.id, atleta.id, privileged=True)


def test_unknown_tournament(db: Session, atleta):
    with pytest.raises(TournamentNotFoundError):
        enroll(db, 999, atleta.id)


def test_unenroll_requires_open_registrations(db: Session, open_tournament, atleta):
    participant = enroll(db, open_tournament.id, atleta.id)
    open_tournament.status = TournamentStatus.IN_CORSO
    db.commit()

    with pytest.raises(TournamentClosedError):
        unenroll(db, participant)
    assert tournament_crud.count_participants(db, open_tournament.id) == 1


def test_router_enrollment_logs_and_notifies(db: Session, open_tournament, atleta, http_request):
    result = enroll_participant(
        request=http_request,
        body=EnrollmentRequest(tournament_id=open_tournament.id, user_id=atleta.id),
        db=db,
        current_user=atleta,
    )

    assert result.participant.profiles.full_name == "Alice Atleta"
    assert db.query(ActivityLog).filter(ActivityLog.action == "tournament.join").count() == 1
    notification = db.query(Notification).filter(Notification.user_id == atleta.id).one()
    assert open_tournament.title in notification.message


def test_router_duplicate_enrollment_returns_409(db: Session, open_tournament, atleta, http_request):
    body = EnrollmentRequest(tournament_id=open_tournament.id, user_id=atleta.id)
    enroll_participant(request=http_request, body=body, db=db, current_user=atleta)

    with pytest.raises(HTTPException) as exc_info:
        enroll_participant(request=http_request, body=body, db=db, current_user=atleta)
    assert exc_info.value.status_code == 409


def test_athlete_cannot_enroll_someone_else(db: Session, open_tournament, atleta, other_atleta, http_request):
    with pytest.raises(HTTPException) as exc_info:
        enroll_participant(
            request=http_request,
            body=EnrollmentRequest(tournament_id=open_tournament.id, user_id=other_atleta.id),
            db=db,
            current_user=atleta,
        )
    assert exc_info.value.status_code == 403


def test_maestro_enrolls_only_athletes(db: Session, open_tournament, maestro, atleta, make_profile, http_request):
    enroll_participant(
        request=http_request,
        body=EnrollmentRequest(tournament_id=open_tournament.id, user_id=atleta.id),
        db=db,
        current_user=maestro,
    )

    other_maestro = make_profile(role=UserRole.MAESTRO)
    with pytest.raises(HTTPException) as exc_info:
        enroll_participant(
            request=http_request,
            body=EnrollmentRequest(tournament_id=open_tournament.id, user_id=other_maestro.id),
            db=db,
            current_user=maestro,
        )
    assert exc_info.value.status_code == 403


def test_unenroll_by_tournament_and_user(db: Session, open_tournament, atleta, http_request):
    enroll(db, open_tournament.id, atleta.id)

    result = unenroll_participant(
        request=http_request,
        tournament_id=open_tournament.id, user_id=atleta.id, db=db, current_user=atleta
    )
    assert result == {"success": True}
    assert tournament_crud.count_participants(db, open_tournament.id) == 0
    assert db.query(ActivityLog).filter(ActivityLog.action == "tournament.leave").count() == 1


def test_participants_include_profile_summary(db: Session, open_tournament, atleta, other_atleta):
    enroll(db, open_tournament.id, atleta.id)
    enroll(db, open_tournament.id, other_atleta.id)

    result = get_participants(tournament_id=open_tournament.id, db=db, current_user=atleta)
    assert {p.profiles.email for p in result.participants} == {atleta.email, other_atleta.email}


def test_list_includes_participant_counts(db: Session, open_tournament, atleta):
    enroll(db, open_tournament.id, atleta.id)

    result = get_tournaments(db=db)
    assert result.tournaments[0].current_participants == 1

    single = get_tournaments(id=open_tournament.id, db=db)
    assert single.current_participants == 1


def test_bracket_size_validation():
    start = utcnow() + timedelta(days=7)
    with pytest.raises(ValueError):
        TournamentCreate(title="Open estivo", start_date=start, max_participants=10)

    TournamentCreate(title="Open estivo", start_date=start, max_participants=16)
    TournamentCreate(
        title="Campionato sociale",
        start_date=start,
        max_participants=10,
        tournament_type=TournamentType.CAMPIONATO,
    )


def test_cannot_shrink_below_current_participants(db: Session, open_tournament, admin, make_profile, http_request):
    for _ in range(5):
        enroll(db, open_tournament.id, make_profile().id)

    with pytest.raises(HTTPException) as exc_info:
        update_tournament(
            request=http_request,
            id=open_tournament.id,
            update=TournamentUpdate(max_participants=4),
            db=db,
            current_user=admin,
        )
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize("field", ["title", "max_participants", "start_date", "status"])
def test_explicit_null_on_required_field_is_rejected(db: Session, open_tournament, admin, field, http_request):
    with pytest.raises(HTTPException) as exc_info:
        update_tournament(
            request=http_request,
            id=open_tournament.id,
            update=TournamentUpdate(**{field: None}),
            db=db,
            current_user=admin,
        )
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == f"{field} non può essere vuoto"

    db.refresh(open_tournament)
    assert open_tournament.max_participants == 8


def test_put_with_null_returns_400_not_500(client, db: Session, open_tournament, admin, auth_headers):
    response = client.put(
        f"/api/tournaments?id={open_tournament.id}",
        json={"max_participants": None, "title": None},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400
    assert "non può essere vuoto" in response.json()["error"]


def test_status_change_is_logged(db: Session, open_tournament, admin, http_request):
    result = update_tournament(
        request=http_request,
        id=open_tournament.id,
        update=TournamentUpdate(status=TournamentStatus.CHIUSO),
        db=db,
        current_user=admin,
    )
    assert result.tournament.status == TournamentStatus.CHIUSO

    log = db.query(ActivityLog).filter(ActivityLog.action == "tournament.status_change").one()
    assert log.details == {"from": "Aperto", "to": "Chiuso"}


def test_matches_require_enrolled_players(db: Session, open_tournament, admin, atleta, other_atleta):
    with pytest.raises(HTTPException) as exc_info:
        create_match(
            tournament_id=open_tournament.id,
            match=TournamentMatchCreate(player1_id=atleta.id, player2_id=other_atleta.id),
            db=db,
            current_user=admin,
        )
    assert exc_info.value.status_code == 400

    enroll(db, open_tournament.id, atleta.id)
    enroll(db, open_tournament.id, other_atleta.id)
    result = create_match(
        tournament_id=open_tournament.id,
        match=TournamentMatchCreate(round_name="Quarti", player1_id=atleta.id, player2_id=other_atleta.id),
        db=db,
        current_user=admin,
    )
    match_id = result.match.id

    with pytest.raises(HTTPException) as exc_info:
        update_match(match_id=match_id, update=TournamentMatchUpdate(winner_id=admin.id), db=db, current_user=admin)
    assert exc_info.value.status_code == 400

    updated = update_match(
        match_id=match_id,
        update=TournamentMatchUpdate(
            winner_id=atleta.id,
            status="completed",
            sets=[{"player1": 6, "player2": 4}, {"player1": 6, "player2": 3}],
        ),
        db=db,
        current_user=admin,
    )
    assert updated.match.winner_id == atleta.id
    assert updated.match.sets == [{"player1": 6, "player2": 4}, {"player1": 6, "player2": 3}]
