"""
Test della creazione di prenotazioni in lotto: tutte o nessuna.
"""
from datetime import timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.enums.booking import BookingStatus
from app.models.activity_log import ActivityLog
from app.models.booking import Booking
from app.models.court_block import CourtBlock
from app.models.notification import Notification
from app.routers.bookings import create_bookings_batch
from app.schemas.booking import BookingBatchCreate, BookingCreate
from app.utils.datetime_utils import utcnow


def _at(days, hour):
    day = (utcnow() + timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)
    return day + timedelta(hours=hour)


def _weekly(user, weeks, hour=18, court="Campo 1", **kwargs):
    """Una prenotazione alla settimana per `weeks` settimane"""
    return [
        BookingCreate(
            user_id=user.id,
            court=court,
            start_time=_at(3 + 7 * week, hour),
            end_time=_at(3 + 7 * week, hour + 1),
            **kwargs,
        )
        for week in range(weeks)
    ]


def _batch(http_request, db, current_user, bookings):
    return create_bookings_batch(
        request=http_request,
        body=BookingBatchCreate(bookings=bookings),
        db=db,
        current_user=current_user,
    )


def test_weekly_series_is_created(db: Session, admin, atleta, http_request):
    result = _batch(http_request, db, atleta, _weekly(atleta, 4))

    assert result.success is True
    assert result.count == 4
    assert [b.status for b in result.bookings] == [BookingStatus.PENDING] * 4
    assert db.query(Booking).filter(Booking.user_id == atleta.id).count() == 4

    log = db.query(ActivityLog).filter(ActivityLog.action == "booking.batch_create").one()
    assert log.details["booking_ids"] == [b.id for b in result.bookings]
    assert db.query(Notification).filter(Notification.user_id == admin.id).count() == 1


def test_one_conflict_aborts_the_whole_batch(db: Session, admin, atleta, http_request):
    taken = Booking(
        user_id=admin.id,
        court="Campo 1",
        start_time=_at(10, 18),
        end_time=_at(10, 19),
        status=BookingStatus.CONFIRMED,
        manager_confirmed=True,
    )
    db.add(taken)
    db.commit()

    with pytest.raises(HTTPException) as exc_info:
        _batch(http_request, db, atleta, _weekly(atleta, 3))

    assert exc_info.value.status_code == 409
    detail = exc_info.value.detail
    assert detail["conflict"] is True
    assert detail["error"] == "1 slot non disponibili"
    assert [c["index"] for c in detail["conflicts"]] == [1]
    assert detail["conflicts"][0]["conflicting_ids"] == [taken.id]
    assert db.query(Booking).count() == 1


def test_blocked_slot_is_reported_as_conflict(db: Session, admin, atleta, http_request):
    db.add(CourtBlock(court="Campo 1", start_time=_at(3, 0), end_time=_at(4, 0), reason="Torneo sociale"))
    db.commit()

    with pytest.raises(HTTPException) as exc_info:
        _batch(http_request, db, atleta, _weekly(atleta, 2))

    conflicts = exc_info.value.detail["conflicts"]
    assert [c["index"] for c in conflicts] == [0]
    assert "Torneo sociale" in conflicts[0]["error"]
    assert db.query(Booking).count() == 0


def test_confirmed_entries_cannot_overlap_each_other(db: Session, admin, atleta, http_request):
    confirmed = {"status": BookingStatus.CONFIRMED, "manager_confirmed": True}
    bookings = [
        BookingCreate(
            user_id=atleta.id, court="Campo 2", start_time=_at(5, 9), end_time=_at(5, 11), **confirmed
        ),
        BookingCreate(
            user_id=atleta.id, court="Campo 2", start_time=_at(5, 10), end_time=_at(5, 12), **confirmed
        ),
    ]

    with pytest.raises(HTTPException) as exc_info:
        _batch(http_request, db, admin, bookings)

    conflicts = exc_info.value.detail["conflicts"]
    assert [c["index"] for c in conflicts] == [1]
    assert db.query(Booking).count() == 0


def test_pending_entries_may_overlap(db: Session, atleta, http_request):
    bookings = _weekly(atleta, 1, court="Campo 2") + _weekly(atleta, 1, court="Campo 2")
    result = _batch(http_request, db, atleta, bookings)
    assert result.count == 2


def test_athlete_cannot_batch_for_others(db: Session, atleta, other_atleta, http_request):
    bookings = _weekly(atleta, 1) + _weekly(other_atleta, 1, hour=20)

    with pytest.raises(HTTPException) as exc_info:
        _batch(http_request, db, atleta, bookings)
    assert exc_info.value.status_code == 403
    assert db.query(Booking).count() == 0


def test_batch_respects_booking_window(db: Session, atleta, http_request):
    soon = utcnow() + timedelta(hours=2)
    bookings = _weekly(atleta, 1) + [
        BookingCreate(user_id=atleta.id, court="Campo 3", start_time=soon, end_time=soon + timedelta(hours=1))
    ]

    with pytest.raises(HTTPException) as exc_info:
        _batch(http_request, db, atleta, bookings)
    assert exc_info.value.status_code == 400
    assert db.query(Booking).count() == 0


def test_batch_size_is_limited():
    with pytest.raises(ValueError):
        BookingBatchCreate(bookings=[])
