"""
Test dei blocchi dei campi.

Valida:
1. Un blocco non può coprire prenotazioni non cancellate (409)
2. Un campo bloccato rifiuta nuove prenotazioni, anche dell'admin
3. I blocchi compaiono tra gli intervalli occupati del campo
4. Solo admin e gestori gestiscono i blocchi
"""
from datetime import timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.enums.booking import BookingStatus
from app.models.activity_log import ActivityLog
from app.models.booking import Booking
from app.models.court_block import CourtBlock
from app.routers.bookings import create_booking, get_court_availability, update_booking
from app.routers.court_blocks import create_court_block, delete_court_block, get_court_blocks
from app.schemas.booking import BookingCreate, BookingUpdate
from app.schemas.court_block import CourtBlockCreate
from app.utils.datetime_utils import utcnow


def _day():
    return (utcnow() + timedelta(days=3)).replace(hour=0, minute=0, second=0, microsecond=0)


def _at(hour, minute=0):
    return _day() + timedelta(hours=hour, minutes=minute)


@pytest.fixture
def maintenance_block(db: Session, gestore):
    """Campo 1 bloccato dalle 8:00 alle 12:00"""
    block = CourtBlock(
        court="Campo 1",
        start_time=_at(8),
        end_time=_at(12),
        reason="Manutenzione",
        created_by=gestore.id,
    )
    db.add(block)
    db.commit()
    db.refresh(block)
    return block


def test_create_block_logs_activity(db: Session, gestore, http_request):
    result = create_court_block(
        request=http_request,
        block=CourtBlockCreate(court="Campo 2", start_time=_at(8), end_time=_at(10), reason="Torneo"),
        db=db,
        current_user=gestore,
    )

    assert result.block.court == "Campo 2"
    assert result.block.reason == "Torneo"
    assert result.block.created_by_name == "Giulio Gestore"
    log = db.query(ActivityLog).filter(ActivityLog.action == "court_block.create").one()
    assert log.entity_id == str(result.block.id)


def test_block_without_reason_gets_default(db: Session, admin, http_request):
    result = create_court_block(
        request=http_request,
        block=CourtBlockCreate(court="Campo 3", start_time=_at(8), end_time=_at(9)),
        db=db,
        current_user=admin,
    )
    assert result.block.reason == "Blocco manuale"


def test_block_over_existing_booking_returns_409(db: Session, admin, atleta, http_request):
    # anche una prenotazione in attesa impedisce il blocco
    pending = Booking(user_id=atleta.id, court="Campo 1", start_time=_at(9), end_time=_at(10))
    cancelled = Booking(
        user_id=atleta.id,
        court="Campo 1",
        start_time=_at(10),
        end_time=_at(11),
        status=BookingStatus.CANCELLED,
    )
    db.add_all([pending, cancelled])
    db.commit()

    with pytest.raises(HTTPException) as exc_info:
        create_court_block(
            request=http_request,
            block=CourtBlockCreate(court="Campo 1", start_time=_at(8), end_time=_at(12)),
            db=db,
            current_user=admin,
        )
    assert exc_info.value.status_code == 409
    assert exc_info.value.detail["conflicting_ids"] == [pending.id]
    assert db.query(CourtBlock).count() == 0


def test_blocked_court_rejects_new_bookings(db: Session, admin, atleta, maintenance_block, http_request):
    for user in (atleta, admin):
        with pytest.raises(HTTPException) as exc_info:
            create_booking(
                request=http_request,
                booking=BookingCreate(
                    user_id=user.id, court="Campo 1", start_time=_at(11), end_time=_at(13)
                ),
                db=db,
                current_user=user,
            )
        assert exc_info.value.status_code == 409
        assert exc_info.value.detail["conflict"] is True
        assert exc_info.value.detail["blocked_ids"] == [maintenance_block.id]
        assert "Manutenzione" in exc_info.value.detail["error"]

    assert db.query(Booking).count() == 0

    # subito dopo il blocco il campo è libero
    result = create_booking(
        request=http_request,
        booking=BookingCreate(user_id=atleta.id, court="Campo 1", start_time=_at(12), end_time=_at(13)),
        db=db,
        current_user=atleta,
    )
    assert result.booking.start_time == _at(12)


def test_booking_cannot_move_into_blocked_slot(db: Session, admin, atleta, maintenance_block, http_request):
    booking = Booking(user_id=atleta.id, court="Campo 2", start_time=_at(9), end_time=_at(10))
    db.add(booking)
    db.commit()

    with pytest.raises(HTTPException) as exc_info:
        update_booking(
            request=http_request,
            id=booking.id,
            update=BookingUpdate(court="Campo 1"),
            db=db,
            current_user=admin,
        )
    assert exc_info.value.status_code == 409
    db.refresh(booking)
    assert booking.court == "Campo 2"


def test_availability_includes_blocks(db: Session, admin, atleta, maintenance_block):
    db.add(
        Booking(
            user_id=admin.id,
            court="Campo 1",
            start_time=_at(14),
            end_time=_at(15),
            status=BookingStatus.CONFIRMED,
            manager_confirmed=True,
        )
    )
    db.commit()

    result = get_court_availability(court="Campo 1", date=_day().date(), db=db, current_user=atleta)
    assert result["busy"] == [
        {"start_time": _at(8), "end_time": _at(12)},
        {"start_time": _at(14), "end_time": _at(15)},
    ]


def test_list_blocks_with_creator_name(db: Session, atleta, maintenance_block):
    db.add(CourtBlock(court="Campo 2", start_time=_at(7), end_time=_at(8)))
    db.commit()

    everything = get_court_blocks(db=db, current_user=atleta)
    assert [b.court for b in everything.blocks] == ["Campo 2", "Campo 1"]
    assert everything.blocks[0].created_by_name is None
    assert everything.blocks[1].created_by_name == "Giulio Gestore"

    only_court_1 = get_court_blocks(court="Campo 1", db=db, current_user=atleta)
    assert [b.id for b in only_court_1.blocks] == [maintenance_block.id]

    later = get_court_blocks(date_from=_at(13), db=db, current_user=atleta)
    assert later.blocks == []


def test_delete_block_frees_the_court(db: Session, admin, atleta, maintenance_block, http_request):
    result = delete_court_block(id=maintenance_block.id, db=db, current_user=admin)
    assert result == {"success": True}
    assert db.query(CourtBlock).count() == 0
    assert db.query(ActivityLog).filter(ActivityLog.action == "court_block.delete").count() == 1

    booking = create_booking(
        request=http_request,
        booking=BookingCreate(user_id=atleta.id, court="Campo 1", start_time=_at(9), end_time=_at(10)),
        db=db,
        current_user=atleta,
    )
    assert booking.booking.court == "Campo 1"


def test_delete_unknown_block_returns_404(db: Session, admin):
    with pytest.raises(HTTPException) as exc_info:
        delete_court_block(id=999, db=db, current_user=admin)
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Blocco non trovato"


def test_athlete_cannot_manage_blocks(client, db: Session, atleta, maintenance_block, auth_headers):
    headers = auth_headers(atleta)
    payload = {
        "court": "Campo 2",
        "start_time": _at(8).isoformat(),
        "end_time": _at(9).isoformat(),
    }

    assert client.post("/api/court-blocks", json=payload, headers=headers).status_code == 403
    response = client.delete(f"/api/court-blocks?id={maintenance_block.id}", headers=headers)
    assert response.status_code == 403
    assert client.get("/api/court-blocks", headers=headers).status_code == 200
    assert db.query(CourtBlock).count() == 1


def test_block_requires_end_after_start():
    with pytest.raises(ValueError):
        CourtBlockCreate(court="Campo 1", start_time=_at(10), end_time=_at(10))
