"""
Test end-to-end tramite TestClient: autenticazione e formato degli errori
"""
from datetime import timedelta

from app.enums.booking import BookingStatus
from app.models.booking import Booking
from app.services.auth import create_refresh_token, get_password_hash
from app.utils.datetime_utils import utcnow


def _slot(hour):
    day = (utcnow() + timedelta(days=3)).replace(hour=0, minute=0, second=0, microsecond=0)
    return day + timedelta(hours=hour)


def test_root(client):
    assert client.get("/").json() == {"message": "Welcome to GST Tennis Academy API"}


def test_missing_token_returns_401(client):
    response = client.get("/api/bookings")
    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


def test_invalid_token_returns_401(client):
    response = client.get("/api/bookings", headers={"Authorization": "Bearer non-valido"})
    assert response.status_code == 401
    assert response.json() == {"error": "Non autorizzato"}


def test_refresh_token_is_not_an_access_token(client, atleta):
    token = create_refresh_token(data={"sub": atleta.email})
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_validation_error_shape(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "mario@gst-tennis.it", "full_name": "Mario Rossi", "password": "corta"},
    )
    assert response.status_code == 400
    body = response.json()
    assert "8 caratteri" in body["error"]
    assert body["details"][0]["field"] == "body.password"


def test_register_login_and_me(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "Mario@gst-tennis.it", "full_name": "Mario Rossi", "password": "Password1!"},
    )
    assert response.status_code == 201
    assert response.json()["role"] == "atleta"

    response = client.post(
        "/api/auth/token", data={"username": "mario@gst-tennis.it", "password": "Password1!"}
    )
    assert response.status_code == 200
    tokens = response.json()
    assert tokens["redirect_to"] == "/dashboard/atleta"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.json()["email"] == "mario@gst-tennis.it"

    refreshed = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200


def test_inactive_profile_cannot_login(client, db, atleta):
    atleta.hashed_password = get_password_hash("Password1!")
    atleta.is_active = False
    db.commit()

    response = client.post(
        "/api/auth/token", data={"username": atleta.email, "password": "Password1!"}
    )
    assert response.status_code == 401


def test_booking_conflict_over_http(client, db, admin, atleta, auth_headers):
    existing = Booking(
        user_id=admin.id,
        court="Campo 1",
        start_time=_slot(14),
        end_time=_slot(15),
        status=BookingStatus.CONFIRMED,
        manager_confirmed=True,
    )
    db.add(existing)
    db.commit()

    response = client.post(
        "/api/bookings",
        json={
            "user_id": atleta.id,
            "court": "Campo 1",
            "start_time": _slot(14.5).isoformat(),
            "end_time": _slot(15.5).isoformat(),
        },
        headers=auth_headers(atleta),
    )
    assert response.status_code == 409
    assert response.json() == {
        "error": "Fascia oraria non disponibile",
        "conflict": True,
        "conflicting_ids": [existing.id],
    }

    response = client.post(
        "/api/bookings",
        json={
            "user_id": atleta.id,
            "court": "Campo 1",
            "start_time": _slot(15).isoformat(),
            "end_time": _slot(16).isoformat(),
        },
        headers=auth_headers(atleta),
    )
    assert response.status_code == 201
    assert response.json()["booking"]["status"] == "pending"


def test_unknown_booking_returns_404(client, atleta, auth_headers):
    response = client.get("/api/bookings?id=999", headers=auth_headers(atleta))
    assert response.status_code == 404
    assert response.json() == {"error": "Prenotazione non trovata"}


def test_activity_logs_are_admin_only(client, admin, atleta, auth_headers):
    assert client.get("/api/activity-logs", headers=auth_headers(atleta)).status_code == 403

    client.post(
        "/api/tournaments",
        json={
            "title": "Torneo Sociale",
            "start_date": _slot(9).isoformat(),
            "max_participants": 8,
            "status": "Aperto",
        },
        headers=auth_headers(admin),
    )
    response = client.get("/api/activity-logs?limit=10", headers=auth_headers(admin))
    assert response.status_code == 200
    logs = response.json()["logs"]
    assert logs[0]["action"] == "tournament.create"
    assert logs[0]["profiles"]["email"] == admin.email
