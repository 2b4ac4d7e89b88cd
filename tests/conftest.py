"""
Configurazione condivisa per i test pytest
"""
from datetime import timedelta

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db

# Importa tutti i modelli per registrare le tabelle su Base
from app import models  # noqa: F401
from app.enums.tournament import TournamentStatus, TournamentType
from app.enums.user_role import UserRole
from app.models.profile import Profile
from app.models.tournament import Tournament
from app.services.auth import create_access_token
from app.utils.datetime_utils import utcnow
from app.utils.rate_limiter import limiter


# Database in memoria per i test
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def reset_rate_limits(monkeypatch):
    """Limiti disattivati; i test sul rate limiting li riattivano"""
    monkeypatch.setattr(limiter, "enabled", False)
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def http_request():
    """Richiesta HTTP minima per chiamare direttamente le route limitate"""
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/",
            "query_string": b"",
            "headers": [(b"user-agent", b"pytest")],
            "client": ("127.0.0.1", 50000),
        }
    )


@pytest.fixture(autouse=True)
def no_smtp(monkeypatch):
    """Le email vengono solo registrate in email_logs, mai spedite"""
    from app.services.email import email_service

    monkeypatch.setattr(email_service, "smtp_host", None)


@pytest.fixture
def db():
    """Crea il database di test e lo svuota alla fine"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def override_get_db(db):
    """Override di get_db per i test"""
    def _get_db():
        try:
            yield db
        finally:
            pass
    return _get_db


@pytest.fixture
def client(override_get_db):
    from app.main import app

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _make_profile(db, email, full_name, role, **kwargs):
    profile = Profile(
        email=email,
        full_name=full_name,
        role=role,
        hashed_password="hashed",
        is_active=True,
        **kwargs,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def admin(db):
    return _make_profile(db, "admin@gst-tennis.it", "Anna Admin", UserRole.ADMIN)


@pytest.fixture
def gestore(db):
    return _make_profile(db, "gestore@gst-tennis.it", "Giulio Gestore", UserRole.GESTORE)


@pytest.fixture
def maestro(db):
    return _make_profile(db, "maestro@gst-tennis.it", "Marco Maestro", UserRole.MAESTRO)


@pytest.fixture
def atleta(db):
    return _make_profile(db, "atleta@gst-tennis.it", "Alice Atleta", UserRole.ATLETA)


@pytest.fixture
def other_atleta(db):
    return _make_profile(db, "luca@gst-tennis.it", "Luca Rossi", UserRole.ATLETA)


@pytest.fixture
def make_profile(db):
    """Factory per creare profili aggiuntivi"""
    counter = {"n": 0}

    def _factory(role=UserRole.ATLETA, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        return _make_profile(db, f"utente{n}@gst-tennis.it", f"Utente Numero {n}", role, **kwargs)

    return _factory


@pytest.fixture
def open_tournament(db, admin):
    """Torneo a eliminazione diretta da 8 posti con iscrizioni aperte"""
    tournament = Tournament(
        title="Torneo di Primavera",
        start_date=utcnow() + timedelta(days=14),
        tournament_type=TournamentType.ELIMINAZIONE_DIRETTA,
        max_participants=8,
        status=TournamentStatus.APERTO,
        created_by=admin.id,
    )
    db.add(tournament)
    db.commit()
    db.refresh(tournament)
    return tournament


@pytest.fixture
def auth_headers():
    def _headers(profile):
        token = create_access_token(data={"sub": profile.email})
        return {"Authorization": f"Bearer {token}"}

    return _headers
