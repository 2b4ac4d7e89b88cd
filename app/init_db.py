from sqlalchemy.orm import Session
from app.enums.user_role import UserRole
from app.models.profile import Profile
from app.services.auth import get_password_hash
import logging
import os

logger = logging.getLogger(__name__)


def create_initial_admin(db: Session):
    """
    Crea il profilo admin iniziale da INITIAL_ADMIN_EMAIL e
    INITIAL_ADMIN_PASSWORD se la tabella profiles è vuota.
    """
    email = os.getenv("INITIAL_ADMIN_EMAIL")
    password = os.getenv("INITIAL_ADMIN_PASSWORD")
    if not email or not password:
        logger.info("INITIAL_ADMIN_EMAIL/INITIAL_ADMIN_PASSWORD non impostate, nessun admin creato.")
        return None

    if db.query(Profile).count() > 0:
        logger.info("Esistono già profili, nessun admin iniziale creato.")
        return None

    admin = Profile(
        email=email.strip().lower(),
        full_name=os.getenv("INITIAL_ADMIN_NAME", "Amministratore"),
        role=UserRole.ADMIN,
        hashed_password=get_password_hash(password),
        is_active=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info(f"Admin iniziale creato: {admin.email}")
    return admin
