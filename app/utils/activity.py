import logging
from typing import Any, Dict, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


def request_metadata(request: Optional[Request]) -> Dict[str, Optional[str]]:
    """IP e user agent della richiesta, se disponibile"""
    if request is None:
        return {"ip_address": None, "user_agent": None}

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return {
        "ip_address": ip_address,
        "user_agent": request.headers.get("user-agent"),
    }


def log_activity(
    db: Session,
    user_id: Optional[int],
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Any = None,
    metadata: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> Optional[ActivityLog]:
    """
    Registra un'azione nel log attività (es. "booking.create").

    Il log è un effetto collaterale: un errore viene registrato nei log
    applicativi e la funzione restituisce None senza sollevare eccezioni.
    """
    try:
        entry = ActivityLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            details=metadata or {},
            **request_metadata(request),
        )
        db.add(entry)
        db.commit()
        return entry
    except Exception as e:
        db.rollback()
        logger.error(f"Errore registrando l'attività {action}: {e}")
        return None
