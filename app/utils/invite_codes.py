"""
Validazione e consumo dei codici invito.

Il consumo è un unico UPDATE condizionato: il decremento avviene solo se
restano usi (o se il codice è illimitato), quindi due registrazioni
concorrenti non possono superare max_uses.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from app.models.invite_code import InviteCode, InviteCodeUse
from app.utils.datetime_utils import utcnow
from app.utils.exceptions import InviteCodeError

logger = logging.getLogger(__name__)


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def check_invite_code(invite_code: InviteCode, now: Optional[datetime] = None) -> None:
    """
    Raises:
        InviteCodeError: 410 se scaduto o esaurito
    """
    now = now or utcnow()
    if invite_code.expires_at is not None and invite_code.expires_at < now:
        raise InviteCodeError("Codice invito scaduto", status_code=410)
    if invite_code.uses_remaining is not None and invite_code.uses_remaining <= 0:
        raise InviteCodeError("Codice invito esaurito", status_code=410)


def validate_invite_code(db: Session, code: Optional[str]) -> InviteCode:
    """
    Restituisce il codice invito se utilizzabile.

    Raises:
        InviteCodeError: 400 codice mancante, 404 sconosciuto, 410 scaduto o esaurito
    """
    code = normalize_code(code)
    if not code:
        raise InviteCodeError("Codice invito mancante", status_code=400)

    invite_code = db.query(InviteCode).filter(InviteCode.code == code).first()
    if not invite_code:
        raise InviteCodeError("Codice invito non valido", status_code=404)

    check_invite_code(invite_code)
    return invite_code


def consume_invite_code(
    db: Session, code: Optional[str], user_id: int, commit: bool = True
) -> InviteCode:
    """
    Consuma un uso del codice e registra l'utilizzo in invite_code_uses.

    Con commit=False il chiamante completa la transazione (es. registrazione
    del profilo insieme al consumo del codice).

    Raises:
        InviteCodeError: come validate_invite_code; 410 se il codice viene
            esaurito da una richiesta concorrente
    """
    invite_code = validate_invite_code(db, code)

    result = db.execute(
        update(InviteCode)
        .where(InviteCode.id == invite_code.id)
        .where(
            or_(InviteCode.uses_remaining.is_(None), InviteCode.uses_remaining > 0)
        )
        .values(uses_remaining=InviteCode.uses_remaining - 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        logger.info(f"Codice invito {invite_code.code} esaurito durante il consumo")
        raise InviteCodeError("Codice invito esaurito", status_code=410)

    db.add(InviteCodeUse(invite_code_id=invite_code.id, user_id=user_id))
    if commit:
        db.commit()
    else:
        db.flush()
    db.refresh(invite_code)
    logger.info(f"Codice invito {invite_code.code} usato dall'utente {user_id}")
    return invite_code
