"""
Eccezioni di dominio sollevate da crud e utils.
I router le traducono in HTTPException con lo status code appropriato.
"""


class AcademyError(ValueError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BookingWindowError(AcademyError):
    status_code = 400


class BookingConflictError(AcademyError):
    status_code = 409

    def __init__(self, message: str = "Fascia oraria non disponibile", conflicting_ids=None):
        super().__init__(message)
        self.conflicting_ids = conflicting_ids or []


class CourtBlockedError(BookingConflictError):
    """Il campo è bloccato dal gestore nella fascia richiesta."""

    def __init__(self, message: str = "Campo non disponibile", blocked_ids=None):
        super().__init__(message)
        self.blocked_ids = blocked_ids or []


class BookingBatchConflictError(AcademyError):
    status_code = 409

    def __init__(self, conflicts):
        super().__init__(f"{len(conflicts)} slot non disponibili")
        self.conflicts = conflicts


class BookingReferenceError(AcademyError):
    """Maestro o partecipante inesistente."""

    status_code = 400


class TournamentNotFoundError(AcademyError):
    status_code = 404


class TournamentClosedError(AcademyError):
    status_code = 409


class TournamentFullError(AcademyError):
    status_code = 409


class AlreadyEnrolledError(AcademyError):
    status_code = 409


class InviteCodeError(AcademyError):
    """Codice invito non valido (404), scaduto o esaurito (410)."""

    def __init__(self, message: str, status_code: int = 410):
        super().__init__(message)
        self.status_code = status_code


def to_http_exception(exc: AcademyError):
    """Converte un errore di dominio nella HTTPException restituita dai router."""
    from fastapi import HTTPException

    if isinstance(exc, BookingConflictError):
        detail = {
            "error": exc.message,
            "conflict": True,
            "conflicting_ids": exc.conflicting_ids,
        }
        if isinstance(exc, CourtBlockedError):
            detail["blocked_ids"] = exc.blocked_ids
        return HTTPException(status_code=exc.status_code, detail=detail)
    if isinstance(exc, BookingBatchConflictError):
        return HTTPException(
            status_code=exc.status_code,
            detail={"error": exc.message, "conflict": True, "conflicts": exc.conflicts},
        )
    return HTTPException(status_code=exc.status_code, detail=exc.message)
