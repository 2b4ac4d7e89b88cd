from enum import Enum


class TournamentStatus(str, Enum):
    """Stati del torneo. Solo APERTO accetta nuove iscrizioni."""

    BOZZA = "Bozza"
    APERTO = "Aperto"
    CHIUSO = "Chiuso"
    IN_CORSO = "In Corso"
    COMPLETATO = "Completato"
    ANNULLATO = "Annullato"


class TournamentType(str, Enum):
    ELIMINAZIONE_DIRETTA = "eliminazione_diretta"
    GIRONE_ELIMINAZIONE = "girone_eliminazione"
    CAMPIONATO = "campionato"


class ParticipantStatus(str, Enum):
    ISCRITTO = "iscritto"
    CONFERMATO = "confermato"
    RITIRATO = "ritirato"


class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
