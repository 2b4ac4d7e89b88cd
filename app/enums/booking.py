from enum import Enum


class BookingType(str, Enum):
    CAMPO = "campo"
    LEZIONE_PRIVATA = "lezione_privata"
    LEZIONE_GRUPPO = "lezione_gruppo"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ParticipantType(str, Enum):
    ATLETA = "atleta"
    OSPITE = "ospite"
