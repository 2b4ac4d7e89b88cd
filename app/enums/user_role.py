from enum import Enum


class UserRole(str, Enum):
    """Ruoli degli utenti dell'accademia"""

    ADMIN = "admin"
    GESTORE = "gestore"
    MAESTRO = "maestro"
    ATLETA = "atleta"
