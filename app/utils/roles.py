"""
Politica dei ruoli. Il ruolo è un enum chiuso (UserRole) e ogni funzione
di autorizzazione è definita su tutti i suoi valori.
"""

from typing import Optional, Union

from app.enums.user_role import UserRole

ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.GESTORE})
STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.GESTORE, UserRole.MAESTRO})

ROLE_LABELS = {
    UserRole.ATLETA: "Atleta",
    UserRole.MAESTRO: "Coach",
    UserRole.GESTORE: "Gestore",
    UserRole.ADMIN: "Admin",
}

ROLE_DASHBOARDS = {
    UserRole.ATLETA: "/dashboard/atleta",
    UserRole.MAESTRO: "/dashboard/maestro",
    UserRole.GESTORE: "/dashboard/admin",
    UserRole.ADMIN: "/dashboard/admin",
}


def parse_role(value: Union[str, UserRole]) -> UserRole:
    """
    Converte una stringa in UserRole.

    Raises:
        ValueError: se la stringa non corrisponde a nessun ruolo
    """
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Ruolo non valido: {value}")


def is_admin_or_gestore(role: Optional[UserRole]) -> bool:
    return role in ADMIN_ROLES


def is_coach(role: Optional[UserRole]) -> bool:
    return role == UserRole.MAESTRO or is_admin_or_gestore(role)


def is_staff(role: Optional[UserRole]) -> bool:
    return role in STAFF_ROLES


def can_manage_users(role: Optional[UserRole]) -> bool:
    return is_admin_or_gestore(role)


def can_manage_content(role: Optional[UserRole]) -> bool:
    return is_admin_or_gestore(role)


def can_act_for(actor_role: UserRole, actor_id: int, target_id: int, target_role: Optional[UserRole]) -> bool:
    """
    Indica se un utente può agire per conto di un altro (iscrizioni, disiscrizioni).

    - chiunque può agire per sé stesso
    - admin/gestore possono agire per chiunque
    - un maestro può agire solo per gli atleti
    """
    if actor_id == target_id:
        return True
    if is_admin_or_gestore(actor_role):
        return True
    if actor_role == UserRole.MAESTRO:
        return target_role == UserRole.ATLETA
    return False


def dashboard_for_role(role: Optional[UserRole]) -> str:
    if role is None:
        return "/login"
    return ROLE_DASHBOARDS[role]
