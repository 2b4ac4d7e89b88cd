"""
Test della politica dei ruoli
"""
import pytest

from app.enums.user_role import UserRole
from app.utils.roles import (
    can_act_for,
    can_manage_content,
    can_manage_users,
    dashboard_for_role,
    is_admin_or_gestore,
    is_coach,
    is_staff,
    parse_role,
)


@pytest.mark.parametrize(
    "role,admin,coach,staff",
    [
        (UserRole.ADMIN, True, True, True),
        (UserRole.GESTORE, True, True, True),
        (UserRole.MAESTRO, False, True, True),
        (UserRole.ATLETA, False, False, False),
    ],
)
def test_role_predicates(role, admin, coach, staff):
    assert is_admin_or_gestore(role) is admin
    assert is_coach(role) is coach
    assert is_staff(role) is staff
    assert can_manage_users(role) is admin
    assert can_manage_content(role) is admin


def test_missing_role_has_no_privileges():
    assert not is_admin_or_gestore(None)
    assert not is_coach(None)
    assert not is_staff(None)
    assert dashboard_for_role(None) == "/login"


def test_parse_role_accepts_mixed_case_and_spaces():
    assert parse_role(" Maestro ") == UserRole.MAESTRO
    assert parse_role(UserRole.ADMIN) == UserRole.ADMIN


def test_parse_role_rejects_unknown_values():
    # "coach" è solo l'etichetta del maestro, non un ruolo
    with pytest.raises(ValueError):
        parse_role("coach")
    with pytest.raises(ValueError):
        parse_role("superuser")


def test_dashboards():
    assert dashboard_for_role(UserRole.ATLETA) == "/dashboard/atleta"
    assert dashboard_for_role(UserRole.MAESTRO) == "/dashboard/maestro"
    assert dashboard_for_role(UserRole.GESTORE) == "/dashboard/admin"
    assert dashboard_for_role(UserRole.ADMIN) == "/dashboard/admin"


def test_can_act_for():
    # per sé stessi sempre
    assert can_act_for(UserRole.ATLETA, 1, 1, UserRole.ATLETA)
    # atleta per un altro atleta no
    assert not can_act_for(UserRole.ATLETA, 1, 2, UserRole.ATLETA)
    # maestro solo per gli atleti
    assert can_act_for(UserRole.MAESTRO, 1, 2, UserRole.ATLETA)
    assert not can_act_for(UserRole.MAESTRO, 1, 2, UserRole.MAESTRO)
    assert not can_act_for(UserRole.MAESTRO, 1, 2, UserRole.ADMIN)
    # admin e gestore per chiunque
    assert can_act_for(UserRole.ADMIN, 1, 2, UserRole.GESTORE)
    assert can_act_for(UserRole.GESTORE, 1, 2, UserRole.MAESTRO)
