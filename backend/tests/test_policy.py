"""Tests for the role table."""
import pytest

from classsync.schemas import Role
from classsync.services.policy import Action, can, can_modify_account


@pytest.mark.parametrize(
    "action, allowed",
    [
        (Action.MANAGE_USERS, {Role.ADMIN}),
        (Action.ADD_ANNOUNCEMENT, {Role.ADMIN, Role.KOMTI, Role.WAKOMTI}),
        (Action.MANAGE_TASKS, {Role.ADMIN, Role.KURIKULUM, Role.SEKRETARIS}),
        (Action.MANAGE_SEATS, {Role.ADMIN, Role.KURIKULUM}),
        (Action.MANAGE_VIDEOS, {Role.ADMIN, Role.KURIKULUM, Role.IT_LOGISTIK}),
        (Action.MANAGE_MATERIALS, {Role.ADMIN, Role.KURIKULUM, Role.SEKRETARIS}),
        (Action.CREATE_TUTOR_EVENT, {Role.ADMIN, Role.MURID_BIBILUNG}),
        (Action.JOIN_TUTOR_EVENT, {Role.STUDENT, Role.MURID_BIBILUNG}),
    ],
)
def test_allowed_roles(action: Action, allowed: set) -> None:
    for role in Role:
        assert can(action, role) is (role in allowed), role


def test_organizer_may_manage_own_event() -> None:
    assert not can(Action.MANAGE_TUTOR_EVENT, Role.MURID_BIBILUNG)
    assert can(Action.MANAGE_TUTOR_EVENT, Role.MURID_BIBILUNG, is_owner=True)
    assert not can(Action.MANAGE_USERS, Role.STUDENT, is_owner=True)


def test_unknown_or_missing_role_is_denied() -> None:
    assert not can(Action.MANAGE_TASKS, None)
    assert not can(Action.MANAGE_TASKS, "JANITOR")
    assert can(Action.MANAGE_TASKS, "KURIKULUM")


def test_admin_accounts_are_protected() -> None:
    assert not can_modify_account(Role.ADMIN)
    assert can_modify_account(Role.STUDENT)
