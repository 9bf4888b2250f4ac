"""Who may do what, keyed by role."""

from __future__ import annotations

from enum import Enum

from ..schemas import Role


class Action(str, Enum):
    MANAGE_USERS = "manage_users"
    VIEW_ACTIVITY_LOG = "view_activity_log"
    ADD_ANNOUNCEMENT = "add_announcement"
    MANAGE_TASKS = "manage_tasks"
    VIEW_SUBJECTS = "view_subjects"
    MANAGE_SUBJECTS = "manage_subjects"
    MANAGE_SCHEDULE = "manage_schedule"
    MANAGE_SEATS = "manage_seats"
    MANAGE_VIDEOS = "manage_videos"
    MANAGE_MATERIALS = "manage_materials"
    CREATE_TUTOR_EVENT = "create_tutor_event"
    JOIN_TUTOR_EVENT = "join_tutor_event"
    MANAGE_TUTOR_EVENT = "manage_tutor_event"


_ALLOWED_ROLES: dict[Action, frozenset[Role]] = {
    Action.MANAGE_USERS: frozenset({Role.ADMIN}),
    Action.VIEW_ACTIVITY_LOG: frozenset({Role.ADMIN}),
    Action.ADD_ANNOUNCEMENT: frozenset({Role.KOMTI, Role.WAKOMTI, Role.ADMIN}),
    Action.MANAGE_TASKS: frozenset({Role.KURIKULUM, Role.SEKRETARIS, Role.ADMIN}),
    Action.VIEW_SUBJECTS: frozenset(
        {Role.ADMIN, Role.KURIKULUM, Role.IT_LOGISTIK, Role.KOMTI, Role.SEKRETARIS}
    ),
    Action.MANAGE_SUBJECTS: frozenset({Role.ADMIN, Role.KURIKULUM}),
    Action.MANAGE_SCHEDULE: frozenset({Role.ADMIN, Role.KURIKULUM}),
    Action.MANAGE_SEATS: frozenset({Role.ADMIN, Role.KURIKULUM}),
    Action.MANAGE_VIDEOS: frozenset({Role.IT_LOGISTIK, Role.KURIKULUM, Role.ADMIN}),
    Action.MANAGE_MATERIALS: frozenset({Role.SEKRETARIS, Role.KURIKULUM, Role.ADMIN}),
    Action.CREATE_TUTOR_EVENT: frozenset({Role.MURID_BIBILUNG, Role.ADMIN}),
    Action.JOIN_TUTOR_EVENT: frozenset({Role.STUDENT, Role.MURID_BIBILUNG}),
    Action.MANAGE_TUTOR_EVENT: frozenset({Role.ADMIN, Role.KURIKULUM}),
}

# Actions that the owner of a record may perform regardless of role.
_OWNER_ACTIONS = frozenset({Action.MANAGE_TUTOR_EVENT})


def can(action: Action, role: Role | str | None, *, is_owner: bool = False) -> bool:
    if is_owner and action in _OWNER_ACTIONS:
        return True
    if role is None:
        return False
    try:
        normalized = Role(role)
    except ValueError:
        return False
    return normalized in _ALLOWED_ROLES.get(action, frozenset())


def can_modify_account(target_role: Role | str) -> bool:
    """Administrator accounts are locked against role/status changes."""
    try:
        return Role(target_role) != Role.ADMIN
    except ValueError:
        return True
