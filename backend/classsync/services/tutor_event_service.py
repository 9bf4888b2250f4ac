"""Capacity-bounded sign-up with a waiting list.

Each (event, user) pair is in one of three states: not signed up, a
participant, or waitlisted. Every transition returns the new event plus a
``Transition`` naming what happened; ``Transition.NOOP`` means the event was
returned untouched and nothing needs to be written or logged.

Promotion and direct assignment deliberately skip the capacity check: they are
manager overrides and may leave an event above ``max_participants``.
"""

from __future__ import annotations

from enum import Enum

from ..schemas import TutorEvent


class Membership(str, Enum):
    NONE = "NONE"
    PARTICIPANT = "PARTICIPANT"
    WAITLISTED = "WAITLISTED"


class Transition(str, Enum):
    NOOP = "noop"
    JOINED = "joined"
    WAITLISTED = "waitlisted"
    LEFT = "left"
    LEFT_WAITING_LIST = "left_waiting_list"
    PROMOTED = "promoted"
    ASSIGNED = "assigned"
    KICKED = "kicked"


def membership(event: TutorEvent, user_id: str) -> Membership:
    if user_id in event.participants:
        return Membership.PARTICIPANT
    if user_id in event.waiting_list:
        return Membership.WAITLISTED
    return Membership.NONE


def is_full(event: TutorEvent) -> bool:
    return len(event.participants) >= event.max_participants


def join(event: TutorEvent, user_id: str) -> tuple[TutorEvent, Transition]:
    if membership(event, user_id) is not Membership.NONE:
        return event, Transition.NOOP
    if not is_full(event):
        return event.model_copy(update={"participants": [*event.participants, user_id]}), Transition.JOINED
    return event.model_copy(update={"waiting_list": [*event.waiting_list, user_id]}), Transition.WAITLISTED


def leave(event: TutorEvent, user_id: str) -> tuple[TutorEvent, Transition]:
    state = membership(event, user_id)
    if state is Membership.PARTICIPANT:
        participants = [uid for uid in event.participants if uid != user_id]
        return event.model_copy(update={"participants": participants}), Transition.LEFT
    if state is Membership.WAITLISTED:
        waiting_list = [uid for uid in event.waiting_list if uid != user_id]
        return event.model_copy(update={"waiting_list": waiting_list}), Transition.LEFT_WAITING_LIST
    return event, Transition.NOOP


def promote(event: TutorEvent, user_id: str) -> tuple[TutorEvent, Transition]:
    waiting_list = [uid for uid in event.waiting_list if uid != user_id]
    participants = list(event.participants)
    if user_id not in participants:
        participants.append(user_id)
    return (
        event.model_copy(update={"participants": participants, "waiting_list": waiting_list}),
        Transition.PROMOTED,
    )


def assign(event: TutorEvent, user_id: str) -> tuple[TutorEvent, Transition]:
    if user_id in event.participants:
        return event, Transition.NOOP
    waiting_list = [uid for uid in event.waiting_list if uid != user_id]
    participants = [*event.participants, user_id]
    return (
        event.model_copy(update={"participants": participants, "waiting_list": waiting_list}),
        Transition.ASSIGNED,
    )


def kick(event: TutorEvent, user_id: str) -> tuple[TutorEvent, Transition]:
    participants = [uid for uid in event.participants if uid != user_id]
    return event.model_copy(update={"participants": participants}), Transition.KICKED
