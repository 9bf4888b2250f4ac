from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ...config import DEFAULT_TUTOR_EVENT_CAPACITY
from ...schemas import TutorEvent, User
from ...services.identity_service import mint_id
from ...services.policy import Action, can
from ...services.tutor_event_service import is_full, membership
from ...store import ClassStore
from ..deps import not_found, require, require_loaded, require_session

router = APIRouter(prefix="/tutor-events")


class TutorEventCreateRequest(BaseModel):
    title: str
    description: str = ""
    date: datetime
    max_participants: int = Field(default=DEFAULT_TUTOR_EVENT_CAPACITY, ge=1)


class TutorEventUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    max_participants: Optional[int] = Field(default=None, ge=1)


class MemberRequest(BaseModel):
    user_id: str


def _event_payload(event: TutorEvent, viewer: User) -> dict:
    return {
        **event.model_dump(mode="json"),
        "is_full": is_full(event),
        "membership": membership(event, viewer.id).value,
    }


def _managed_event(store: ClassStore, event_id: str, user: User) -> TutorEvent:
    event = store.find_tutor_event(event_id)
    if event is None:
        raise not_found("Tutor event", event_id)
    if not can(Action.MANAGE_TUTOR_EVENT, user.role, is_owner=event.tutor_id == user.id):
        raise HTTPException(status_code=403, detail="Only the organizer or staff can manage this event")
    return event


@router.get("")
async def list_events(
    user: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    return [_event_payload(event, user) for event in store.tutor_events]


@router.post("", status_code=201)
async def create_event(
    payload: TutorEventCreateRequest,
    user: User = Depends(require(Action.CREATE_TUTOR_EVENT)),
    store: ClassStore = Depends(require_loaded),
):
    event = TutorEvent(
        id=mint_id(),
        title=payload.title,
        description=payload.description,
        date=payload.date,
        tutor_id=user.id,
        tutor_name=user.full_name,
        max_participants=payload.max_participants,
        participants=[],
        waiting_list=[],
    )
    await store.add_tutor_event(event)
    return _event_payload(event, user)


@router.patch("/{event_id}")
async def edit_event(
    event_id: str,
    payload: TutorEventUpdateRequest,
    user: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    _managed_event(store, event_id, user)
    event = await store.edit_tutor_event(event_id, payload.model_dump(exclude_none=True))
    return _event_payload(event, user)


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    user: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    _managed_event(store, event_id, user)
    await store.delete_tutor_event(event_id)
    return {"ok": True}


@router.post("/{event_id}/join")
async def join_event(
    event_id: str,
    user: User = Depends(require(Action.JOIN_TUTOR_EVENT)),
    store: ClassStore = Depends(require_loaded),
):
    outcome = await store.join_tutor_event(event_id)
    if outcome is None:
        raise not_found("Tutor event", event_id)
    event, transition = outcome
    return {**_event_payload(event, user), "transition": transition.value}


@router.post("/{event_id}/leave")
async def leave_event(
    event_id: str,
    user: User = Depends(require(Action.JOIN_TUTOR_EVENT)),
    store: ClassStore = Depends(require_loaded),
):
    outcome = await store.leave_tutor_event(event_id)
    if outcome is None:
        raise not_found("Tutor event", event_id)
    event, transition = outcome
    return {**_event_payload(event, user), "transition": transition.value}


async def _manage_member(store: ClassStore, event_id: str, user: User, member_id: str, operation) -> dict:
    _managed_event(store, event_id, user)
    if store.find_user(member_id) is None:
        raise not_found("User", member_id)
    event, transition = await operation(event_id, member_id)
    return {**_event_payload(event, user), "transition": transition.value}


@router.post("/{event_id}/promote")
async def promote(
    event_id: str,
    payload: MemberRequest,
    user: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    return await _manage_member(store, event_id, user, payload.user_id, store.promote_from_waiting_list)


@router.post("/{event_id}/assign")
async def assign(
    event_id: str,
    payload: MemberRequest,
    user: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    return await _manage_member(store, event_id, user, payload.user_id, store.assign_user_to_event)


@router.post("/{event_id}/kick")
async def kick(
    event_id: str,
    payload: MemberRequest,
    user: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    return await _manage_member(store, event_id, user, payload.user_id, store.kick_from_event)
