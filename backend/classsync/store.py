"""Session and data store.

``ClassStore`` is the single owner of the current session and every shared
collection. Each mutator follows the same contract, implemented once in
``_commit``:

1. the change is applied to the in-memory state immediately;
2. the matching remote writes run in order, best-effort; a failure is logged
   and stops the remaining steps, but nothing is rolled back locally;
3. one activity-log entry is appended (and inserted remotely, best-effort).

The remote gate is decided once, at construction, from configuration.
"""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar
from dataclasses import replace
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from . import config
from .local_storage import LocalStorage
from .schemas import (
    Announcement,
    DocumentMaterial,
    Role,
    ScheduleItem,
    Subject,
    Task,
    TutorEvent,
    User,
    VideoMaterial,
    ActivityLog,
)
from .services import bootstrap_service, seating_service
from .services import tutor_event_service as events
from .services.activity_log_service import build_entry
from .services.auth_service import authenticate_locally, hash_password
from .services.identity_service import normalize_text
from .services.remote_store import (
    RemoteStore,
    ReplicationResult,
    ReplicationStep,
    delete_step,
    insert_step,
    replicate,
    update_step,
)
from .state import AppState
from .storage_config import is_remote_configured

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Reducer = Callable[[AppState], AppState]

_EDITABLE_EVENT_FIELDS = frozenset({"title", "description", "date", "max_participants"})


def _row(model: BaseModel) -> dict[str, Any]:
    return model.model_dump()


def _without(items: list[ModelT], item_id: str) -> list[ModelT]:
    return [item for item in items if getattr(item, "id", None) != item_id]


def _find(items: list[ModelT], item_id: str) -> Optional[ModelT]:
    return next((item for item in items if getattr(item, "id", None) == item_id), None)


def _swap(items: list[ModelT], updated: ModelT) -> list[ModelT]:
    return [updated if getattr(item, "id", None) == updated.id else item for item in items]


class ClassStore:
    def __init__(
        self,
        storage: LocalStorage,
        remote: RemoteStore | None = None,
        *,
        remote_enabled: bool | None = None,
        rng: random.Random | None = None,
        seed_users: Callable[[], list[User]] = bootstrap_service.generate_users,
    ):
        self.storage = storage
        self.remote = remote or RemoteStore(None)
        self.remote_enabled = is_remote_configured() if remote_enabled is None else bool(remote_enabled)
        self.is_loading = True
        self._rng = rng or random.Random()
        self._seed_users = seed_users
        self._actor: ContextVar[Optional[User]] = ContextVar(f"classsync_actor_{id(self)}", default=None)
        # Read back synchronously so a restored session is visible before loading finishes.
        self.state = AppState(current_user=self._restore_session())

    # ------------------------------------------------------------------ reads

    @property
    def current_user(self) -> Optional[User]:
        return self.state.current_user

    @property
    def acting_user(self) -> Optional[User]:
        """The user a mutation is attributed to: the request's caller, else the session."""
        return self._actor.get() or self.state.current_user

    def act_as(self, user: Optional[User]) -> None:
        self._actor.set(user)

    @property
    def users(self) -> list[User]:
        return self.state.users

    @property
    def subjects(self) -> list[Subject]:
        return self.state.subjects

    @property
    def announcements(self) -> list[Announcement]:
        return self.state.announcements

    @property
    def tasks(self) -> list[Task]:
        return self.state.tasks

    @property
    def schedule(self) -> list[ScheduleItem]:
        return self.state.schedule

    @property
    def videos(self) -> list[VideoMaterial]:
        return self.state.videos

    @property
    def materials(self) -> list[DocumentMaterial]:
        return self.state.materials

    @property
    def tutor_events(self) -> list[TutorEvent]:
        return self.state.tutor_events

    @property
    def activity_log(self) -> list[ActivityLog]:
        return self.state.activity_log

    def find_user(self, user_id: str) -> Optional[User]:
        return _find(self.state.users, user_id)

    def find_tutor_event(self, event_id: str) -> Optional[TutorEvent]:
        return _find(self.state.tutor_events, event_id)

    # ---------------------------------------------------------------- session

    def _restore_session(self) -> Optional[User]:
        raw = self.storage.get_item(config.SESSION_STORAGE_KEY)
        if not raw:
            return None
        try:
            return User.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            logger.error("Error parsing session: %s", exc)
            return None

    def _set_session(self, user: Optional[User]) -> None:
        self.state = replace(self.state, current_user=user)
        self._save_session()

    def _save_session(self) -> None:
        user = self.state.current_user
        if user is None:
            self.storage.remove_item(config.SESSION_STORAGE_KEY)
        else:
            self.storage.set_item(config.SESSION_STORAGE_KEY, user.model_dump_json())

    # ---------------------------------------------------------------- loading

    async def initialize(self) -> None:
        self.is_loading = True
        try:
            if not self.remote_enabled:
                logger.warning("Remote store credentials missing. Falling back to local data.")
                self._load_local_data()
                return
            try:
                await self._load_remote_data()
            except Exception as exc:
                logger.error("Error fetching data from remote store: %s", exc)
                self._load_local_data()
        finally:
            self.is_loading = False

    def _read_collection(self, key: str, model: type[ModelT]) -> Optional[list[ModelT]]:
        raw = self.storage.get_item(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return [model.model_validate(item) for item in data]
        except (TypeError, ValueError, ValidationError) as exc:
            logger.error("Error parsing %s from local storage: %s", key, exc)
            return None

    def _load_local_data(self) -> None:
        users = self._read_collection(config.USERS_STORAGE_KEY, User)
        subjects = self._read_collection(config.SUBJECTS_STORAGE_KEY, Subject)
        self.state = replace(
            self.state,
            users=users if users is not None else self._seed_users(),
            subjects=subjects if subjects is not None else bootstrap_service.initial_subjects(),
            announcements=bootstrap_service.initial_announcements(),
            tasks=bootstrap_service.initial_tasks(),
            schedule=bootstrap_service.initial_schedule(),
            videos=bootstrap_service.initial_videos(),
            materials=bootstrap_service.initial_materials(),
            tutor_events=bootstrap_service.initial_tutor_events(),
            activity_log=[],
        )

    async def _select(self, table: str, model: type[ModelT], **kwargs: Any) -> list[ModelT]:
        rows = await self.remote.select(table, **kwargs)
        return [model.model_validate(row) for row in rows]

    async def _load_remote_data(self) -> None:
        users = await self._select("users", User)
        if users:
            self.state = replace(self.state, users=users)
            self._revalidate_session(users)
        else:
            seeded = self._seed_users()
            await replicate(self.remote, [insert_step("users", [_row(u) for u in seeded])])
            self.state = replace(self.state, users=seeded)

        self.state = replace(
            self.state,
            subjects=await self._select("subjects", Subject),
            announcements=await self._select("announcements", Announcement, order_by="date", descending=True),
            tasks=await self._select("tasks", Task, order_by="deadline"),
            schedule=await self._select("schedule", ScheduleItem),
            videos=await self._select("videos", VideoMaterial),
            materials=await self._select("materials", DocumentMaterial),
            tutor_events=await self._select("tutor_events", TutorEvent),
            activity_log=await self._select(
                "activity_logs",
                ActivityLog,
                order_by="timestamp",
                descending=True,
                limit=config.ACTIVITY_LOG_LOAD_LIMIT,
            ),
        )

    def _revalidate_session(self, users: list[User]) -> None:
        session = self.state.current_user
        if session is None:
            return
        fresh = _find(users, session.id)
        if fresh is None:
            return
        if fresh.is_active:
            self._set_session(fresh.model_copy(update={"password": session.password}))
        else:
            self._set_session(None)

    # ------------------------------------------------------------ commit path

    def _persist_local(self, previous: AppState) -> None:
        if self.state.users is not previous.users:
            self.storage.set_item(
                config.USERS_STORAGE_KEY,
                json.dumps([u.model_dump(mode="json") for u in self.state.users]),
            )
        if self.state.subjects is not previous.subjects:
            self.storage.set_item(
                config.SUBJECTS_STORAGE_KEY,
                json.dumps([s.model_dump(mode="json") for s in self.state.subjects]),
            )

    async def _replicate(self, plan: list[ReplicationStep]) -> ReplicationResult:
        if not self.remote_enabled or not plan:
            return ReplicationResult()
        return await replicate(self.remote, plan)

    async def _commit(
        self,
        reducer: Reducer,
        plan: list[ReplicationStep],
        description: Optional[str],
    ) -> ReplicationResult:
        previous = self.state
        self.state = reducer(previous)
        if self.state.current_user is not previous.current_user:
            self._save_session()
        if not self.remote_enabled:
            self._persist_local(previous)
        result = await self._replicate(plan)
        if description is not None:
            await self.log_activity(description)
        return result

    async def log_activity(self, description: str) -> Optional[ActivityLog]:
        user = self.acting_user
        if user is None:
            return None
        entry = build_entry(user, description)
        self.state = replace(self.state, activity_log=[entry, *self.state.activity_log])
        await self._replicate([insert_step("activity_logs", _row(entry))])
        return entry

    # ------------------------------------------------------------------- auth

    async def login(self, username: str, password: str) -> bool:
        if self.remote_enabled:
            try:
                record = await self.remote.verify_password(username, password)
            except Exception as exc:
                logger.info("Remote login skipped or failed, trying fallback: %s", exc)
                record = None
            if record and record.get("is_active"):
                user = User.model_validate(record)
                self._set_session(user)
                self.act_as(user)
                await self.log_activity("Logged in (Secure RPC)")
                return True

        user = authenticate_locally(self.state.users, username, password)
        if user is None:
            return False
        self._set_session(user)
        self.act_as(user)
        await self.log_activity("Logged in")
        return True

    async def login_with_identity(self, email: str, name: str, external_id: str) -> Optional[User]:
        email = normalize_text(email)
        user = next((u for u in self.state.users if u.username == email), None)
        if user is None:
            user = User(
                id=f"g_{normalize_text(external_id)}",
                username=email,
                full_name=normalize_text(name),
                role=Role.STUDENT,
                is_active=True,
                password="",
                seat_index=None,
            )
            provisioned = user
            await self._commit(
                lambda s: replace(s, users=[*s.users, provisioned]),
                [insert_step("users", _row(provisioned))],
                None,
            )
        if not user.is_active:
            return None
        self._set_session(user)
        self.act_as(user)
        await self.log_activity("Logged in via Google")
        return user

    async def logout(self) -> None:
        user = self.acting_user
        if user is not None:
            await self.log_activity("Logged out")
        self.act_as(None)
        session = self.state.current_user
        if session is not None and (user is None or session.id == user.id):
            self._set_session(None)

    # ---------------------------------------------------------- announcements

    async def add_announcement(self, item: Announcement) -> Announcement:
        await self._commit(
            lambda s: replace(s, announcements=[item, *s.announcements]),
            [insert_step("announcements", _row(item))],
            f"Added announcement: {item.title}",
        )
        return item

    async def delete_announcement(self, announcement_id: str) -> None:
        await self._commit(
            lambda s: replace(s, announcements=_without(s.announcements, announcement_id)),
            [delete_step("announcements", id=announcement_id)],
            f"Deleted announcement ID: {announcement_id}",
        )

    # ------------------------------------------------------------------ tasks

    async def add_task(self, item: Task) -> Task:
        await self._commit(
            lambda s: replace(s, tasks=[item, *s.tasks]),
            [insert_step("tasks", _row(item))],
            f"Added task: {item.title}",
        )
        return item

    async def delete_task(self, task_id: str) -> None:
        await self._commit(
            lambda s: replace(s, tasks=_without(s.tasks, task_id)),
            [delete_step("tasks", id=task_id)],
            f"Deleted task ID: {task_id}",
        )

    async def toggle_task_completion(self, task_id: str) -> Optional[Task]:
        task = _find(self.state.tasks, task_id)
        if task is None:
            return None
        updated = task.model_copy(update={"is_completed": not task.is_completed})
        await self._commit(
            lambda s: replace(s, tasks=_swap(s.tasks, updated)),
            [update_step("tasks", {"is_completed": updated.is_completed}, id=task_id)],
            None,
        )
        return updated

    # --------------------------------------------------------------- subjects

    async def add_subject(self, subject: Subject) -> Subject:
        await self._commit(
            lambda s: replace(s, subjects=[*s.subjects, subject]),
            [insert_step("subjects", _row(subject))],
            f"Added subject: {subject.name}",
        )
        return subject

    async def delete_subject(self, subject_id: str) -> None:
        await self._commit(
            lambda s: replace(s, subjects=_without(s.subjects, subject_id)),
            [delete_step("subjects", id=subject_id)],
            f"Deleted subject ID: {subject_id}",
        )

    # --------------------------------------------------------------- schedule

    async def add_schedule_item(self, item: ScheduleItem) -> ScheduleItem:
        await self._commit(
            lambda s: replace(s, schedule=[*s.schedule, item]),
            [insert_step("schedule", _row(item))],
            f"Added schedule item for {item.day}",
        )
        return item

    async def delete_schedule_item(self, item_id: str) -> None:
        await self._commit(
            lambda s: replace(s, schedule=_without(s.schedule, item_id)),
            [delete_step("schedule", id=item_id)],
            f"Deleted schedule item ID: {item_id}",
        )

    # ------------------------------------------------------- videos/materials

    async def add_video(self, video: VideoMaterial) -> VideoMaterial:
        await self._commit(
            lambda s: replace(s, videos=[video, *s.videos]),
            [insert_step("videos", _row(video))],
            f"Added video: {video.title}",
        )
        return video

    async def delete_video(self, video_id: str) -> None:
        await self._commit(
            lambda s: replace(s, videos=_without(s.videos, video_id)),
            [delete_step("videos", id=video_id)],
            f"Deleted video ID: {video_id}",
        )

    async def add_material(self, material: DocumentMaterial) -> DocumentMaterial:
        await self._commit(
            lambda s: replace(s, materials=[material, *s.materials]),
            [insert_step("materials", _row(material))],
            f"Added material: {material.title}",
        )
        return material

    async def delete_material(self, material_id: str) -> None:
        await self._commit(
            lambda s: replace(s, materials=_without(s.materials, material_id)),
            [delete_step("materials", id=material_id)],
            f"Deleted material ID: {material_id}",
        )

    # ----------------------------------------------------------- tutor events

    async def add_tutor_event(self, event: TutorEvent) -> TutorEvent:
        await self._commit(
            lambda s: replace(s, tutor_events=[event, *s.tutor_events]),
            [insert_step("tutor_events", _row(event))],
            f"Added tutor event: {event.title}",
        )
        return event

    async def edit_tutor_event(self, event_id: str, updates: dict[str, Any]) -> Optional[TutorEvent]:
        event = _find(self.state.tutor_events, event_id)
        if event is None:
            return None
        changes = {key: value for key, value in updates.items() if key in _EDITABLE_EVENT_FIELDS}
        updated = TutorEvent.model_validate({**event.model_dump(), **changes})
        await self._commit(
            lambda s: replace(s, tutor_events=_swap(s.tutor_events, updated)),
            [update_step("tutor_events", {key: getattr(updated, key) for key in changes}, id=event_id)],
            f"Edited tutor event ID: {event_id}",
        )
        return updated

    async def delete_tutor_event(self, event_id: str) -> None:
        await self._commit(
            lambda s: replace(s, tutor_events=_without(s.tutor_events, event_id)),
            [delete_step("tutor_events", id=event_id)],
            f"Deleted tutor event ID: {event_id}",
        )

    async def _apply_event_transition(
        self,
        event_id: str,
        user_id: str,
        transition: Callable[[TutorEvent, str], tuple[TutorEvent, events.Transition]],
        describe: Callable[[events.Transition], str],
    ) -> Optional[tuple[TutorEvent, events.Transition]]:
        event = _find(self.state.tutor_events, event_id)
        if event is None:
            return None
        updated, outcome = transition(event, user_id)
        if outcome is events.Transition.NOOP:
            return event, outcome

        values = {}
        if updated.participants != event.participants:
            values["participants"] = updated.participants
        if updated.waiting_list != event.waiting_list:
            values["waiting_list"] = updated.waiting_list
        if outcome in (events.Transition.PROMOTED, events.Transition.ASSIGNED):
            values = {"participants": updated.participants, "waiting_list": updated.waiting_list}
        plan = [update_step("tutor_events", values, id=event_id)] if values else []

        await self._commit(
            lambda s: replace(s, tutor_events=_swap(s.tutor_events, updated)),
            plan,
            describe(outcome),
        )
        return updated, outcome

    async def join_tutor_event(self, event_id: str) -> Optional[tuple[TutorEvent, events.Transition]]:
        user = self.acting_user
        if user is None:
            return None

        def describe(outcome: events.Transition) -> str:
            if outcome is events.Transition.WAITLISTED:
                return f"Joined waiting list for event ID: {event_id}"
            return f"Joined tutor event ID: {event_id}"

        return await self._apply_event_transition(event_id, user.id, events.join, describe)

    async def leave_tutor_event(self, event_id: str) -> Optional[tuple[TutorEvent, events.Transition]]:
        user = self.acting_user
        if user is None:
            return None

        def describe(outcome: events.Transition) -> str:
            if outcome is events.Transition.LEFT_WAITING_LIST:
                return f"Left waiting list for event ID: {event_id}"
            return f"Left tutor event ID: {event_id}"

        return await self._apply_event_transition(event_id, user.id, events.leave, describe)

    async def promote_from_waiting_list(self, event_id: str, user_id: str) -> Optional[tuple[TutorEvent, events.Transition]]:
        return await self._apply_event_transition(
            event_id,
            user_id,
            events.promote,
            lambda _: f"Promoted user {user_id} from waiting list in event {event_id}",
        )

    async def assign_user_to_event(self, event_id: str, user_id: str) -> Optional[tuple[TutorEvent, events.Transition]]:
        return await self._apply_event_transition(
            event_id,
            user_id,
            events.assign,
            lambda _: f"Assigned user {user_id} to event {event_id}",
        )

    async def kick_from_event(self, event_id: str, user_id: str) -> Optional[tuple[TutorEvent, events.Transition]]:
        return await self._apply_event_transition(
            event_id,
            user_id,
            events.kick,
            lambda _: f"Removed user {user_id} from event {event_id}",
        )

    # ------------------------------------------------------------------ users

    def _update_user(self, user_id: str, changes: dict[str, Any]) -> Reducer:
        def reducer(s: AppState) -> AppState:
            return replace(
                s,
                users=[u.model_copy(update=changes) if u.id == user_id else u for u in s.users],
            )

        return reducer

    async def update_user_role(self, user_id: str, role: Role) -> None:
        role = Role(role)
        await self._commit(
            self._update_user(user_id, {"role": role}),
            [update_step("users", {"role": role}, id=user_id)],
            f"Updated user {user_id} to role {role.value}",
        )

    async def update_user_status(self, user_id: str, is_active: bool) -> None:
        is_active = bool(is_active)
        await self._commit(
            self._update_user(user_id, {"is_active": is_active}),
            [update_step("users", {"is_active": is_active}, id=user_id)],
            f"Updated user {user_id} active status to {str(is_active).lower()}",
        )

    async def update_user_profile(
        self,
        user_id: str,
        *,
        full_name: str | None = None,
        password: str | None = None,
    ) -> None:
        changes: dict[str, Any] = {}
        if full_name:
            changes["full_name"] = full_name
        if password:
            changes["password"] = hash_password(password)

        def reducer(s: AppState) -> AppState:
            s = self._update_user(user_id, changes)(s)
            if s.current_user is not None and s.current_user.id == user_id:
                s = replace(s, current_user=s.current_user.model_copy(update=changes))
            return s

        plan = [update_step("users", changes, id=user_id)] if changes else []
        await self._commit(reducer, plan, f"User {user_id} updated their profile")

    # ---------------------------------------------------------------- seating

    async def update_seat(self, user_id: str, seat_index: Optional[int]) -> ReplicationResult:
        """Seat a student (displacing the occupant) or clear their seat.

        Remotely this is two ordered writes: vacate whoever holds the seat,
        then seat the student. If only the first lands, the remote roster has
        an empty seat while the local one shows the new assignment.
        """
        if seat_index is None:
            users = seating_service.vacate_seat(self.state.users, user_id)
            plan = [update_step("users", {"seat_index": None}, id=user_id)]
        else:
            users, _ = seating_service.assign_seat(self.state.users, user_id, seat_index)
            plan = [
                update_step("users", {"seat_index": None}, seat_index=seat_index),
                update_step("users", {"seat_index": seat_index}, id=user_id),
            ]
        return await self._commit(
            lambda s: replace(s, users=users),
            plan,
            f"Updated seat for user {user_id}",
        )

    async def reset_seats(self) -> ReplicationResult:
        return await self._commit(
            lambda s: replace(s, users=seating_service.reset_seats(s.users)),
            [update_step("users", {"seat_index": None})],
            "Reset all seats",
        )

    async def randomize_seats(self) -> ReplicationResult:
        seating = seating_service.shuffle_seating(self.state.users, self._rng)
        plan = [
            update_step("users", {"seat_index": seat}, id=student_id)
            for student_id, seat in seating.items()
        ]
        return await self._commit(
            lambda s: replace(s, users=seating_service.apply_seating(s.users, seating)),
            plan,
            "Randomized seats",
        )
