from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...config import SCHEDULE_DAYS
from ...schemas import Announcement, AnnouncementType, ScheduleItem, Subject, Task, User
from ...services.identity_service import mint_id
from ...services.policy import Action
from ...store import ClassStore
from ..deps import not_found, require, require_loaded, require_session

router = APIRouter()


class SubjectCreateRequest(BaseModel):
    name: str
    code: str = ""
    teacher: str = ""


class AnnouncementCreateRequest(BaseModel):
    title: str
    content: str = ""
    type: AnnouncementType = "NORMAL"


class TaskCreateRequest(BaseModel):
    title: str
    description: str = ""
    subject: str = ""
    deadline: datetime


class ScheduleItemCreateRequest(BaseModel):
    day: str
    time: str
    subject: str = ""
    room: str = ""


# ---------------------------------------------------------------- subjects


@router.get("/subjects")
async def list_subjects(
    _: User = Depends(require(Action.VIEW_SUBJECTS)),
    store: ClassStore = Depends(require_loaded),
):
    return [s.model_dump(mode="json") for s in store.subjects]


@router.post("/subjects", status_code=201)
async def add_subject(
    payload: SubjectCreateRequest,
    _: User = Depends(require(Action.MANAGE_SUBJECTS)),
    store: ClassStore = Depends(require_loaded),
):
    subject = await store.add_subject(Subject(id=mint_id(), **payload.model_dump()))
    return subject.model_dump(mode="json")


@router.delete("/subjects/{subject_id}")
async def delete_subject(
    subject_id: str,
    _: User = Depends(require(Action.MANAGE_SUBJECTS)),
    store: ClassStore = Depends(require_loaded),
):
    if not any(s.id == subject_id for s in store.subjects):
        raise not_found("Subject", subject_id)
    await store.delete_subject(subject_id)
    return {"ok": True}


# ----------------------------------------------------------- announcements


@router.get("/announcements")
async def list_announcements(
    _: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    return [a.model_dump(mode="json") for a in store.announcements]


@router.post("/announcements", status_code=201)
async def add_announcement(
    payload: AnnouncementCreateRequest,
    user: User = Depends(require(Action.ADD_ANNOUNCEMENT)),
    store: ClassStore = Depends(require_loaded),
):
    announcement = Announcement(
        id=mint_id(),
        title=payload.title,
        content=payload.content,
        type=payload.type,
        date=datetime.now(timezone.utc),
        author_id=user.id,
        author_name=user.full_name,
    )
    await store.add_announcement(announcement)
    return announcement.model_dump(mode="json")


@router.delete("/announcements/{announcement_id}")
async def delete_announcement(
    announcement_id: str,
    _: User = Depends(require(Action.ADD_ANNOUNCEMENT)),
    store: ClassStore = Depends(require_loaded),
):
    if not any(a.id == announcement_id for a in store.announcements):
        raise not_found("Announcement", announcement_id)
    await store.delete_announcement(announcement_id)
    return {"ok": True}


# ------------------------------------------------------------------- tasks


@router.get("/tasks")
async def list_tasks(
    status: Literal["ALL", "ACTIVE", "COMPLETED"] = "ALL",
    _: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    tasks = store.tasks
    if status == "ACTIVE":
        tasks = [t for t in tasks if not t.is_completed]
    elif status == "COMPLETED":
        tasks = [t for t in tasks if t.is_completed]
    return [t.model_dump(mode="json") for t in tasks]


@router.post("/tasks", status_code=201)
async def add_task(
    payload: TaskCreateRequest,
    user: User = Depends(require(Action.MANAGE_TASKS)),
    store: ClassStore = Depends(require_loaded),
):
    task = Task(id=mint_id(), created_by=user.role, is_completed=False, **payload.model_dump())
    await store.add_task(task)
    return task.model_dump(mode="json")


@router.post("/tasks/{task_id}/toggle")
async def toggle_task(
    task_id: str,
    _: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    task = await store.toggle_task_completion(task_id)
    if task is None:
        raise not_found("Task", task_id)
    return task.model_dump(mode="json")


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    _: User = Depends(require(Action.MANAGE_TASKS)),
    store: ClassStore = Depends(require_loaded),
):
    if not any(t.id == task_id for t in store.tasks):
        raise not_found("Task", task_id)
    await store.delete_task(task_id)
    return {"ok": True}


# ---------------------------------------------------------------- schedule


def _schedule_order(item: ScheduleItem) -> tuple[int, str]:
    day = SCHEDULE_DAYS.index(item.day) if item.day in SCHEDULE_DAYS else len(SCHEDULE_DAYS)
    return day, item.time


@router.get("/schedule")
async def list_schedule(
    _: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    return [item.model_dump(mode="json") for item in sorted(store.schedule, key=_schedule_order)]


@router.post("/schedule", status_code=201)
async def add_schedule_item(
    payload: ScheduleItemCreateRequest,
    _: User = Depends(require(Action.MANAGE_SCHEDULE)),
    store: ClassStore = Depends(require_loaded),
):
    item = await store.add_schedule_item(ScheduleItem(id=mint_id(), **payload.model_dump()))
    return item.model_dump(mode="json")


@router.delete("/schedule/{item_id}")
async def delete_schedule_item(
    item_id: str,
    _: User = Depends(require(Action.MANAGE_SCHEDULE)),
    store: ClassStore = Depends(require_loaded),
):
    if not any(item.id == item_id for item in store.schedule):
        raise not_found("Schedule item", item_id)
    await store.delete_schedule_item(item_id)
    return {"ok": True}
